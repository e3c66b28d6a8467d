from __future__ import annotations

from typing import Any


class APIError(Exception):
    def __init__(
        self,
        status_code: int,
        code: str,
        message: str,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.code = code
        self.message = message
        self.details = details


ERROR_MESSAGES = {
    "notanarticle": "The page you specified doesn't exist",
    "invalidtitle": "Bad title",
    "invalidparammix": "The title and pageid parameters cannot be used together",
    "missingparam": "One of the title or pageid parameters is required",
    "invalidoldimage": "The oldimage parameter has an invalid format",
    "nodeleteablefile": "No such old version of the file",
    "cannotdelete": "Couldn't delete the page or file specified",
    "badtoken": "Invalid token",
    "permissiondenied": "You don't have permission to delete pages",
    "blocked": "You have been blocked from editing",
}

ERROR_STATUS = {
    "invalidtitle": 400,
    "invalidparammix": 400,
    "missingparam": 400,
    "invalidoldimage": 400,
    "badtoken": 403,
    "permissiondenied": 403,
    "blocked": 403,
    "notanarticle": 404,
    "nodeleteablefile": 404,
    "cannotdelete": 409,
}


class DeletionError(APIError):
    """Terminal failure of a deletion request, identified by its error code."""

    def __init__(self, code: str, *params: Any, details: dict[str, Any] | None = None):
        message = ERROR_MESSAGES.get(code, code)
        if params:
            message = f"{message}: {', '.join(str(p) for p in params)}"
        super().__init__(ERROR_STATUS.get(code, 502), code, message, details)
        self.params = params
