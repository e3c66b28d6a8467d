from __future__ import annotations

from wikidelete.core.errors import APIError
from wikidelete.wikijs_client import WikiError


def upstream_api_error(err: WikiError) -> APIError:
    """Translate a Wiki.js client failure into the error the API reports."""
    message = err.message or "Wiki.js upstream error"
    if err.status == 504:
        return APIError(504, "upstream_timeout", message)
    if err.status == 503:
        return APIError(503, "upstream_unconfigured", message)
    return APIError(502 if err.status >= 500 else err.status, "upstream_error", message)
