from __future__ import annotations

import os
from typing import Annotated

from fastapi import Security
from fastapi.security import APIKeyHeader

from wikidelete.core.domain import ANONYMOUS, Actor
from wikidelete.core.errors import APIError
from wikidelete.core.settings import Settings
from wikidelete.core.titles import normalize_text


api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)


async def require_api_key(
    x_api_key: Annotated[str | None, Security(api_key_header)],
) -> None:
    expected = os.getenv("WIKIDELETE_API_KEY", "")
    if not expected:
        return
    if x_api_key != expected:
        raise APIError(status_code=401, code="unauthorized", message="Invalid API key")


def actor_from_settings(name: str | None, settings: Settings) -> Actor:
    name = normalize_text(name or "")
    if not name:
        return ANONYMOUS
    return Actor(
        name=name,
        groups=settings.actor_groups.get(name, frozenset()),
        blocked=name in settings.blocked_users,
        watch_deletions=name in settings.watch_deletions,
    )
