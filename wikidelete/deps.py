from functools import lru_cache
from typing import Annotated

from fastapi import Depends, Header

from wikidelete.backends import build_backend
from wikidelete.core.auth import actor_from_settings, require_api_key
from wikidelete.core.deletion_log import DeletionLog
from wikidelete.core.domain import Actor
from wikidelete.core.errors import APIError
from wikidelete.core.permissions import GroupAuthorizer
from wikidelete.core.services import DeletionRequestHandler, build_handler
from wikidelete.core.settings import Settings
from wikidelete.core.upstream import upstream_api_error
from wikidelete.wikijs_client import WikiError


def get_settings() -> Settings:
    try:
        return Settings.from_env()
    except ValueError as e:
        raise APIError(status_code=503, code="backend_unconfigured", message=str(e))


@lru_cache
def get_deletion_log() -> DeletionLog:
    return DeletionLog()


@lru_cache
def _cached_backend(backend: str, seed_file: str, watch_deletions: tuple[str, ...]):
    settings = Settings(backend=backend, seed_file=seed_file, watch_deletions=list(watch_deletions))
    return build_backend(settings, log=get_deletion_log())


def get_backend(settings: Annotated[Settings, Depends(get_settings)]):
    try:
        return _cached_backend(settings.backend, settings.seed_file, tuple(settings.watch_deletions))
    except WikiError as e:
        raise upstream_api_error(e)


def get_deletion_handler(
    settings: Annotated[Settings, Depends(get_settings)],
    backend=Depends(get_backend),
) -> DeletionRequestHandler:
    return build_handler(backend, GroupAuthorizer.from_settings(settings))


def current_actor(
    settings: Annotated[Settings, Depends(get_settings)],
    x_wiki_user: Annotated[str | None, Header(alias="X-Wiki-User")] = None,
) -> Actor:
    return actor_from_settings(x_wiki_user, settings)


__all__ = [
    "current_actor",
    "get_backend",
    "get_deletion_handler",
    "get_deletion_log",
    "get_settings",
    "require_api_key",
]
