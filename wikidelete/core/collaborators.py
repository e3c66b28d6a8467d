"""Interfaces of the systems a deletion request talks to.

Storage backends in ``wikidelete.backends`` implement these; tests swap in
small fakes.
"""

from __future__ import annotations

from typing import Protocol

from wikidelete.core.domain import (
    Actor,
    DeletionTarget,
    FileRef,
    PermissionViolation,
    Status,
    WatchDirective,
)
from wikidelete.core.titles import Title


class TargetResolver(Protocol):
    def resolve_target(self, title: Title | None = None, pageid: int | None = None) -> DeletionTarget | None:
        ...


class Authorizer(Protocol):
    def user_permission_errors(
        self, action: str, target: DeletionTarget, actor: Actor, token: str | None
    ) -> list[PermissionViolation]:
        ...


class ReasonSynthesizer(Protocol):
    def synthesize_reason(self, target: DeletionTarget) -> str | None:
        ...


class FileRepository(Protocol):
    def current_file(self, target: DeletionTarget) -> FileRef | None:
        ...

    def archived_file(self, target: DeletionTarget, archive_name: str) -> FileRef | None:
        ...


class PageStore(Protocol):
    def delete_page(
        self,
        target: DeletionTarget,
        reason: str,
        actor: Actor,
        suppress: bool = False,
        log_action: bool = True,
    ) -> Status:
        ...

    def delete_file(
        self,
        target: DeletionTarget,
        file: FileRef,
        archive_name: str | None,
        reason: str,
        suppress: bool,
        actor: Actor,
    ) -> Status:
        ...


class WatchlistService(Protocol):
    def set_watch(self, directive: WatchDirective, target: DeletionTarget, actor: Actor, context: str) -> None:
        ...
