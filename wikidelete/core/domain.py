from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Union

from wikidelete.core.titles import Namespace, Title


logger = logging.getLogger("wikidelete")


class TargetKind(str, Enum):
    PAGE = "page"
    FILE = "file"


@dataclass(frozen=True)
class PlainPage:
    page_id: int | None
    title: Title
    exists: bool = True
    kind: ClassVar[TargetKind] = TargetKind.PAGE


@dataclass(frozen=True)
class FilePage:
    page_id: int | None
    title: Title
    exists: bool = True
    kind: ClassVar[TargetKind] = TargetKind.FILE


DeletionTarget = Union[PlainPage, FilePage]


def make_target(page_id: int | None, title: Title, exists: bool = True) -> DeletionTarget:
    if title.namespace == Namespace.FILE:
        return FilePage(page_id=page_id, title=title, exists=exists)
    return PlainPage(page_id=page_id, title=title, exists=exists)


@dataclass(frozen=True)
class Actor:
    name: str
    groups: frozenset[str] = frozenset()
    blocked: bool = False
    watch_deletions: bool = False

    @property
    def is_anonymous(self) -> bool:
        return not self.name


ANONYMOUS = Actor(name="")


@dataclass(frozen=True)
class PermissionViolation:
    code: str
    params: tuple[Any, ...] = ()

    def as_dict(self) -> dict[str, Any]:
        return {"code": self.code, "params": list(self.params)}


@dataclass(frozen=True)
class FileRef:
    name: str
    archive_name: str | None = None
    exists: bool = True
    is_local: bool = True
    redirected_to: str | None = None

    @property
    def deletable(self) -> bool:
        return self.exists and self.is_local and not self.redirected_to


@dataclass(frozen=True)
class StatusMessage:
    code: str
    params: tuple[Any, ...] = ()

    def as_dict(self) -> dict[str, Any]:
        return {"code": self.code, "params": list(self.params)}


class StatusLevel(str, Enum):
    SUCCESS = "success"
    WARNING = "warning"
    FAILURE = "failure"


@dataclass
class Status:
    """Result of a storage operation.

    Any error makes the status a FAILURE. Warnings alone keep it successful
    and are reported back to the caller as advisory content.
    """

    value: Any = None
    errors: list[StatusMessage] = field(default_factory=list)
    warnings: list[StatusMessage] = field(default_factory=list)

    @classmethod
    def good(cls, value: Any = None, warnings: list[StatusMessage] | None = None) -> "Status":
        return cls(value=value, warnings=list(warnings or []))

    @classmethod
    def fatal(cls, code: str, *params: Any) -> "Status":
        return cls(errors=[StatusMessage(code, tuple(params))])

    def warning(self, code: str, *params: Any) -> None:
        self.warnings.append(StatusMessage(code, tuple(params)))

    @property
    def level(self) -> StatusLevel:
        if self.errors:
            return StatusLevel.FAILURE
        if self.warnings:
            return StatusLevel.WARNING
        return StatusLevel.SUCCESS

    @property
    def succeeded(self) -> bool:
        return self.level != StatusLevel.FAILURE


@dataclass(frozen=True)
class PermissionDenied:
    errors: list[PermissionViolation]


@dataclass(frozen=True)
class Completed:
    status: Status
    reason: str


Outcome = Union[PermissionDenied, Completed]


class WatchDirective(str, Enum):
    WATCH = "watch"
    UNWATCH = "unwatch"
    PREFERENCES = "preferences"
    NOCHANGE = "nochange"


def resolve_watch_directive(
    watch: bool = False,
    unwatch: bool = False,
    watchlist: WatchDirective | str = WatchDirective.PREFERENCES,
) -> WatchDirective:
    # The deprecated flags still take precedence over watchlist.
    if watch:
        logger.info(json.dumps({"msg": "deprecated_parameter", "feature": "action=delete&watch"}))
        return WatchDirective.WATCH
    if unwatch:
        logger.info(json.dumps({"msg": "deprecated_parameter", "feature": "action=delete&unwatch"}))
        return WatchDirective.UNWATCH
    return WatchDirective(watchlist)
