from __future__ import annotations

import json
import logging

from wikidelete.core.archive import is_valid_archive_name
from wikidelete.core.collaborators import Authorizer, FileRepository, PageStore, TargetResolver, WatchlistService
from wikidelete.core.domain import (
    Actor,
    Completed,
    DeletionTarget,
    Outcome,
    PermissionDenied,
    PermissionViolation,
    TargetKind,
    resolve_watch_directive,
)
from wikidelete.core.errors import DeletionError
from wikidelete.core.permissions import PermissionGate
from wikidelete.core.reasons import ReasonResolver, ReasonUnavailable
from wikidelete.core.titles import parse_title
from wikidelete.core.upstream import upstream_api_error
from wikidelete.models import DeleteRequest, DeleteResponse, StatusMessageModel
from wikidelete.wikijs_client import WikiError

logger = logging.getLogger("wikidelete")

WATCH_CONTEXT = "watchdeletion"


class PageDeletionPath:
    def __init__(self, gate: PermissionGate, reasons: ReasonResolver, store: PageStore):
        self.gate = gate
        self.reasons = reasons
        self.store = store

    def execute(self, target: DeletionTarget, actor: Actor, token: str | None, reason: str | None) -> Outcome:
        errors = self.gate.check(target, actor, token)
        if errors:
            return PermissionDenied(errors)

        try:
            effective = self.reasons.resolve(target, reason)
        except ReasonUnavailable as e:
            return PermissionDenied([PermissionViolation("cannotdelete", (e.title,))])

        status = self.store.delete_page(target, effective, actor, suppress=False, log_action=True)
        return Completed(status, effective)


class FileDeletionPath:
    """Deletes the current revision of a local file, or one archived revision.

    Targets whose file is missing, remote or redirected are deleted as plain
    pages instead.
    """

    def __init__(
        self,
        gate: PermissionGate,
        files: FileRepository,
        store: PageStore,
        page_path: PageDeletionPath,
    ):
        self.gate = gate
        self.files = files
        self.store = store
        self.page_path = page_path

    def execute(
        self,
        target: DeletionTarget,
        actor: Actor,
        token: str | None,
        archive_name: str | None,
        reason: str | None,
        suppress: bool = False,
    ) -> Outcome:
        errors = self.gate.check(target, actor, token)
        if errors:
            return PermissionDenied(errors)

        file = self.files.current_file(target)
        if file is None or not file.deletable:
            return self.page_path.execute(target, actor, token, reason)

        if archive_name:
            if not is_valid_archive_name(archive_name):
                return PermissionDenied([PermissionViolation("invalidoldimage")])
            old = self.files.archived_file(target, archive_name)
            if old is None or not old.deletable:
                return PermissionDenied([PermissionViolation("nodeleteablefile")])

        # The deletion log rejects a null reason but accepts an empty one.
        effective = reason if reason is not None else ""
        status = self.store.delete_file(target, file, archive_name or None, effective, suppress, actor)
        return Completed(status, effective)


class DeletionRequestHandler:
    def __init__(
        self,
        resolver: TargetResolver,
        page_path: PageDeletionPath,
        file_path: FileDeletionPath,
        watchlist: WatchlistService,
    ):
        self.resolver = resolver
        self.page_path = page_path
        self.file_path = file_path
        self.watchlist = watchlist

    def resolve_target(self, req: DeleteRequest) -> DeletionTarget:
        if req.title is not None and req.pageid is not None:
            raise DeletionError("invalidparammix")
        if req.title is None and req.pageid is None:
            raise DeletionError("missingparam")

        title = None
        if req.title is not None:
            try:
                title = parse_title(req.title)
            except ValueError:
                raise DeletionError("invalidtitle", req.title)

        target = self.resolver.resolve_target(title=title, pageid=req.pageid)
        if target is None or not target.exists:
            raise DeletionError("notanarticle")
        return target

    def handle(self, req: DeleteRequest, actor: Actor) -> DeleteResponse:
        target = self.resolve_target(req)

        if target.kind == TargetKind.FILE:
            outcome = self.file_path.execute(target, actor, req.token, req.oldimage, req.reason)
        else:
            outcome = self.page_path.execute(target, actor, req.token, req.reason)

        title = target.title.prefixed_text
        if isinstance(outcome, PermissionDenied):
            first = outcome.errors[0]
            self._log(title, actor, first.code)
            raise DeletionError(
                first.code,
                *first.params,
                details={"errors": [e.as_dict() for e in outcome.errors]},
            )

        status = outcome.status
        if not status.succeeded:
            first = status.errors[0]
            self._log(title, actor, first.code)
            raise DeletionError(
                first.code,
                *first.params,
                details={"messages": [m.as_dict() for m in status.errors + status.warnings]},
            )
        self._log(title, actor, status.level.value, logid=status.value)

        directive = resolve_watch_directive(req.watch, req.unwatch, req.watchlist)
        try:
            self.watchlist.set_watch(directive, target, actor, WATCH_CONTEXT)
        except Exception:
            logger.warning("watchlist update failed for %s", title, exc_info=True)

        warnings = [StatusMessageModel(code=w.code, params=list(w.params)) for w in status.warnings]
        return DeleteResponse(
            title=title,
            reason=outcome.reason,
            logid=status.value,
            warnings=warnings or None,
        )

    def _log(self, title: str, actor: Actor, outcome: str, logid: int | None = None) -> None:
        entry = {"msg": "delete", "title": title, "actor": actor.name, "outcome": outcome}
        if logid is not None:
            entry["logid"] = logid
        logger.info(json.dumps(entry))


def build_handler(backend, authorizer: Authorizer) -> DeletionRequestHandler:
    """Wire the deletion paths onto a backend implementing every collaborator."""
    gate = PermissionGate(authorizer)
    page_path = PageDeletionPath(gate, ReasonResolver(backend), backend)
    file_path = FileDeletionPath(gate, backend, backend, page_path)
    return DeletionRequestHandler(backend, page_path, file_path, backend)


def delete_target(handler: DeletionRequestHandler, req: DeleteRequest, actor: Actor) -> DeleteResponse:
    try:
        return handler.handle(req, actor)
    except WikiError as e:
        raise upstream_api_error(e)
