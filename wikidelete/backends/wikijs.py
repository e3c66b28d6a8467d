from __future__ import annotations

import json
import logging

from wikidelete.core.deletion_log import DeletionLog
from wikidelete.core.domain import (
    Actor,
    DeletionTarget,
    FileRef,
    Status,
    WatchDirective,
    make_target,
)
from wikidelete.core.paths import asset_filename, path_to_title, title_to_path
from wikidelete.core.reasons import MAX_INSPECTED_REVISIONS, Revision, summarize_history
from wikidelete.core.titles import Namespace, Title
from wikidelete.wikijs_client import WikiError, WikiJSClient

logger = logging.getLogger("wikidelete")


def _failure(result: dict, default_code: str) -> Status:
    code = result.get("slug") or result.get("errorCode") or default_code
    return Status.fatal(str(code), result.get("message") or "")


class WikiJSBackend:
    """Collaborators backed by a Wiki.js instance.

    Pages are addressed by path, ``File:`` titles by asset file name. Wiki.js
    keeps neither archived asset revisions nor watchlists.
    """

    def __init__(self, client: WikiJSClient, log: DeletionLog | None = None):
        self.client = client
        self.log = log or DeletionLog()

    @classmethod
    def from_env(cls, log: DeletionLog | None = None) -> "WikiJSBackend":
        return cls(WikiJSClient.from_env(), log=log)

    def _find_asset(self, title: Title) -> dict | None:
        wanted = asset_filename(title)
        for asset in self.client.list_assets():
            if (asset.get("filename") or "").lower() == wanted:
                return asset
        return None

    def resolve_target(self, title: Title | None = None, pageid: int | None = None) -> DeletionTarget | None:
        if pageid is not None:
            page = self.client.get_page(pageid)
            if page is None:
                return None
            return make_target(int(page["id"]), path_to_title(page["path"], page.get("title")))
        if title is None:
            return None
        if title.namespace == Namespace.FILE:
            asset = self._find_asset(title)
            if asset is None:
                return make_target(None, title, exists=False)
            return make_target(int(asset["id"]), title)
        page = self.client.get_page_by_path(title_to_path(title))
        if page is None:
            return make_target(None, title, exists=False)
        return make_target(int(page["id"]), title)

    def synthesize_reason(self, target: DeletionTarget) -> str | None:
        if target.page_id is None:
            return None
        page = self.client.get_page(target.page_id)
        if page is None:
            return None
        revisions = [Revision(author=page.get("authorName") or "", content=page.get("content") or "")]
        trail = self.client.page_history(target.page_id, size=MAX_INSPECTED_REVISIONS)
        if not revisions[0].content.strip() and trail:
            prior = self.client.page_version(target.page_id, int(trail[0]["versionId"])) or {}
            revisions.append(Revision(author=trail[0].get("authorName") or "", content=prior.get("content") or ""))
            trail = trail[1:]
        revisions.extend(Revision(author=item.get("authorName") or "") for item in trail)
        return summarize_history(revisions)

    def current_file(self, target: DeletionTarget) -> FileRef | None:
        asset = self._find_asset(target.title)
        if asset is None:
            return None
        return FileRef(name=asset["filename"])

    def archived_file(self, target: DeletionTarget, archive_name: str) -> FileRef | None:
        return None

    def delete_page(
        self,
        target: DeletionTarget,
        reason: str,
        actor: Actor,
        suppress: bool = False,
        log_action: bool = True,
    ) -> Status:
        if target.page_id is None:
            return Status.fatal("cannotdelete", target.title.prefixed_text)
        try:
            result = self.client.delete_page(target.page_id)
        except WikiError as e:
            return Status.fatal("upstream_error", e.message)
        if not result.get("succeeded"):
            return _failure(result, "cannotdelete")
        logid = None
        if log_action:
            logid = self.log.record("delete", target.title.prefixed_text, actor.name, reason, suppressed=suppress)
        return Status.good(logid)

    def delete_file(
        self,
        target: DeletionTarget,
        file: FileRef,
        archive_name: str | None,
        reason: str,
        suppress: bool,
        actor: Actor,
    ) -> Status:
        if archive_name:
            return Status.fatal("filedelete-old-unregistered", archive_name)
        try:
            asset = self._find_asset(target.title)
            if asset is None:
                return Status.fatal("filedeleteerror", file.name)
            result = self.client.delete_asset(int(asset["id"]))
        except WikiError as e:
            return Status.fatal("upstream_error", e.message)
        if not result.get("succeeded"):
            return _failure(result, "filedeleteerror")
        return Status.good(self.log.record("delete", target.title.prefixed_text, actor.name, reason, suppressed=suppress))

    def set_watch(self, directive: WatchDirective, target: DeletionTarget, actor: Actor, context: str) -> None:
        logger.debug(
            json.dumps(
                {
                    "msg": "watch_unsupported",
                    "directive": directive.value,
                    "title": target.title.prefixed_text,
                    "actor": actor.name,
                }
            )
        )
