"""In-process wiki used for development and tests.

Holds pages with their revision history, uploaded files with archived
revisions and per-actor watchlists. Can be seeded from a JSON document:

    {
      "pages": [{"title": "Sandbox", "revisions": [{"author": "Alice", "content": "Hi"}]}],
      "files": [{"title": "File:Example.png", "author": "Alice",
                 "timestamp": "20210101000000", "archived": ["20200101000000"]}],
      "watchlists": {"Alice": ["Sandbox"]}
    }

Revisions in the seed are listed oldest first.
"""

from __future__ import annotations

import json
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from wikidelete.core.archive import archive_name as make_archive_name
from wikidelete.core.deletion_log import DeletionLog
from wikidelete.core.domain import (
    Actor,
    DeletionTarget,
    FileRef,
    Status,
    WatchDirective,
    make_target,
)
from wikidelete.core.reasons import Revision, summarize_history
from wikidelete.core.titles import Namespace, Title, parse_title


@dataclass
class StoredPage:
    page_id: int
    title: Title
    revisions: list[Revision] = field(default_factory=list)


@dataclass
class StoredFile:
    name: str
    timestamp: str
    is_local: bool = True
    redirected_to: str | None = None
    archived: list[str] = field(default_factory=list)


class MemoryWiki:
    def __init__(self, log: DeletionLog | None = None, watch_deletions: list[str] | None = None):
        self.log = log or DeletionLog()
        self.watch_deletions = set(watch_deletions or [])
        self.pages: dict[str, StoredPage] = {}
        self.files: dict[str, StoredFile] = {}
        self.watchlists: dict[str, set[str]] = {}
        self._next_page_id = 1
        self._lock = threading.RLock()

    # -- seeding -------------------------------------------------------------

    def create_page(self, title: str, content: str = "", author: str = "") -> StoredPage:
        parsed = parse_title(title)
        with self._lock:
            page = self.pages.get(parsed.db_key)
            if page is None:
                page = StoredPage(page_id=self._next_page_id, title=parsed)
                self._next_page_id += 1
                self.pages[parsed.db_key] = page
            page.revisions.append(Revision(author=author, content=content))
        return page

    def upload_file(
        self,
        title: str,
        timestamp: str,
        author: str = "",
        description: str = "",
        is_local: bool = True,
        redirected_to: str | None = None,
    ) -> StoredFile:
        parsed = parse_title(title)
        if parsed.namespace != Namespace.FILE:
            raise ValueError(f"not a file title: {title}")
        with self._lock:
            self.create_page(parsed.prefixed_text, content=description, author=author)
            stored = self.files.get(parsed.db_key)
            if stored is None:
                stored = StoredFile(name=parsed.text, timestamp=timestamp)
                self.files[parsed.db_key] = stored
            else:
                stored.archived.append(make_archive_name(stored.timestamp, stored.name))
                stored.timestamp = timestamp
            stored.is_local = is_local
            stored.redirected_to = redirected_to
        return stored

    def watch(self, actor_name: str, title: str) -> None:
        with self._lock:
            self.watchlists.setdefault(actor_name, set()).add(parse_title(title).db_key)

    def is_watched(self, actor_name: str, title: str) -> bool:
        return parse_title(title).db_key in self.watchlists.get(actor_name, set())

    @classmethod
    def from_seed(cls, data: dict[str, Any], **kwargs: Any) -> "MemoryWiki":
        wiki = cls(**kwargs)
        for page in data.get("pages", []):
            revisions = page.get("revisions", [])
            if not revisions:
                parsed = parse_title(page["title"])
                wiki.pages[parsed.db_key] = StoredPage(page_id=wiki._next_page_id, title=parsed)
                wiki._next_page_id += 1
            for rev in revisions:
                wiki.create_page(page["title"], content=rev.get("content", ""), author=rev.get("author", ""))
        for item in data.get("files", []):
            for ts in item.get("archived", []):
                wiki.upload_file(item["title"], ts, author=item.get("author", ""))
            wiki.upload_file(
                item["title"],
                item["timestamp"],
                author=item.get("author", ""),
                description=item.get("description", ""),
                is_local=item.get("is_local", True),
                redirected_to=item.get("redirected_to"),
            )
        for actor_name, titles in data.get("watchlists", {}).items():
            for title in titles:
                wiki.watch(actor_name, title)
        return wiki

    @classmethod
    def from_seed_file(cls, path: str, **kwargs: Any) -> "MemoryWiki":
        return cls.from_seed(json.loads(Path(path).read_text(encoding="utf-8")), **kwargs)

    # -- TargetResolver ------------------------------------------------------

    def resolve_target(self, title: Title | None = None, pageid: int | None = None) -> DeletionTarget | None:
        with self._lock:
            if pageid is not None:
                for page in self.pages.values():
                    if page.page_id == pageid:
                        return make_target(page.page_id, page.title, exists=True)
                return None
            if title is None:
                return None
            page = self.pages.get(title.db_key)
            if page is None:
                return make_target(None, title, exists=False)
            return make_target(page.page_id, page.title, exists=True)

    # -- ReasonSynthesizer ---------------------------------------------------

    def synthesize_reason(self, target: DeletionTarget) -> str | None:
        page = self.pages.get(target.title.db_key)
        if page is None:
            return None
        return summarize_history(reversed(page.revisions))

    # -- FileRepository ------------------------------------------------------

    def current_file(self, target: DeletionTarget) -> FileRef | None:
        stored = self.files.get(target.title.db_key)
        if stored is None:
            return None
        return FileRef(name=stored.name, is_local=stored.is_local, redirected_to=stored.redirected_to)

    def archived_file(self, target: DeletionTarget, archive_name: str) -> FileRef | None:
        stored = self.files.get(target.title.db_key)
        if stored is None or archive_name not in stored.archived:
            return None
        return FileRef(
            name=stored.name,
            archive_name=archive_name,
            is_local=stored.is_local,
            redirected_to=stored.redirected_to,
        )

    # -- PageStore -----------------------------------------------------------

    def delete_page(
        self,
        target: DeletionTarget,
        reason: str,
        actor: Actor,
        suppress: bool = False,
        log_action: bool = True,
    ) -> Status:
        key = target.title.db_key
        with self._lock:
            if self.pages.pop(key, None) is None:
                return Status.fatal("cannotdelete", target.title.prefixed_text)
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
        key = target.title.db_key
        title = target.title.prefixed_text
        with self._lock:
            stored = self.files.get(key)
            if stored is None:
                return Status.fatal("filedeleteerror", file.name)

            if archive_name:
                if archive_name not in stored.archived:
                    return Status.fatal("filedelete-old-unregistered", archive_name)
                stored.archived.remove(archive_name)
                logid = self.log.record(
                    "delete-file-revision", title, actor.name, reason, archive_name=archive_name, suppressed=suppress
                )
                return Status.good(logid)

            del self.files[key]
            status = Status()
            page = self.pages.pop(key, None)
            if page is None or not page.revisions:
                status.warning("filedeleteerror-description", title)
        status.value = self.log.record("delete", title, actor.name, reason, suppressed=suppress)
        return status

    # -- WatchlistService ----------------------------------------------------

    def set_watch(self, directive: WatchDirective, target: DeletionTarget, actor: Actor, context: str) -> None:
        if actor.is_anonymous or directive == WatchDirective.NOCHANGE:
            return
        key = target.title.db_key
        with self._lock:
            watched = self.watchlists.setdefault(actor.name, set())
            if directive == WatchDirective.WATCH:
                watched.add(key)
            elif directive == WatchDirective.UNWATCH:
                watched.discard(key)
            elif key in watched or actor.watch_deletions or actor.name in self.watch_deletions:
                watched.add(key)
