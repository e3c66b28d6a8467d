from __future__ import annotations

import itertools
import threading
from dataclasses import dataclass
from datetime import datetime, timezone


@dataclass(frozen=True)
class DeletionLogEntry:
    logid: int
    action: str
    title: str
    actor: str
    reason: str
    timestamp: str
    archive_name: str | None = None
    suppressed: bool = False


class DeletionLog:
    """Append-only record of deletions. Log ids start at 1 and only increase."""

    def __init__(self, start: int = 1):
        self._ids = itertools.count(start)
        self._entries: list[DeletionLogEntry] = []
        self._lock = threading.Lock()

    def record(
        self,
        action: str,
        title: str,
        actor: str,
        reason: str,
        archive_name: str | None = None,
        suppressed: bool = False,
    ) -> int:
        with self._lock:
            entry = DeletionLogEntry(
                logid=next(self._ids),
                action=action,
                title=title,
                actor=actor,
                reason=reason,
                timestamp=datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ"),
                archive_name=archive_name,
                suppressed=suppressed,
            )
            self._entries.append(entry)
        return entry.logid

    def recent(self, limit: int = 50) -> list[DeletionLogEntry]:
        with self._lock:
            entries = list(self._entries)
        return list(reversed(entries))[:limit]
