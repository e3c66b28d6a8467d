from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass

from wikidelete.core.collaborators import ReasonSynthesizer
from wikidelete.core.domain import DeletionTarget

MAX_SUMMARY_CHARS = 150
MAX_INSPECTED_REVISIONS = 20

_WHITESPACE_RE = re.compile(r"\s+")


@dataclass(frozen=True)
class Revision:
    author: str
    content: str | None = None


class ReasonUnavailable(Exception):
    def __init__(self, title: str):
        super().__init__(f"cannot derive a deletion reason for {title}")
        self.title = title


def _excerpt(content: str) -> str:
    text = _WHITESPACE_RE.sub(" ", content).strip()
    if len(text) > MAX_SUMMARY_CHARS:
        text = text[: MAX_SUMMARY_CHARS - 3].rstrip() + "..."
    return text


def summarize_history(revisions: Iterable[Revision]) -> str | None:
    """Build an automatic deletion reason from newest-first revisions.

    Returns None when there is no history to summarize.
    """
    inspected: list[Revision] = []
    for rev in revisions:
        inspected.append(rev)
        if len(inspected) >= MAX_INSPECTED_REVISIONS:
            break
    if not inspected:
        return None

    latest = inspected[0]
    content = (latest.content or "").strip()
    if not content:
        for rev in inspected[1:]:
            if (rev.content or "").strip():
                return f'content before blanking was: "{_excerpt(rev.content)}"'
        return "page was empty"

    authors = {rev.author for rev in inspected if rev.author}
    if len(authors) == 1:
        return f'content was: "{_excerpt(content)}", and the only contributor was "{authors.pop()}"'
    return f'content was: "{_excerpt(content)}"'


class ReasonResolver:
    def __init__(self, synthesizer: ReasonSynthesizer):
        self.synthesizer = synthesizer

    def resolve(self, target: DeletionTarget, caller_reason: str | None) -> str:
        # An explicit reason wins, even an empty one.
        if caller_reason is not None:
            return caller_reason
        reason = self.synthesizer.synthesize_reason(target)
        if reason is None:
            raise ReasonUnavailable(target.title.prefixed_text)
        return reason
