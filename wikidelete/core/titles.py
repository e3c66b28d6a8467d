from __future__ import annotations

import re
from dataclasses import dataclass
from enum import IntEnum


class Namespace(IntEnum):
    MAIN = 0
    TALK = 1
    USER = 2
    USER_TALK = 3
    PROJECT = 4
    PROJECT_TALK = 5
    FILE = 6
    FILE_TALK = 7
    TEMPLATE = 10
    HELP = 12
    CATEGORY = 14


_NAMESPACE_NAMES = {
    Namespace.TALK: "Talk",
    Namespace.USER: "User",
    Namespace.USER_TALK: "User talk",
    Namespace.PROJECT: "Project",
    Namespace.PROJECT_TALK: "Project talk",
    Namespace.FILE: "File",
    Namespace.FILE_TALK: "File talk",
    Namespace.TEMPLATE: "Template",
    Namespace.HELP: "Help",
    Namespace.CATEGORY: "Category",
}
_NAMESPACE_ALIASES = {"image": Namespace.FILE, "image talk": Namespace.FILE_TALK}

_WHITESPACE_RE = re.compile(r"[\s_]+")
_ILLEGAL_RE = re.compile(r"[#<>\[\]|{}]")


@dataclass(frozen=True)
class Title:
    namespace: Namespace
    text: str

    @property
    def prefixed_text(self) -> str:
        if self.namespace == Namespace.MAIN:
            return self.text
        return f"{_NAMESPACE_NAMES[self.namespace]}:{self.text}"

    @property
    def db_key(self) -> str:
        return self.prefixed_text.replace(" ", "_")

    def __str__(self) -> str:
        return self.prefixed_text


def normalize_text(raw: str) -> str:
    text = _WHITESPACE_RE.sub(" ", (raw or "").strip()).strip()
    if not text:
        return ""
    return text[0].upper() + text[1:]


def lookup_namespace(prefix: str) -> Namespace | None:
    key = normalize_text(prefix).lower()
    for ns, name in _NAMESPACE_NAMES.items():
        if name.lower() == key:
            return ns
    return _NAMESPACE_ALIASES.get(key)


def parse_title(raw: str) -> Title:
    """Parse a page title such as ``"File:Example.png"`` or ``"sandbox"``.

    Raises ValueError for empty titles and titles with illegal characters.
    """
    value = normalize_text(raw)
    if not value:
        raise ValueError("title is empty")
    if _ILLEGAL_RE.search(value):
        raise ValueError(f"title contains illegal characters: {raw!r}")

    namespace = Namespace.MAIN
    if ":" in value:
        prefix, _, rest = value.partition(":")
        ns = lookup_namespace(prefix)
        if ns is not None:
            namespace = ns
            value = normalize_text(rest)
            if not value:
                raise ValueError(f"title has no page name: {raw!r}")
    return Title(namespace=namespace, text=value)
