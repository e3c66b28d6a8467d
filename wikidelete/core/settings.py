from __future__ import annotations

import os
from dataclasses import dataclass, field

from wikidelete.core.titles import normalize_text

_DEV_TOKEN_SECRET = "wikidelete-dev-secret"
_DELETE_GROUPS_DEFAULT = ["sysop"]
BACKENDS = ("memory", "wikijs")


def parse_names(raw: str | None) -> list[str]:
    names: list[str] = []
    seen: set[str] = set()
    for item in (raw or "").split(","):
        name = normalize_text(item)
        if name and name not in seen:
            seen.add(name)
            names.append(name)
    return names


def parse_groups(raw: str | None) -> list[str]:
    groups: list[str] = []
    for item in (raw or "").split(","):
        group = item.strip().lower()
        if group and group not in groups:
            groups.append(group)
    return groups


def parse_actor_groups(raw: str | None) -> dict[str, frozenset[str]]:
    """Parse ``"alice=sysop|editor;bob=user"`` into a name -> groups mapping."""
    mapping: dict[str, frozenset[str]] = {}
    for entry in (raw or "").split(";"):
        name, sep, groups = entry.partition("=")
        name = normalize_text(name)
        if not name or not sep:
            continue
        parsed = {g.strip().lower() for g in groups.split("|") if g.strip()}
        mapping[name] = mapping.get(name, frozenset()) | frozenset(parsed)
    return mapping


@dataclass(frozen=True)
class Settings:
    backend: str = "memory"
    token_secret: str = _DEV_TOKEN_SECRET
    delete_groups: list[str] = field(default_factory=lambda: list(_DELETE_GROUPS_DEFAULT))
    actor_groups: dict[str, frozenset[str]] = field(default_factory=dict)
    blocked_users: list[str] = field(default_factory=list)
    watch_deletions: list[str] = field(default_factory=list)
    seed_file: str = ""

    @classmethod
    def from_env(cls) -> "Settings":
        backend = os.getenv("WIKIDELETE_BACKEND", "memory").strip().lower() or "memory"
        if backend not in BACKENDS:
            raise ValueError(f"WIKIDELETE_BACKEND must be one of {', '.join(BACKENDS)}, got {backend!r}")
        return cls(
            backend=backend,
            token_secret=os.getenv("WIKIDELETE_TOKEN_SECRET", "") or _DEV_TOKEN_SECRET,
            delete_groups=parse_groups(os.getenv("WIKIDELETE_DELETE_GROUPS")) or list(_DELETE_GROUPS_DEFAULT),
            actor_groups=parse_actor_groups(os.getenv("WIKIDELETE_ACTOR_GROUPS")),
            blocked_users=parse_names(os.getenv("WIKIDELETE_BLOCKED_USERS")),
            watch_deletions=parse_names(os.getenv("WIKIDELETE_WATCH_DELETIONS")),
            seed_file=os.getenv("WIKIDELETE_SEED_FILE", ""),
        )
