from __future__ import annotations

import re

from wikidelete.core.titles import Namespace, Title, lookup_namespace, normalize_text


_SEGMENT_SEP_RE = re.compile(r"[ _]+")
_SEGMENT_BAD_RE = re.compile(r"[^a-z0-9.-]+")
_MULTI_HYPHEN_RE = re.compile(r"-{2,}")
_ASSET_SEP_RE = re.compile(r"[\s,;#]+")


def normalize_segment(raw: str) -> str:
    segment = (raw or "").strip().lower()
    segment = _SEGMENT_SEP_RE.sub("-", segment)
    segment = _SEGMENT_BAD_RE.sub("-", segment)
    segment = _MULTI_HYPHEN_RE.sub("-", segment)
    return segment.strip("-")


def title_to_path(title: Title) -> str:
    """Map a wiki title onto a Wiki.js page path.

    ``Sandbox`` -> ``sandbox``, ``Help:Deleting pages`` -> ``help/deleting-pages``.
    Subpage slashes in the title are kept as path separators.
    """
    parts = [normalize_segment(p) for p in title.text.split("/")]
    path = "/".join(p for p in parts if p)
    if title.namespace == Namespace.MAIN:
        return path
    prefix = normalize_segment(title.prefixed_text.split(":", 1)[0])
    return f"{prefix}/{path}"


def path_to_title(path: str, display_title: str | None = None) -> Title:
    parts = [p for p in (path or "").strip("/").split("/") if p]
    namespace = Namespace.MAIN
    if len(parts) > 1:
        ns = lookup_namespace(parts[0].replace("-", " "))
        if ns is not None:
            namespace = ns
            parts = parts[1:]
    text = normalize_text(display_title or "/".join(parts).replace("-", " "))
    return Title(namespace=namespace, text=text)


def asset_filename(title: Title) -> str:
    """File name Wiki.js stores an uploaded asset under."""
    return _ASSET_SEP_RE.sub("_", title.text.strip().lower())
