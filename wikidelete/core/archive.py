from __future__ import annotations

import re

# <YYYYMMDDhhmmss>!<file name>
_ARCHIVE_NAME_RE = re.compile(r"^\d{14}!.+$")
MIN_ARCHIVE_NAME_LEN = 16


def is_valid_archive_name(spec: str | None) -> bool:
    if not spec or len(spec) < MIN_ARCHIVE_NAME_LEN:
        return False
    if "/" in spec or "\\" in spec:
        return False
    return bool(_ARCHIVE_NAME_RE.match(spec))


def archive_name(timestamp: str, file_name: str) -> str:
    return f"{timestamp}!{file_name}"
