"""Split a multi-line ``script`` input into shell commands."""

from __future__ import annotations

import re

_LINE_BREAK = re.compile(r"\r\n|\n|\r")


def parse_script(raw: str) -> tuple[str, ...]:
    """Return the non-blank lines of ``raw``, stripped, in original order.

    Whitespace-only lines count as blank. Empty input yields ``()``.
    """
    lines = (line.strip() for line in _LINE_BREAK.split(raw))
    return tuple(line for line in lines if line)
