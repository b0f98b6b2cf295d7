"""
Filename patterns for directory merges and summaries.

Only ``*`` (any sequence) and ``?`` (any single character) are special;
everything else matches literally and the whole name must match.
"""

import re

DEFAULT_PATTERN = "*"


def compile_pattern(pattern: str) -> re.Pattern:
    """Translate a glob-style filename pattern into an anchored regex."""
    parts = []
    for char in pattern:
        if char == "*":
            parts.append(".*")
        elif char == "?":
            parts.append(".")
        else:
            parts.append(re.escape(char))
    return re.compile("".join(parts), re.DOTALL)


def matches_pattern(name: str, pattern: str) -> bool:
    """Return True if ``name`` matches ``pattern`` in full."""
    return compile_pattern(pattern).fullmatch(name) is not None
