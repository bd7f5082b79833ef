"""
Lexical skip layer.

Recognizes the text the grammar steps over between semantic matches:
block comments, line comments, ``#pragma once`` / ``#include`` directives
and whitespace. Every skipper takes ``(text, pos)`` and returns the position
after the skipped construct, or ``None`` when the construct does not start
at ``pos`` (or is unterminated).
"""

import re
from typing import Callable, Optional, Tuple

from extraction.config import INCLUDE_DIRECTIVE, PRAGMA_DIRECTIVE, PRAGMA_ONCE_ARGUMENT

_PRAGMA_ONCE_RE = re.compile(
    re.escape(PRAGMA_DIRECTIVE) + r"[ \t]+" + PRAGMA_ONCE_ARGUMENT + r"\b"
)
_INCLUDE_RE = re.compile(
    re.escape(INCLUDE_DIRECTIVE)
    + r'[ \t]+(?:<[A-Za-z0-9_./\-]+>|"[A-Za-z0-9_./\-]+")'
)
_LINE_END_RE = re.compile(r"[\r\n]")


def skip_block_comment(text: str, pos: int) -> Optional[int]:
    """Skip a ``/* ... */`` comment. Unterminated comments are not skipped."""
    if not text.startswith("/*", pos):
        return None
    end = text.find("*/", pos + 2)
    if end < 0:
        return None
    return end + 2


def skip_line_comment(text: str, pos: int) -> Optional[int]:
    """Skip a ``//`` comment together with its line terminator.

    A line comment that is not followed by ``\\n``, ``\\r`` or ``\\r\\n``
    (end of input) is not skipped.
    """
    if not text.startswith("//", pos):
        return None
    match = _LINE_END_RE.search(text, pos + 2)
    if match is None:
        return None
    end = match.start()
    if text.startswith("\r\n", end):
        return end + 2
    return end + 1


def skip_directive(text: str, pos: int) -> Optional[int]:
    """Skip ``#pragma once`` or a one-line ``#include <...>``/``"..."``."""
    match = _PRAGMA_ONCE_RE.match(text, pos) or _INCLUDE_RE.match(text, pos)
    if match is None:
        return None
    return match.end()


def skip_whitespace(text: str, pos: int) -> Optional[int]:
    end = pos
    length = len(text)
    while end < length and text[end].isspace():
        end += 1
    return end if end > pos else None


_SKIPPERS: Tuple[Callable[[str, int], Optional[int]], ...] = (
    skip_block_comment,
    skip_line_comment,
    skip_directive,
    skip_whitespace,
)


def skip_ignorable(text: str, pos: int) -> int:
    """Skip any run of comments, directives and whitespace starting at ``pos``.

    Returns:
        The first position that is not ignorable (``pos`` itself if nothing
        was skipped).
    """
    while True:
        for skipper in _SKIPPERS:
            new_pos = skipper(text, pos)
            if new_pos is not None:
                pos = new_pos
                break
        else:
            return pos
