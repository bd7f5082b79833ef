"""
Source cursor and balanced-group helpers.

The cursor is the shared read position the grammar advances. Every token
method first runs the lexical skip layer, so callers never deal with
comments or whitespace. The balanced-group helpers are explicit
recursive-descent style scanners: they consume a delimiter pair together
with everything nested inside it and never touch the tracked scope depth.
"""

import re
from typing import Optional

from extraction.config import ANNOTATION_CLOSE, ANNOTATION_OPEN
from extraction.lexical import skip_ignorable

_IDENTIFIER_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
_OPENERS = "([{"
_CLOSERS = ")]}"


def _is_identifier_char(ch: str) -> bool:
    return ch.isalnum() or ch == "_"


def skip_quoted(text: str, pos: int) -> Optional[int]:
    """Skip a string or character literal starting at ``pos``.

    Returns:
        Position after the closing quote, or ``None`` when the literal is
        not closed on the same line.
    """
    quote = text[pos]
    i = pos + 1
    length = len(text)
    while i < length:
        ch = text[i]
        if ch == "\\":
            i += 2
            continue
        if ch == quote:
            return i + 1
        if ch == "\n":
            return None
        i += 1
    return None


def _is_digit_separator(text: str, pos: int) -> bool:
    """True for the ``'`` inside a number such as ``1'000`` or ``0xFF'FF``.

    The quote must sit between identifier characters of a token that starts
    with a digit, so prefixed character literals (``L'x'``, ``u8'x'``) are
    still treated as literals.
    """
    if not 0 < pos < len(text) - 1 or not _is_identifier_char(text[pos + 1]):
        return False
    start = pos
    while start > 0 and (_is_identifier_char(text[start - 1]) or text[start - 1] == "'"):
        start -= 1
    return start < pos and text[start].isdigit()


def _skip_embedded_comment(text: str, pos: int) -> Optional[int]:
    """Skip a comment inside a skipped region; returns ``pos`` when none starts."""
    if text.startswith("//", pos):
        end = text.find("\n", pos)
        return None if end < 0 else end + 1
    if text.startswith("/*", pos):
        end = text.find("*/", pos + 2)
        return None if end < 0 else end + 2
    return pos


def find_balanced_end(text: str, pos: int, opener: str, closer: str) -> Optional[int]:
    """Find the end of the balanced ``opener``...``closer`` group at ``pos``.

    Literals and comments inside the group are stepped over. For angle
    brackets, nesting is only counted outside parentheses so that
    ``enable_if_t<(N > 0)>`` balances.

    Returns:
        Position just after the matching closer, or ``None`` if the group is
        not balanced before the end of input.
    """
    if not text.startswith(opener, pos):
        return None
    depth = 0
    parens = 0
    angle = opener == "<"
    i = pos
    length = len(text)
    while i < length:
        ch = text[i]
        if ch == "'" and _is_digit_separator(text, i):
            i += 1
            continue
        if ch in "\"'":
            end = skip_quoted(text, i)
            if end is None:
                return None
            i = end
            continue
        if ch == "/":
            end = _skip_embedded_comment(text, i)
            if end is None:
                return None
            if end != i:
                i = end
                continue
        if angle:
            if ch == "(":
                parens += 1
            elif ch == ")":
                parens -= 1
            elif parens == 0 and ch == "<":
                depth += 1
            elif parens == 0 and ch == ">":
                depth -= 1
                if depth == 0:
                    return i + 1
        elif ch == opener:
            depth += 1
        elif ch == closer:
            depth -= 1
            if depth == 0:
                return i + 1
        i += 1
    return None


def find_unnested(text: str, pos: int, terminators: str) -> Optional[int]:
    """Find the first terminator character outside brackets, literals and comments.

    A closing bracket with no matching opener ends the scan: it is returned
    when it is itself a terminator, otherwise the scan fails.

    Returns:
        Index of the terminator (not consumed), or ``None``.
    """
    depth = 0
    i = pos
    length = len(text)
    while i < length:
        ch = text[i]
        if ch == "'" and _is_digit_separator(text, i):
            i += 1
            continue
        if ch in "\"'":
            end = skip_quoted(text, i)
            if end is None:
                return None
            i = end
            continue
        if ch == "/":
            end = _skip_embedded_comment(text, i)
            if end is None:
                return None
            if end != i:
                i = end
                continue
        if depth == 0 and ch in terminators:
            return i
        if ch in _OPENERS:
            depth += 1
        elif ch in _CLOSERS:
            if depth == 0:
                return None
            depth -= 1
        i += 1
    return None


class SourceCursor:
    """Read position over a fully buffered document."""

    def __init__(self, text: str, pos: int = 0):
        self.text = text
        self.pos = pos
        self.length = len(text)

    def skip(self) -> int:
        """Run the lexical skip layer; returns the new position."""
        self.pos = skip_ignorable(self.text, self.pos)
        return self.pos

    def at_end(self) -> bool:
        self.skip()
        return self.pos >= self.length

    def mark(self) -> int:
        return self.pos

    def reset(self, mark: int) -> None:
        self.pos = mark

    def remainder(self) -> str:
        return self.text[self.pos:]

    def peek(self, literal: str) -> bool:
        self.skip()
        return self.text.startswith(literal, self.pos)

    def match(self, literal: str) -> bool:
        if self.peek(literal):
            self.pos += len(literal)
            return True
        return False

    def match_colon(self) -> bool:
        """Match a single ``:`` that is not part of ``::``."""
        if self.peek("::"):
            return False
        return self.match(":")

    def peek_keyword(self, keyword: str) -> bool:
        if not self.peek(keyword):
            return False
        end = self.pos + len(keyword)
        return end >= self.length or not _is_identifier_char(self.text[end])

    def match_keyword(self, keyword: str) -> bool:
        if self.peek_keyword(keyword):
            self.pos += len(keyword)
            return True
        return False

    def peek_identifier(self) -> Optional[str]:
        self.skip()
        match = _IDENTIFIER_RE.match(self.text, self.pos)
        return match.group(0) if match else None

    def match_identifier(self) -> Optional[str]:
        identifier = self.peek_identifier()
        if identifier is not None:
            self.pos += len(identifier)
        return identifier

    def match_annotation(self) -> Optional[str]:
        """Match ``[[...]]`` and return the inner text (stripped)."""
        if not self.peek(ANNOTATION_OPEN):
            return None
        start = self.pos + len(ANNOTATION_OPEN)
        end = find_unnested(self.text, start, "]")
        if end is None or not self.text.startswith(ANNOTATION_CLOSE, end):
            return None
        self.pos = end + len(ANNOTATION_CLOSE)
        return self.text[start:end].strip()

    def skip_balanced(self, opener: str, closer: str) -> Optional[str]:
        """Consume a balanced group without tracking depth.

        Returns:
            The consumed text (delimiters included), or ``None`` with the
            cursor unchanged when no balanced group starts here.
        """
        self.skip()
        end = find_balanced_end(self.text, self.pos, opener, closer)
        if end is None:
            return None
        consumed = self.text[self.pos:end]
        self.pos = end
        return consumed

    def consume_until(self, terminators: str) -> Optional[str]:
        """Consume text up to (not including) an unnested terminator.

        Returns:
            The consumed text, or ``None`` with the cursor unchanged when no
            terminator is found.
        """
        self.skip()
        end = find_unnested(self.text, self.pos, terminators)
        if end is None:
            return None
        consumed = self.text[self.pos:end]
        self.pos = end
        return consumed
