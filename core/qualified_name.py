"""Fully qualified name contract shared by extraction and generation layers."""

from __future__ import annotations

import re
from typing import Iterable

SCOPE_SEPARATOR = "::"

_WHITESPACE_RE = re.compile(r"\s+")
_SCOPE_SEPARATOR_RE = re.compile(r"\s*::\s*")
_POINTER_SPACING_RE = re.compile(r"\s*([*&]+)")
_ANGLE_SPACING_RE = re.compile(r"\s*([<>,])\s*")


def normalize_cpp_entity_name(entity_name: str) -> str:
    """Normalize C++ names into a canonical form.

    Collapses whitespace runs and strips spaces around ``::`` so names that
    differ only in formatting compare equal.

    Args:
        entity_name: Raw name text from the grammar.

    Returns:
        Canonicalized name.
    """
    normalized = entity_name.strip()
    normalized = _SCOPE_SEPARATOR_RE.sub(SCOPE_SEPARATOR, normalized)
    normalized = _WHITESPACE_RE.sub(" ", normalized)
    return normalized.strip()


def normalize_cpp_type(type_text: str) -> str:
    """Normalize a C++ type spelling.

    ``std::map< int , std::string > &`` becomes ``std::map<int,std::string>&``.
    Spaces between words (``unsigned int``) are kept.
    """
    normalized = normalize_cpp_entity_name(type_text)
    normalized = _ANGLE_SPACING_RE.sub(r"\1", normalized)
    normalized = _POINTER_SPACING_RE.sub(r"\1", normalized)
    return normalized


def join_namespace(namespaces: Iterable[str]) -> str:
    """Join namespace segments with ``::`` (empty string for no segments)."""
    return SCOPE_SEPARATOR.join(namespaces)


def make_qualified_name(namespaces: Iterable[str], name: str) -> str:
    """Build a fully qualified name.

    Args:
        namespaces: Enclosing namespace segments, outermost first.
        name: The declaration's own name.

    Returns:
        ``a::b::Name``, or just ``Name`` when there are no segments.
    """
    segments = [segment for segment in namespaces if segment]
    segments.append(name)
    return SCOPE_SEPARATOR.join(segments)


def split_qualified_name(qualified_name: str) -> tuple[list[str], str]:
    """Split a fully qualified name into ``(namespaces, name)``.

    Raises:
        ValueError: If the name is empty or has an empty segment.
    """
    canonical = normalize_cpp_entity_name(qualified_name)
    if not canonical:
        raise ValueError("Qualified name must not be empty")
    parts = canonical.split(SCOPE_SEPARATOR)
    if any(not part for part in parts):
        raise ValueError(f"Malformed qualified name: {qualified_name}")
    return parts[:-1], parts[-1]
