"""
Render ``to_string`` and ``operator<<`` for indexed enums.

The header declares one pair of functions per enum; the source implements
them with a ``switch`` over every identifier. Class enums print their fully
qualified identifier (``foo::Color::red``), plain enums the bare identifier.
"""

import logging
import os
from typing import Iterable, List, Mapping, Optional, Sequence, Tuple

from extraction.models import EnumData

logger = logging.getLogger(__name__)

GENERATED_BANNER = "/* This is generated code. Do not edit. Unless you really want to. */"
UNKNOWN_VALUE = "UNKNOWN VALUE"


def _sorted_enums(enums: Mapping[str, EnumData]) -> List[Tuple[str, EnumData]]:
    return sorted(enums.items())


def _include_line(include: str) -> str:
    include = include.strip()
    if include.startswith(("<", '"')):
        return f"#include {include}"
    return f"#include <{include}>"


def case_label(key: str, data: EnumData, identifier: str) -> str:
    """Spelling of an enumerator in a ``case`` label."""
    if data.is_class_enum:
        return f"{key}::{identifier}"
    namespace = data.enum_namespace()
    return f"{namespace}::{identifier}" if namespace else identifier


def value_label(key: str, data: EnumData, identifier: str) -> str:
    """Text ``to_string`` returns for an enumerator."""
    return f"{key}::{identifier}" if data.is_class_enum else identifier


def render_enum_ops_header(
    enums: Mapping[str, EnumData], includes: Sequence[str] = ()
) -> str:
    """Render the declarations header.

    Args:
        enums: Enums keyed by fully qualified name.
        includes: Headers that declare the enums.
    """
    lines = [
        GENERATED_BANNER,
        "#pragma once",
        "#include <string>",
        "#include <iostream>",
    ]
    lines.extend(_include_line(include) for include in includes)
    lines.append("")
    for key, _data in _sorted_enums(enums):
        lines.append(f"std::string to_string(const {key}& value);")
        lines.append(f"std::ostream& operator<<(std::ostream& stream, const {key}& value);")
    return "\n".join(lines) + "\n"


def render_enum_ops_source(enums: Mapping[str, EnumData], header_include: str) -> str:
    """Render the implementation file that includes ``header_include``."""
    lines = [GENERATED_BANNER, _include_line(header_include), ""]
    for key, data in _sorted_enums(enums):
        lines.append(f"std::string to_string(const {key}& value) {{")
        lines.append("  switch (value) {")
        for identifier in data.identifiers:
            lines.append(f"    case {case_label(key, data, identifier)}:")
            lines.append(f'      return "{value_label(key, data, identifier)}";')
        lines.append("  }")
        lines.append(f'  return "{UNKNOWN_VALUE}";')
        lines.append("}")
        lines.append("")
        lines.append(f"std::ostream& operator<<(std::ostream& stream, const {key}& value) {{")
        lines.append("  stream << to_string(value);")
        lines.append("  return stream;")
        lines.append("}")
        lines.append("")
    return "\n".join(lines)


def write_enum_ops(
    enums: Mapping[str, EnumData],
    header_path: str,
    source_path: str,
    includes: Optional[Iterable[str]] = None,
    header_include: Optional[str] = None,
) -> Tuple[str, str]:
    """Write the header and source files.

    Args:
        enums: Enums keyed by fully qualified name.
        header_path: Destination of the declarations header.
        source_path: Destination of the implementation file.
        includes: Headers declaring the enums. Defaults to the distinct
            ``defined_in`` files of the enums.
        header_include: How the source includes the header. Defaults to the
            header's file name.

    Returns:
        ``(header_path, source_path)``.
    """
    if includes is None:
        includes = sorted({data.defined_in for data in enums.values() if data.defined_in})
    if header_include is None:
        header_include = os.path.basename(header_path)

    for path in (header_path, source_path):
        parent = os.path.dirname(os.path.abspath(path))
        os.makedirs(parent, exist_ok=True)

    with open(header_path, "w", encoding="utf-8") as f:
        f.write(render_enum_ops_header(enums, list(includes)))
    with open(source_path, "w", encoding="utf-8") as f:
        f.write(render_enum_ops_source(enums, header_include))

    logger.info(
        "Wrote operators for %d enums to %s and %s", len(enums), header_path, source_path
    )
    return header_path, source_path
