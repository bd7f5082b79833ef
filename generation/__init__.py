"""
Layer 2: Code Generation

Renders enum operators from a code index and expands method-generation
tags in source files through a line-by-line filter chain.
"""

from generation.enum_ops import (
    render_enum_ops_header,
    render_enum_ops_source,
    write_enum_ops,
)
from generation.line_filters import (
    LineCollector,
    LineEmitter,
    LineFilter,
    LineMiniParser,
    LineReader,
    LineSubscriber,
    LineWriter,
)
from generation.method_emitters import (
    CerealMethodEmitter,
    ClassAwareFilter,
    GetSetMethodEmitter,
    generate_methods,
)

__all__ = [
    "render_enum_ops_header",
    "render_enum_ops_source",
    "write_enum_ops",
    "LineCollector",
    "LineEmitter",
    "LineFilter",
    "LineMiniParser",
    "LineReader",
    "LineSubscriber",
    "LineWriter",
    "CerealMethodEmitter",
    "ClassAwareFilter",
    "GetSetMethodEmitter",
    "generate_methods",
]
