"""
Layer 1: Extraction Engine

Single-pass, event-driven recognizer for C++ headers.
Extracts namespaces, enums and classes (members, methods, annotations).
"""

from extraction.models import (
    ClassData,
    CodeIndex,
    EnumData,
    MemberData,
    MethodData,
    NamespaceEntry,
    Visibility,
)
from extraction.events import EventBus, EventType, Signal, Subscription
from extraction.grammar import DeclarationParser, ParseResult
from extraction.drivers import (
    AccumulatorState,
    ClassDriver,
    DriverStateError,
    EnumDriver,
    NamespaceDriver,
    attach_drivers,
)
from extraction.extractor import (
    ExtractionError,
    ExtractionStats,
    FileExtractionResult,
    ParseFailureError,
    build_index,
    discover_header_files,
    extract_file,
    extract_source,
    index_to_dict,
    iter_extract_entities,
)

__all__ = [
    # Data models
    "ClassData",
    "CodeIndex",
    "EnumData",
    "MemberData",
    "MethodData",
    "NamespaceEntry",
    "Visibility",
    # Events
    "EventBus",
    "EventType",
    "Signal",
    "Subscription",
    # Low-level parsing
    "DeclarationParser",
    "ParseResult",
    # Drivers
    "AccumulatorState",
    "ClassDriver",
    "DriverStateError",
    "EnumDriver",
    "NamespaceDriver",
    "attach_drivers",
    # High-level orchestration
    "ExtractionError",
    "ExtractionStats",
    "FileExtractionResult",
    "ParseFailureError",
    "build_index",
    "discover_header_files",
    "extract_file",
    "extract_source",
    "index_to_dict",
    "iter_extract_entities",
]
