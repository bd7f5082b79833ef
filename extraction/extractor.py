"""
High-level orchestrator for C++ declaration extraction.

This module provides the main entry points for extracting enums and classes
from in-memory text, single files or whole directory trees, and for merging
the results into a :class:`~extraction.models.CodeIndex`.
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Iterator, List, Tuple, Union

from core.structured_logging import source_scope
from extraction.config import HEADER_EXTENSIONS, REMAINDER_PREVIEW_CHARS, SKIPPED_DIRECTORIES
from extraction.drivers import attach_drivers
from extraction.events import EventBus
from extraction.grammar import DeclarationParser
from extraction.models import ClassData, CodeIndex, EnumData

logger = logging.getLogger(__name__)

Entity = Union[EnumData, ClassData]


class ExtractionError(Exception):
    """Base class for orchestrator failures."""


class ParseFailureError(ExtractionError):
    """A document could not be parsed to the end (strict mode only)."""

    def __init__(self, file_path: str, line: int, remainder: str):
        self.file_path = file_path
        self.line = line
        self.remainder = remainder
        super().__init__(
            f"Failed to parse {file_path} at line {line}: {_preview(remainder)!r}"
        )


def _preview(remainder: str) -> str:
    preview = remainder[:REMAINDER_PREVIEW_CHARS]
    return preview if len(remainder) <= REMAINDER_PREVIEW_CHARS else preview + "..."


@dataclass
class FileExtractionResult:
    """Entities published while parsing one document.

    ``entities`` keeps the publication order; ``enums`` and ``classes`` are
    keyed by fully qualified name.
    """

    file_path: str
    enums: Dict[str, EnumData] = field(default_factory=dict)
    classes: Dict[str, ClassData] = field(default_factory=dict)
    entities: List[Tuple[str, Entity]] = field(default_factory=list)
    success: bool = False
    remainder: str = ""
    offset: int = 0
    line: int = 1

    def _on_enum(self, key: str, data: EnumData) -> None:
        self.enums[key] = data
        self.entities.append((key, data))

    def _on_class(self, key: str, data: ClassData) -> None:
        self.classes[key] = data
        self.entities.append((key, data))

    def to_index(self) -> CodeIndex:
        index = CodeIndex()
        for key, entity in self.entities:
            index.add(key, entity)
        return index


class ExtractionStats:
    """Statistics for an extraction operation."""

    def __init__(self):
        self.files_processed = 0
        self.files_failed = 0
        self.enums_extracted = 0
        self.classes_extracted = 0
        self.parse_failures = 0

    def to_dict(self) -> Dict[str, int]:
        """Convert stats to dictionary."""
        return {
            "files_processed": self.files_processed,
            "files_failed": self.files_failed,
            "enums_extracted": self.enums_extracted,
            "classes_extracted": self.classes_extracted,
            "parse_failures": self.parse_failures,
        }

    def __str__(self) -> str:
        """String representation of stats."""
        return (
            f"ExtractionStats(processed={self.files_processed}, "
            f"failed={self.files_failed}, enums={self.enums_extracted}, "
            f"classes={self.classes_extracted}, parse_failures={self.parse_failures})"
        )


def extract_source(text: str, file_path: str = "<memory>") -> FileExtractionResult:
    """Parse one document held in memory.

    A fresh bus, parser and set of drivers is built for every call, and all
    subscriptions are released before returning.

    Args:
        text: Complete document text.
        file_path: Recorded as ``defined_in`` on every entity.

    Returns:
        The published entities and the parse outcome. On failure the
        entities finalized before the failing construct are still present.
    """
    result = FileExtractionResult(file_path=file_path)
    bus = EventBus()
    parser = DeclarationParser(bus)
    enum_driver, class_driver = attach_drivers(bus, file_path)
    subscriptions = [
        enum_driver.enum_available.connect(result._on_enum),
        class_driver.class_available.connect(result._on_class),
    ]
    try:
        parse_result = parser.parse(text)
    finally:
        for subscription in subscriptions:
            subscription.release()
        enum_driver.unsubscribe()
        class_driver.unsubscribe()

    result.success = parse_result.success
    result.remainder = parse_result.remainder
    result.offset = parse_result.offset
    result.line = text.count("\n", 0, parse_result.offset) + 1
    return result


def extract_file(file_path: str, strict: bool = False) -> FileExtractionResult:
    """Extract all enums and classes from a single C++ header.

    Args:
        file_path: Path to the header (recorded as given in ``defined_in``).
        strict: Raise instead of logging when the parse stops early.

    Returns:
        The extraction result. In non-strict mode a failed parse is logged
        and the partial result is returned with ``success=False``.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file does not have a header extension.
        ParseFailureError: If ``strict`` and the document did not parse.
    """
    if not os.path.isfile(file_path):
        raise FileNotFoundError(f"File not found: {file_path}")

    ext = os.path.splitext(file_path)[1]
    if ext not in HEADER_EXTENSIONS:
        raise ValueError(
            f"File {file_path} is not a C++ header. "
            f"Expected one of: {sorted(HEADER_EXTENSIONS)}"
        )

    with source_scope(file_path):
        logger.info("Extracting declarations from %s", file_path)
        with open(file_path, "r", encoding="utf-8") as f:
            text = f.read()

        result = extract_source(text, file_path)
        if not result.success:
            if strict:
                raise ParseFailureError(file_path, result.line, result.remainder)
            logger.warning(
                "Parse of %s stopped at line %d: %r",
                file_path,
                result.line,
                _preview(result.remainder),
            )
        logger.info(
            "Extracted %d enums and %d classes from %s",
            len(result.enums),
            len(result.classes),
            file_path,
        )
    return result


def discover_header_files(directory: str) -> List[str]:
    """Recursively discover all C++ headers in a directory.

    Hidden directories and common build/cache directories are skipped.

    Returns:
        Sorted list of absolute paths.
    """
    found = []
    directory = os.path.abspath(directory)

    logger.info("Discovering C++ headers in %s", directory)

    for root, dirs, files in os.walk(directory):
        dirs[:] = [d for d in dirs if not d.startswith(".") and d not in SKIPPED_DIRECTORIES]

        for file in files:
            ext = os.path.splitext(file)[1]
            if ext in HEADER_EXTENSIONS:
                found.append(os.path.join(root, file))

    logger.info("Found %d C++ headers", len(found))
    return sorted(found)


def _expand_paths(paths: Iterable[str]) -> List[str]:
    expanded: List[str] = []
    for path in paths:
        if os.path.isdir(path):
            expanded.extend(discover_header_files(path))
        else:
            expanded.append(path)
    return expanded


def build_index(
    paths: Iterable[str],
    continue_on_error: bool = True,
    strict: bool = False,
) -> Tuple[CodeIndex, ExtractionStats]:
    """Extract every file (or directory) in ``paths`` into one index.

    Args:
        paths: Files and/or directories; directories are searched recursively.
        continue_on_error: If True, count failing files and keep going.
            If False, re-raise the first error.
        strict: Treat a parse that stops early as an error
            (:class:`ParseFailureError`) instead of a skipped file.

    Returns:
        A tuple of (index, stats). Entities from a file whose parse failed
        are not merged.
    """
    index = CodeIndex()
    stats = ExtractionStats()

    files = _expand_paths(paths)
    if not files:
        logger.warning("No C++ headers to index")
        return index, stats

    logger.info("Indexing %d C++ headers", len(files))

    for file_path in files:
        try:
            result = extract_file(file_path, strict=strict)
        except FileNotFoundError as e:
            logger.error("File not found: %s", e)
            stats.files_failed += 1
            if not continue_on_error:
                raise
            continue
        except ValueError as e:
            logger.error("Invalid file: %s", e)
            stats.files_failed += 1
            if not continue_on_error:
                raise
            continue
        except ParseFailureError as e:
            logger.error("%s", e)
            stats.files_failed += 1
            stats.parse_failures += 1
            if not continue_on_error:
                raise
            continue

        if not result.success:
            stats.files_failed += 1
            stats.parse_failures += 1
            if not continue_on_error:
                raise ParseFailureError(file_path, result.line, result.remainder)
            continue

        stats.files_processed += 1
        stats.enums_extracted += len(result.enums)
        stats.classes_extracted += len(result.classes)
        for key, entity in result.entities:
            index.add(key, entity)

    logger.info("Extraction complete: %s", stats)
    return index, stats


def iter_extract_entities(paths: Iterable[str]) -> Iterator[Tuple[str, Entity]]:
    """Yield ``(qualified_name, entity)`` pairs file by file, in source order.

    Files that fail to parse contribute the entities finalized before the
    failure.
    """
    for file_path in _expand_paths(paths):
        result = extract_file(file_path)
        yield from result.entities


def index_to_dict(paths: Iterable[str]) -> Dict[str, Any]:
    """Build an index for ``paths`` and return it as a JSON-ready dict."""
    index, stats = build_index(paths)
    logger.info("Extraction stats: %s", stats)
    return index.to_dict()
