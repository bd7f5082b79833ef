#!/usr/bin/env python3
"""Index C++ headers into a JSON code index.

Headers/directories -> declaration grammar -> enum/class drivers -> index.json.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Any, Optional, Sequence

from core.run_artifacts import DEFAULT_REPORT_DIR, write_run_report
from core.startup_config import resolve_log_level, resolve_strict_parse
from core.structured_logging import configure_structured_logging, phase_scope, set_run_id
from extraction.extractor import build_index

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Extract enums and classes from C++ headers into a JSON index",
    )
    parser.add_argument(
        "-H",
        "--header",
        dest="headers",
        action="append",
        default=[],
        help="Header file to index (repeatable).",
    )
    parser.add_argument(
        "--source-dir",
        dest="source_dirs",
        action="append",
        default=[],
        help="Directory searched recursively for C++ headers (repeatable).",
    )
    parser.add_argument(
        "-o",
        "--output",
        required=True,
        help="Path of the JSON index to write.",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        default=resolve_strict_parse(default=False),
        help="Treat a header that does not parse to the end as an error.",
    )
    parser.add_argument(
        "--fail-fast",
        action="store_false",
        dest="continue_on_error",
        default=True,
        help="Abort on the first file that fails.",
    )
    parser.add_argument(
        "--report-dir",
        default=DEFAULT_REPORT_DIR,
        help="Directory for the JSON run report.",
    )
    args = parser.parse_args(argv)
    if not args.headers and not args.source_dirs:
        parser.error("at least one --header or --source-dir is required")
    return args


def execute_index(
    *,
    headers: Sequence[str],
    source_dirs: Sequence[str],
    output: str,
    strict: bool,
    continue_on_error: bool,
) -> dict[str, Any]:
    """Build and save the index; return the report fields for this step."""
    with phase_scope("index"):
        index, stats = build_index(
            [*headers, *source_dirs],
            continue_on_error=continue_on_error,
            strict=strict,
        )
        index_path = index.save(output)
        logger.info(
            "Index written: %s (%d enums, %d classes)",
            index_path,
            len(index.enums),
            len(index.classes),
        )
    status = "success" if stats.files_failed == 0 else "partial_success"
    if stats.files_processed == 0 and stats.files_failed > 0:
        status = "failed"
    return {
        "status": status,
        "index_file": index_path,
        "enum_count": len(index.enums),
        "class_count": len(index.classes),
        "stats": stats.to_dict(),
    }


def main(argv: Optional[Sequence[str]] = None) -> None:
    configure_structured_logging(level=resolve_log_level())
    args = parse_args(argv)
    run_id = set_run_id()

    run_report: dict[str, Any] = {
        "run_id": run_id,
        "pipeline": "index",
        "status": "failed",
    }
    try:
        result = execute_index(
            headers=args.headers,
            source_dirs=args.source_dirs,
            output=args.output,
            strict=args.strict,
            continue_on_error=args.continue_on_error,
        )
        run_report.update(result)
        report_path = write_run_report(run_report, run_id, args.report_dir)
        logger.info("Run report written: %s", report_path)
        if run_report["status"] == "failed":
            sys.exit(1)
    except Exception as exc:
        run_report["error"] = str(exc)
        report_path = write_run_report(run_report, run_id, args.report_dir)
        logger.info("Run report written: %s", report_path)
        logger.error("Indexing failed: %s", exc, exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
