#!/usr/bin/env python3
"""Generate to_string/operator<< for every enum in a code index."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Any, Optional, Sequence

from core.run_artifacts import DEFAULT_REPORT_DIR, write_run_report
from core.startup_config import resolve_log_level
from core.structured_logging import configure_structured_logging, phase_scope, set_run_id
from extraction.models import CodeIndex
from generation.enum_ops import write_enum_ops

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Generate enum stringification operators from a code index",
    )
    parser.add_argument("-i", "--index", required=True, help="JSON code index.")
    parser.add_argument("--header", required=True, help="Output header file.")
    parser.add_argument("--source", required=True, help="Output source file.")
    parser.add_argument(
        "--include",
        dest="includes",
        action="append",
        default=None,
        help=(
            "Header the generated header includes (repeatable). "
            "Defaults to the files the enums were read from."
        ),
    )
    parser.add_argument(
        "--report-dir",
        default=DEFAULT_REPORT_DIR,
        help="Directory for the JSON run report.",
    )
    return parser.parse_args(argv)


def execute_ostream_ops(
    *,
    index: CodeIndex,
    header: str,
    source: str,
    includes: Optional[Sequence[str]] = None,
) -> dict[str, Any]:
    with phase_scope("ostream_ops"):
        if not index.enums:
            logger.warning("Code index has no enums; generating empty operator files")
        header_path, source_path = write_enum_ops(
            index.enums,
            header,
            source,
            includes=includes,
        )
    return {
        "status": "success",
        "header": header_path,
        "source": source_path,
        "enum_count": len(index.enums),
    }


def main(argv: Optional[Sequence[str]] = None) -> None:
    configure_structured_logging(level=resolve_log_level())
    args = parse_args(argv)
    run_id = set_run_id()

    run_report: dict[str, Any] = {
        "run_id": run_id,
        "pipeline": "ostream_ops",
        "status": "failed",
    }
    try:
        index = CodeIndex.load(args.index)
        run_report.update(
            execute_ostream_ops(
                index=index,
                header=args.header,
                source=args.source,
                includes=args.includes,
            )
        )
        report_path = write_run_report(run_report, run_id, args.report_dir)
        logger.info("Run report written: %s", report_path)
    except Exception as exc:
        run_report["error"] = str(exc)
        report_path = write_run_report(run_report, run_id, args.report_dir)
        logger.info("Run report written: %s", report_path)
        logger.error("Operator generation failed: %s", exc, exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
