#!/usr/bin/env python3
"""Expand [[genGetSetMethods]] / [[genCerealLoadSave]] tags in a source file."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import Any, Optional, Sequence

from core.run_artifacts import DEFAULT_REPORT_DIR, write_run_report
from core.startup_config import resolve_log_level
from core.structured_logging import (
    configure_structured_logging,
    phase_scope,
    set_run_id,
    source_scope,
)
from extraction.models import CodeIndex
from generation.method_emitters import generate_methods

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Generate getters, setters and cereal methods from a code index",
    )
    parser.add_argument("-i", "--index", required=True, help="JSON code index.")
    parser.add_argument("--source", required=True, help="Tagged input file (e.g. Foo.h.in).")
    parser.add_argument("--destination", required=True, help="File to write.")
    parser.add_argument(
        "--report-dir",
        default=DEFAULT_REPORT_DIR,
        help="Directory for the JSON run report.",
    )
    return parser.parse_args(argv)


def execute_generate_methods(*, index: CodeIndex, source: str, destination: str) -> dict[str, Any]:
    if os.path.abspath(source) == os.path.abspath(destination):
        raise ValueError(f"Destination must differ from source: {source}")
    if not os.path.isfile(source):
        raise FileNotFoundError(f"Source file not found: {source}")
    with phase_scope("generate_methods"), source_scope(source):
        lines_written = generate_methods(index, source, destination)
    return {
        "status": "success",
        "source": source,
        "destination": destination,
        "lines_written": lines_written,
    }


def main(argv: Optional[Sequence[str]] = None) -> None:
    configure_structured_logging(level=resolve_log_level())
    args = parse_args(argv)
    run_id = set_run_id()

    run_report: dict[str, Any] = {
        "run_id": run_id,
        "pipeline": "generate_methods",
        "status": "failed",
    }
    try:
        index = CodeIndex.load(args.index)
        run_report.update(
            execute_generate_methods(
                index=index,
                source=args.source,
                destination=args.destination,
            )
        )
        report_path = write_run_report(run_report, run_id, args.report_dir)
        logger.info("Run report written: %s", report_path)
    except Exception as exc:
        run_report["error"] = str(exc)
        report_path = write_run_report(run_report, run_id, args.report_dir)
        logger.info("Run report written: %s", report_path)
        logger.error("Method generation failed: %s", exc, exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
