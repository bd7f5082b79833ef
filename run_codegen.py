#!/usr/bin/env python3
"""Manifest-driven code generation.

Index headers -> enum operators -> tagged method files, as listed in a
YAML/JSON codegen manifest.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Any, Optional, Sequence

from core.codegen_manifest import CodegenManifest, load_codegen_manifest
from core.run_artifacts import write_run_report
from core.startup_config import (
    resolve_log_level,
    resolve_strict_config_validation,
    resolve_strict_parse,
)
from core.structured_logging import configure_structured_logging, set_run_id
from extraction.models import CodeIndex
from run_generate_methods import execute_generate_methods
from run_index import execute_index
from run_ostream_ops import execute_ostream_ops

logger = logging.getLogger(__name__)


def _final_status(total_steps: int, succeeded: int) -> str:
    if succeeded <= 0:
        return "failed"
    if succeeded < total_steps:
        return "partial_success"
    return "success"


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Codegen pipeline: index headers, then generate operators and methods",
    )
    parser.add_argument(
        "--manifest",
        required=True,
        help="Path to codegen manifest YAML/JSON.",
    )
    parser.add_argument(
        "--strict-config",
        action="store_true",
        default=resolve_strict_config_validation(default=False),
        help="Fail on unknown or unreadable manifest content.",
    )
    parser.add_argument(
        "--strict-parse",
        action="store_true",
        default=resolve_strict_parse(default=False),
        help="Treat a header that does not parse to the end as an error.",
    )
    return parser.parse_args(argv)


def execute_codegen(manifest: CodegenManifest, strict_parse: bool = False) -> dict[str, Any]:
    """Run every step the manifest lists and return the run report fields."""
    steps: list[dict[str, Any]] = []

    index_result = execute_index(
        headers=[str(manifest.resolve(h)) for h in manifest.headers],
        source_dirs=[str(manifest.resolve(d)) for d in manifest.source_dirs],
        output=str(manifest.resolve(manifest.index_file)),
        strict=strict_parse,
        continue_on_error=manifest.continue_on_error,
    )
    steps.append({"step": "index", **index_result})
    if index_result["status"] == "failed":
        return {"status": "failed", "steps": steps}

    index = CodeIndex.load(index_result["index_file"])

    if manifest.ostream_ops is not None:
        ops = manifest.ostream_ops
        try:
            result = execute_ostream_ops(
                index=index,
                header=str(manifest.resolve(ops.header)),
                source=str(manifest.resolve(ops.source)),
                includes=ops.includes or None,
            )
        except Exception as exc:
            if not manifest.continue_on_error:
                raise
            logger.error("Operator generation failed: %s", exc, exc_info=True)
            result = {"status": "failed", "error": str(exc)}
        steps.append({"step": "ostream_ops", **result})

    for job in manifest.method_jobs:
        try:
            result = execute_generate_methods(
                index=index,
                source=str(manifest.resolve(job.source)),
                destination=str(manifest.resolve(job.destination)),
            )
        except Exception as exc:
            if not manifest.continue_on_error:
                raise
            logger.error("Method generation for %s failed: %s", job.source, exc, exc_info=True)
            result = {"status": "failed", "source": job.source, "error": str(exc)}
        steps.append({"step": "generate_methods", **result})

    succeeded = sum(1 for step in steps if step["status"] != "failed")
    status = _final_status(len(steps), succeeded)
    if status == "success" and index_result["status"] != "success":
        status = "partial_success"
    return {
        "project_name": manifest.project_name,
        "status": status,
        "steps": steps,
    }


def main(argv: Optional[Sequence[str]] = None) -> None:
    configure_structured_logging(level=resolve_log_level())
    args = parse_args(argv)
    run_id = set_run_id()

    run_report: dict[str, Any] = {
        "run_id": run_id,
        "pipeline": "codegen",
        "status": "failed",
    }
    report_dir = None
    try:
        manifest = load_codegen_manifest(args.manifest, strict=args.strict_config)
        report_dir = manifest.report_dir
        run_report.update(execute_codegen(manifest, strict_parse=args.strict_parse))
        report_path = write_run_report(run_report, run_id, report_dir)
        logger.info("Run report written: %s", report_path)
        if run_report["status"] == "failed":
            sys.exit(1)
    except Exception as exc:
        run_report["error"] = str(exc)
        if report_dir is None:
            report_path = write_run_report(run_report, run_id)
        else:
            report_path = write_run_report(run_report, run_id, report_dir)
        logger.info("Run report written: %s", report_path)
        logger.error("Codegen pipeline failed: %s", exc, exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
