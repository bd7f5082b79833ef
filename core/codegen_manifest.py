"""Manifest contract for the code generation pipeline."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from core.startup_config import ConfigValidationError, load_config_payload

logger = logging.getLogger(__name__)

_KNOWN_KEYS = {
    "project_name",
    "index_file",
    "headers",
    "source_dirs",
    "ostream_ops",
    "method_jobs",
    "report_dir",
    "continue_on_error",
}


@dataclass(frozen=True)
class OstreamOpsSpec:
    """Output locations for generated enum operators."""

    header: str
    source: str
    includes: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class MethodJobSpec:
    """One line-by-line method generation job."""

    source: str
    destination: str


@dataclass(frozen=True)
class CodegenManifest:
    """Top-level manifest payload."""

    project_name: str
    index_file: str
    headers: list[str]
    source_dirs: list[str] = field(default_factory=list)
    ostream_ops: OstreamOpsSpec | None = None
    method_jobs: list[MethodJobSpec] = field(default_factory=list)
    report_dir: str = "output/codegen_reports"
    continue_on_error: bool = True
    base_dir: str = "."

    def resolve(self, raw_path: str) -> Path:
        """Resolve a manifest path relative to the manifest's directory."""
        path = Path(raw_path)
        return path if path.is_absolute() else Path(self.base_dir) / path


def _expect_dict(payload: Any, ctx: str) -> dict[str, Any]:
    if not isinstance(payload, dict):
        raise ValueError(f"{ctx} must be an object")
    return payload


def _expect_str_list(payload: Any, ctx: str) -> list[str]:
    if payload is None:
        return []
    if not isinstance(payload, list):
        raise ValueError(f"{ctx} must be a list")
    values: list[str] = []
    for item in payload:
        value = str(item).strip()
        if not value:
            raise ValueError(f"{ctx} contains an empty entry")
        values.append(value)
    return values


def _parse_ostream_ops(payload: Any) -> OstreamOpsSpec | None:
    if payload is None:
        return None
    ops = _expect_dict(payload, "ostream_ops")
    header = str(ops.get("header", "")).strip()
    source = str(ops.get("source", "")).strip()
    if not header:
        raise ValueError("ostream_ops.header is required")
    if not source:
        raise ValueError("ostream_ops.source is required")
    return OstreamOpsSpec(
        header=header,
        source=source,
        includes=_expect_str_list(ops.get("includes"), "ostream_ops.includes"),
    )


def _parse_method_job(payload: Any) -> MethodJobSpec:
    job = _expect_dict(payload, "method job")
    source = str(job.get("source", "")).strip()
    destination = str(job.get("destination", "")).strip()
    if not source:
        raise ValueError("method job: source is required")
    if not destination:
        raise ValueError(f"method job '{source}': destination is required")
    if source == destination:
        raise ValueError(f"method job '{source}': destination must differ from source")
    return MethodJobSpec(source=source, destination=destination)


def load_codegen_manifest(path: str, strict: bool = False) -> CodegenManifest:
    """Load and validate a codegen manifest from a YAML/JSON file.

    Raises:
        FileNotFoundError: If the manifest does not exist.
        ValueError: If required fields are missing or malformed.
        ConfigValidationError: In strict mode, for unknown keys or
            unreadable payloads.
    """
    manifest_path = Path(path)
    if not manifest_path.is_file():
        raise FileNotFoundError(f"Manifest file not found: {manifest_path}")

    payload = load_config_payload(str(manifest_path), strict=strict)
    if not payload:
        raise ValueError(f"Manifest is empty or unreadable: {manifest_path}")

    unknown = sorted(set(payload) - _KNOWN_KEYS)
    if unknown:
        msg = "Unknown manifest keys: " + ", ".join(unknown)
        if strict:
            raise ConfigValidationError(msg)
        logger.warning("%s; ignoring them", msg)

    project_name = str(payload.get("project_name", "")).strip()
    if not project_name:
        raise ValueError("project_name is required")

    index_file = str(payload.get("index_file", "")).strip()
    if not index_file:
        raise ValueError("index_file is required")

    headers = _expect_str_list(payload.get("headers"), "headers")
    source_dirs = _expect_str_list(payload.get("source_dirs"), "source_dirs")
    if not headers and not source_dirs:
        raise ValueError("headers or source_dirs must name at least one input")

    jobs_raw = payload.get("method_jobs") or []
    if not isinstance(jobs_raw, list):
        raise ValueError("method_jobs must be a list")

    return CodegenManifest(
        project_name=project_name,
        index_file=index_file,
        headers=headers,
        source_dirs=source_dirs,
        ostream_ops=_parse_ostream_ops(payload.get("ostream_ops")),
        method_jobs=[_parse_method_job(job) for job in jobs_raw],
        report_dir=str(payload.get("report_dir", "output/codegen_reports")),
        continue_on_error=bool(payload.get("continue_on_error", True)),
        base_dir=str(manifest_path.parent),
    )
