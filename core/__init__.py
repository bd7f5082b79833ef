"""Core shared contracts and utilities."""

from core.qualified_name import (
    SCOPE_SEPARATOR,
    join_namespace,
    make_qualified_name,
    normalize_cpp_entity_name,
    normalize_cpp_type,
    split_qualified_name,
)
from core.structured_logging import (
    configure_structured_logging,
    phase_scope,
    set_run_id,
    source_scope,
)
from core.startup_config import (
    ConfigValidationError,
    load_config_payload,
    resolve_log_level,
    resolve_strict_config_validation,
    resolve_strict_parse,
)
from core.run_artifacts import write_json_artifact, write_run_report
from core.codegen_manifest import (
    CodegenManifest,
    MethodJobSpec,
    OstreamOpsSpec,
    load_codegen_manifest,
)

__all__ = [
    "SCOPE_SEPARATOR",
    "join_namespace",
    "make_qualified_name",
    "normalize_cpp_entity_name",
    "normalize_cpp_type",
    "split_qualified_name",
    "configure_structured_logging",
    "phase_scope",
    "set_run_id",
    "source_scope",
    "ConfigValidationError",
    "load_config_payload",
    "resolve_log_level",
    "resolve_strict_config_validation",
    "resolve_strict_parse",
    "write_json_artifact",
    "write_run_report",
    "CodegenManifest",
    "MethodJobSpec",
    "OstreamOpsSpec",
    "load_codegen_manifest",
]
