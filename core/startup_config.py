"""Startup configuration helpers.

Resolves environment switches used by the runners and provides the
strict/non-strict YAML loading shared by manifest parsing.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

_LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}


class ConfigValidationError(RuntimeError):
    """Raised when strict configuration validation fails."""


def _env_flag(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def resolve_strict_config_validation(default: bool = False) -> bool:
    """Resolve strict manifest validation from ``CODEGEN_STRICT_CONFIG``."""
    return _env_flag("CODEGEN_STRICT_CONFIG", default=default)


def resolve_strict_parse(default: bool = False) -> bool:
    """Resolve whether a parse failure aborts a run (``CODEGEN_STRICT_PARSE``)."""
    return _env_flag("CODEGEN_STRICT_PARSE", default=default)


def resolve_log_level(default: int = logging.INFO) -> int:
    """Resolve the root log level from ``CODEGEN_LOG_LEVEL``."""
    raw = os.getenv("CODEGEN_LOG_LEVEL")
    if raw is None:
        return default
    level = _LOG_LEVELS.get(raw.strip().upper())
    if level is None:
        logger.warning("Unknown CODEGEN_LOG_LEVEL %r; using default", raw)
        return default
    return level


def load_config_payload(path: str, strict: bool = False) -> dict[str, Any]:
    """Load a YAML (or ``.json``) configuration file.

    In non-strict mode this returns an empty dict on read/parse failures.
    In strict mode this raises ``ConfigValidationError``.
    """
    config_path = Path(path)
    try:
        text = config_path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        msg = f"Config file not found: {path}"
        if strict:
            raise ConfigValidationError(msg) from exc
        logger.warning("%s; continuing with defaults", msg)
        return {}

    try:
        if config_path.suffix.lower() == ".json":
            payload = json.loads(text)
        else:
            payload = yaml.safe_load(text)
    except (yaml.YAMLError, json.JSONDecodeError) as exc:
        msg = f"Failed to parse config at {path}: {exc}"
        if strict:
            raise ConfigValidationError(msg) from exc
        logger.warning("%s; continuing with defaults", msg)
        return {}

    if payload is None:
        msg = f"Config file is empty: {path}"
        if strict:
            raise ConfigValidationError(msg)
        logger.warning("%s; continuing with defaults", msg)
        return {}

    if not isinstance(payload, dict):
        msg = f"Unexpected config payload type: {type(payload).__name__}"
        if strict:
            raise ConfigValidationError(msg)
        logger.warning("%s; continuing with defaults", msg)
        return {}

    return payload
