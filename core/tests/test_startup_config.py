"""Tests for startup config helpers."""

import logging
import os
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from core.startup_config import (
    ConfigValidationError,
    load_config_payload,
    resolve_log_level,
    resolve_strict_config_validation,
    resolve_strict_parse,
)


class TestStartupConfig(unittest.TestCase):
    def _write_config(self, content: str, suffix: str = ".yml") -> str:
        handle = tempfile.NamedTemporaryFile(mode="w", suffix=suffix, delete=False)
        handle.write(content)
        handle.flush()
        handle.close()
        return handle.name

    def test_load_non_strict_missing_returns_empty(self) -> None:
        payload = load_config_payload("/definitely/missing.yml", strict=False)
        self.assertEqual(payload, {})

    def test_load_strict_missing_raises(self) -> None:
        with self.assertRaises(ConfigValidationError):
            load_config_payload("/definitely/missing.yml", strict=True)

    def test_load_yaml_mapping(self) -> None:
        path = self._write_config("project_name: demo\nheaders: [a.h, b.h]\n")
        try:
            payload = load_config_payload(path, strict=True)
            self.assertEqual(payload["project_name"], "demo")
            self.assertEqual(payload["headers"], ["a.h", "b.h"])
        finally:
            Path(path).unlink(missing_ok=True)

    def test_load_json_by_suffix(self) -> None:
        path = self._write_config('{"project_name": "demo"}', suffix=".json")
        try:
            self.assertEqual(load_config_payload(path), {"project_name": "demo"})
        finally:
            Path(path).unlink(missing_ok=True)

    def test_malformed_yaml_strict_raises(self) -> None:
        path = self._write_config("project_name: [unclosed\n")
        try:
            with self.assertRaises(ConfigValidationError):
                load_config_payload(path, strict=True)
            self.assertEqual(load_config_payload(path, strict=False), {})
        finally:
            Path(path).unlink(missing_ok=True)

    def test_non_mapping_payload(self) -> None:
        path = self._write_config("- just\n- a list\n")
        try:
            with self.assertRaises(ConfigValidationError):
                load_config_payload(path, strict=True)
            self.assertEqual(load_config_payload(path, strict=False), {})
        finally:
            Path(path).unlink(missing_ok=True)

    def test_env_flags(self) -> None:
        with mock.patch.dict(os.environ, {"CODEGEN_STRICT_CONFIG": "yes"}):
            self.assertTrue(resolve_strict_config_validation())
        with mock.patch.dict(os.environ, {"CODEGEN_STRICT_PARSE": "0"}):
            self.assertFalse(resolve_strict_parse(default=True))
        with mock.patch.dict(os.environ, {}, clear=True):
            self.assertTrue(resolve_strict_parse(default=True))

    def test_resolve_log_level(self) -> None:
        with mock.patch.dict(os.environ, {"CODEGEN_LOG_LEVEL": "debug"}):
            self.assertEqual(resolve_log_level(), logging.DEBUG)
        with mock.patch.dict(os.environ, {"CODEGEN_LOG_LEVEL": "chatty"}):
            self.assertEqual(resolve_log_level(default=logging.WARNING), logging.WARNING)


if __name__ == "__main__":
    unittest.main()
