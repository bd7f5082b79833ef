"""Tests for run artifact writer."""

import json
import tempfile
import unittest
from pathlib import Path

from core.run_artifacts import write_json_artifact, write_run_report


class TestRunArtifacts(unittest.TestCase):
    def test_write_run_report(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            path = write_run_report(
                report={"status": "success", "value": 1},
                run_id="run-123",
                output_dir=tmpdir,
            )
            self.assertTrue(Path(path).is_file())
            self.assertEqual(Path(path).name, "run-123.json")
            payload = json.loads(Path(path).read_text(encoding="utf-8"))
            self.assertEqual(payload["run_id"], "run-123")
            self.assertEqual(payload["status"], "success")
            self.assertEqual(payload["value"], 1)
            self.assertIn("timestamp_utc", payload)

    def test_write_json_artifact_creates_parents(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            target = Path(tmpdir) / "nested" / "dir" / "index.json"
            write_json_artifact({"b": 1, "a": [1, 2]}, str(target))
            text = target.read_text(encoding="utf-8")
            self.assertTrue(text.endswith("\n"))
            self.assertLess(text.index('"a"'), text.index('"b"'))
            self.assertEqual(json.loads(text), {"a": [1, 2], "b": 1})


if __name__ == "__main__":
    unittest.main()
