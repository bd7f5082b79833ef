"""
Integration tests for method_emitters.py

Tests the get/set and cereal method emitters against tagged headers.
"""

import os
import tempfile
import unittest
from pathlib import Path

from extraction.extractor import extract_file
from extraction.models import ClassData, CodeIndex, MemberData
from generation.line_filters import LineCollector, LineEmitter, LineMiniParser
from generation.method_emitters import (
    CerealMethodEmitter,
    GetSetMethodEmitter,
    generate_methods,
)

FIXTURE = os.path.join(os.path.dirname(__file__), "fixtures", "customer.h.in")


def _index():
    index = CodeIndex()
    index.add(
        "geo::Point",
        ClassData(
            namespaces=["geo"],
            name="Point",
            members=[
                MemberData("int", "x", generate_getter=True, generate_setter=True),
                MemberData("int", "y", serializable=True, generate_getter=True),
                MemberData("std::string", "label"),
            ],
        ),
    )
    return index


def _run(lines, index=None):
    index = index or _index()
    source = LineEmitter()
    parser = LineMiniParser()
    get_set = GetSetMethodEmitter(index)
    cereal = CerealMethodEmitter(index)
    collector = LineCollector()
    parser.subscribe_to(source)
    get_set.subscribe_to(parser)
    cereal.subscribe_to(get_set)
    collector.subscribe_to(cereal)
    for line in lines:
        source.emit(line)
    return collector.lines


class TestGetSetMethodEmitter(unittest.TestCase):
    """Test GetSetMethodEmitter output."""

    def test_getters_then_setters(self):
        """Test getters are emitted before setters with the tag indentation."""
        output = _run(["class Point {", "  [[genGetSetMethods]]", "};"])
        self.assertEqual(
            output,
            [
                "class Point {",
                "  int get_x() const { return x; }",
                "  int get_y() const { return y; }",
                "  void set_x(const int& val) { x = val; }",
                "};",
            ],
        )

    def test_tag_outside_a_class_is_dropped(self):
        """Test a tag with no enclosing class."""
        with self.assertLogs("generation.method_emitters", level="WARNING"):
            output = _run(["[[genGetSetMethods]]", "int x;"])
        self.assertEqual(output, ["int x;"])

    def test_unknown_class(self):
        """Test a tag inside a class missing from the index."""
        with self.assertLogs("generation.method_emitters", level="WARNING"):
            output = _run(["class Unknown {", "[[ genGetSetMethods ]]", "};"])
        self.assertEqual(output, ["class Unknown {", "};"])

    def test_tag_after_class_end_is_dropped(self):
        """Test a tag after the class has closed."""
        with self.assertLogs("generation.method_emitters", level="WARNING"):
            output = _run(["class Point {", "};", "[[genGetSetMethods]]"])
        self.assertEqual(output, ["class Point {", "};"])


class TestCerealMethodEmitter(unittest.TestCase):
    """Test CerealMethodEmitter output."""

    def test_save_and_load(self):
        """Test save and load list the serializable members."""
        output = _run(["struct Point {", "[[genCerealLoadSave]]", "};"])
        self.assertEqual(
            output[1:-1],
            [
                "template <typename Archive>",
                "void save(Archive& ar) const {",
                '  ar(cereal::make_nvp("y", y));',
                "}",
                "template <typename Archive>",
                "void load(Archive& ar) {",
                "  ar(y);",
                "}",
            ],
        )

    def test_class_level_serializable(self):
        """Test a [[cereal]] class serializes every member."""
        index = _index()
        index.classes["geo::Point"].serializable = True
        output = _run(["class Point {", "[[genCerealLoadSave]]", "};"], index)
        self.assertIn('  ar(cereal::make_nvp("label", label));', output)
        self.assertIn("  ar(x);", output)


class TestGenerateMethods(unittest.TestCase):
    """Test generate_methods over a tagged input file."""

    def test_end_to_end(self) -> None:
        """Test index, tags and output file together."""
        index = extract_file(FIXTURE).to_index()
        self.assertIn("shop::Customer", index.classes)

        with tempfile.TemporaryDirectory() as tmpdir:
            destination = Path(tmpdir) / "customer.h"
            written = generate_methods(index, FIXTURE, str(destination))
            lines = destination.read_text(encoding="utf-8").splitlines()

        self.assertEqual(written, len(lines))
        self.assertNotIn("  [[genGetSetMethods]]", lines)
        self.assertNotIn("  [[genCerealLoadSave]]", lines)
        start = lines.index("public:") + 1
        self.assertEqual(
            lines[start:start + 11],
            [
                "  std::string get_name_() const { return name_; }",
                "  int get_visits() const { return visits; }",
                "  void set_name_(const std::string& val) { name_ = val; }",
                "  template <typename Archive>",
                "  void save(Archive& ar) const {",
                '    ar(cereal::make_nvp("name_", name_));',
                "  }",
                "  template <typename Archive>",
                "  void load(Archive& ar) {",
                "    ar(name_);",
                "  }",
            ],
        )
        self.assertIn("  [[cereal,get,set]]", lines)


if __name__ == "__main__":
    unittest.main()
