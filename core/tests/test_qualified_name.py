"""Tests for the fully qualified name contract."""

import unittest

from core.qualified_name import (
    join_namespace,
    make_qualified_name,
    normalize_cpp_entity_name,
    normalize_cpp_type,
    split_qualified_name,
)


class TestQualifiedName(unittest.TestCase):
    def test_make_qualified_name(self) -> None:
        self.assertEqual(make_qualified_name(["foo", "bar"], "Color"), "foo::bar::Color")

    def test_no_leading_separator_without_namespace(self) -> None:
        self.assertEqual(make_qualified_name([], "Color"), "Color")

    def test_join_namespace(self) -> None:
        self.assertEqual(join_namespace(["a", "b", "c"]), "a::b::c")
        self.assertEqual(join_namespace([]), "")

    def test_split_round_trip(self) -> None:
        namespaces, name = split_qualified_name("foo :: bar::Color")
        self.assertEqual(namespaces, ["foo", "bar"])
        self.assertEqual(name, "Color")
        self.assertEqual(split_qualified_name("Color"), ([], "Color"))

    def test_split_rejects_malformed(self) -> None:
        with self.assertRaises(ValueError):
            split_qualified_name("")
        with self.assertRaises(ValueError):
            split_qualified_name("foo::::Color")

    def test_normalize_entity_name(self) -> None:
        self.assertEqual(normalize_cpp_entity_name("  std ::  string "), "std::string")

    def test_normalize_type(self) -> None:
        self.assertEqual(
            normalize_cpp_type("std::map< int , std::string > &"),
            "std::map<int,std::string>&",
        )
        self.assertEqual(normalize_cpp_type("unsigned   long"), "unsigned long")
        self.assertEqual(normalize_cpp_type("char *"), "char*")


if __name__ == "__main__":
    unittest.main()
