"""
Unit tests for scanner.py

Tests the source cursor and the balanced-group helpers.
"""

import unittest

from extraction.scanner import SourceCursor, find_balanced_end, find_unnested


class TestFindBalancedEnd(unittest.TestCase):
    """Test finding the end of a balanced delimiter group."""

    def test_nested_braces(self):
        """Test nested braces are balanced."""
        self.assertEqual(find_balanced_end("{a{b}c}d", 0, "{", "}"), 7)

    def test_braces_inside_literals_do_not_count(self):
        """Test braces in string and character literals are ignored."""
        text = '{ "}" \'{\' }x'
        self.assertEqual(find_balanced_end(text, 0, "{", "}"), len(text) - 1)

    def test_braces_inside_comments_do_not_count(self):
        """Test braces in comments are ignored."""
        text = "{ // }\n /* } */ }x"
        self.assertEqual(find_balanced_end(text, 0, "{", "}"), len(text) - 1)

    def test_digit_separators_are_not_literals(self):
        """Test 1'000 inside a body does not open a character literal."""
        text = "{ return 1'000 + 0xFF'FF; }x"
        self.assertEqual(find_balanced_end(text, 0, "{", "}"), len(text) - 1)

    def test_prefixed_character_literal(self):
        """Test L'}' is still a character literal."""
        text = "{ c = L'}'; }x"
        self.assertEqual(find_balanced_end(text, 0, "{", "}"), len(text) - 1)

    def test_angle_brackets_ignore_parenthesized_comparison(self):
        """Test enable_if_t<(N > 0)> style arguments."""
        self.assertEqual(find_balanced_end("<(N > 0)>x", 0, "<", ">"), 9)

    def test_nested_angle_brackets(self):
        """Test >> closing two template argument lists."""
        text = "<typename A, B<C<D>>>rest"
        self.assertEqual(find_balanced_end(text, 0, "<", ">"), text.index("rest"))

    def test_unbalanced_returns_none(self):
        """Test a group that never closes."""
        self.assertIsNone(find_balanced_end("{{}", 0, "{", "}"))

    def test_must_start_with_opener(self):
        """Test the group must start at the given position."""
        self.assertIsNone(find_balanced_end("x{}", 0, "{", "}"))


class TestFindUnnested(unittest.TestCase):
    """Test finding a terminator outside brackets and literals."""

    def test_skips_nested_groups(self):
        """Test terminators inside parentheses are ignored."""
        self.assertEqual(find_unnested("a(b;c);d", 0, ";"), 6)

    def test_string_literal(self):
        """Test terminators inside string literals are ignored."""
        self.assertEqual(find_unnested('"a;b";', 0, ";"), 5)

    def test_digit_separator(self):
        """Test a digit separator before the terminator."""
        text = " 1'000'000; rest"
        self.assertEqual(find_unnested(text, 0, ";"), text.index(";"))

    def test_character_literal(self):
        """Test a quoted terminator is still skipped."""
        self.assertEqual(find_unnested("';';", 0, ";"), 3)

    def test_unmatched_closer(self):
        """Test an unmatched closer ends the scan."""
        self.assertIsNone(find_unnested("x}", 0, ";"))
        self.assertEqual(find_unnested("x}", 0, ",}"), 1)

    def test_not_found(self):
        """Test text without a terminator."""
        self.assertIsNone(find_unnested("abc", 0, ";"))


class TestSourceCursor(unittest.TestCase):
    """Test the shared read position."""

    def test_keyword_requires_word_boundary(self):
        """Test enum does not match the start of enumeration."""
        cursor = SourceCursor("enumeration")
        self.assertFalse(cursor.peek_keyword("enum"))
        self.assertTrue(SourceCursor("enum{").peek_keyword("enum"))

    def test_identifier_after_comment(self):
        """Test identifiers are matched after skipped comments."""
        cursor = SourceCursor("  /* x */ name_1 rest")
        self.assertEqual(cursor.match_identifier(), "name_1")
        self.assertEqual(cursor.peek_identifier(), "rest")

    def test_match_colon_rejects_scope_separator(self):
        """Test a single colon is not matched inside ::."""
        self.assertFalse(SourceCursor("::x").match_colon())
        self.assertTrue(SourceCursor(" : x").match_colon())

    def test_match_annotation(self):
        """Test the annotation text is returned stripped."""
        cursor = SourceCursor("  [[ cereal, get ]] int x;")
        self.assertEqual(cursor.match_annotation(), "cereal, get")
        self.assertEqual(cursor.peek_identifier(), "int")

    def test_match_annotation_with_bracket_in_string(self):
        """Test a ] inside a string argument does not end the annotation."""
        cursor = SourceCursor('[[deprecated("x]y")]] int a;')
        self.assertEqual(cursor.match_annotation(), 'deprecated("x]y")')
        self.assertEqual(cursor.peek_identifier(), "int")

    def test_match_annotation_requires_double_bracket(self):
        """Test a single bracket pair is not an annotation."""
        cursor = SourceCursor("[x] y")
        self.assertIsNone(cursor.match_annotation())
        self.assertEqual(cursor.pos, 0)

    def test_skip_balanced_returns_consumed_text(self):
        """Test the consumed group is returned."""
        cursor = SourceCursor(" (a, (b)) c")
        self.assertEqual(cursor.skip_balanced("(", ")"), "(a, (b))")
        self.assertEqual(cursor.match_identifier(), "c")

    def test_skip_balanced_failure_keeps_position(self):
        """Test an unbalanced group leaves the cursor in place."""
        cursor = SourceCursor("{ open")
        self.assertIsNone(cursor.skip_balanced("{", "}"))
        self.assertEqual(cursor.pos, 0)

    def test_consume_until(self):
        """Test consuming an initializer up to its semicolon."""
        cursor = SourceCursor("= {1, 2}; next")
        self.assertTrue(cursor.match("="))
        self.assertEqual(cursor.consume_until(";"), "{1, 2}")
        self.assertTrue(cursor.match(";"))

    def test_mark_and_reset(self):
        """Test returning to a saved position."""
        cursor = SourceCursor("alpha beta")
        mark = cursor.mark()
        cursor.match_identifier()
        cursor.reset(mark)
        self.assertEqual(cursor.remainder(), "alpha beta")

    def test_at_end_skips_trailing_whitespace(self):
        """Test at_end ignores trailing skippable text only."""
        self.assertTrue(SourceCursor("  \n /* c */ ").at_end())
        self.assertFalse(SourceCursor("  // c").at_end())


if __name__ == "__main__":
    unittest.main()
