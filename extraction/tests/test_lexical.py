"""
Unit tests for lexical.py

Tests the comment, directive and whitespace skippers.
"""

import unittest

from extraction.lexical import (
    skip_block_comment,
    skip_directive,
    skip_ignorable,
    skip_line_comment,
    skip_whitespace,
)


class TestBlockComment(unittest.TestCase):
    """Test skipping /* ... */ comments."""

    def test_skips_to_terminator(self):
        """Test that the position after */ is returned."""
        self.assertEqual(skip_block_comment("/* a */x", 0), 7)

    def test_unterminated_is_not_skipped(self):
        """Test that an unterminated comment is left alone."""
        self.assertIsNone(skip_block_comment("/* never closed", 0))

    def test_not_a_comment(self):
        """Test that text not starting with /* is not skipped."""
        self.assertIsNone(skip_block_comment("x /* */", 0))


class TestLineComment(unittest.TestCase):
    """Test skipping // comments and their line terminators."""

    def test_newline_terminated(self):
        """Test a comment ended by \\n."""
        self.assertEqual(skip_line_comment("// hi\nx", 0), 6)

    def test_crlf_terminated(self):
        """Test a comment ended by \\r\\n."""
        self.assertEqual(skip_line_comment("// hi\r\nx", 0), 7)

    def test_cr_terminated(self):
        """Test a comment ended by a lone \\r."""
        self.assertEqual(skip_line_comment("// hi\rx", 0), 6)

    def test_end_of_input_is_not_skipped(self):
        """Test that a comment without a line terminator is not skipped."""
        self.assertIsNone(skip_line_comment("// no line end", 0))


class TestDirectives(unittest.TestCase):
    """Test skipping #pragma once and #include."""

    def test_pragma_once(self):
        """Test #pragma once."""
        text = "#pragma once\nenum"
        self.assertEqual(skip_directive(text, 0), len("#pragma once"))

    def test_include_angle_and_quote(self):
        """Test both include spellings."""
        angle = "#include <fr/codegen/data.h>"
        quote = '#include  "my-header_v1.h"'
        self.assertEqual(skip_directive(angle, 0), len(angle))
        self.assertEqual(skip_directive(quote, 0), len(quote))

    def test_other_directives_are_not_skipped(self):
        """Test that other preprocessor lines are not skipped."""
        self.assertIsNone(skip_directive("#define X 1", 0))
        self.assertIsNone(skip_directive("#pragma pack(1)", 0))


class TestSkipIgnorable(unittest.TestCase):
    """Test skipping runs of ignorable text."""

    def test_mixed_run(self):
        """Test comments, directives and whitespace in one run."""
        text = "  /* c */ // d\n#pragma once\n#include <string>\n\t enum"
        self.assertEqual(skip_ignorable(text, 0), text.index("enum"))

    def test_nothing_to_skip(self):
        """Test that the position is unchanged when nothing is skippable."""
        self.assertEqual(skip_ignorable("enum", 0), 0)

    def test_stops_at_trailing_line_comment(self):
        """Test that a final unterminated line comment stops the run."""
        text = "  // trailing"
        self.assertEqual(skip_ignorable(text, 0), 2)

    def test_whitespace_requires_progress(self):
        """Test that skip_whitespace only matches actual whitespace."""
        self.assertIsNone(skip_whitespace("x", 0))
        self.assertEqual(skip_whitespace(" \n\tx", 0), 3)


if __name__ == "__main__":
    unittest.main()
