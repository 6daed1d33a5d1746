"""Tests for label wrapping and LaTeX escaping."""

import pytest

from pragmagraph.text import (
    escape_latex,
    is_latex_content,
    label_lines,
    line_offsets,
    wrap_text,
)


class TestWrapping:
    """Test SVG label wrapping."""

    def test_single_word_never_split(self):
        assert wrap_text("Supercalifragilistic", 10, 14) == ["Supercalifragilistic"]

    def test_greedy_wrap(self):
        """A 100-wide node leaves 80 units, about 9 characters at 14px."""
        assert wrap_text("Giving and asking for reasons", 80, 14) == [
            "Giving", "and", "asking", "for", "reasons",
        ]

    def test_wide_box_keeps_words_together(self):
        assert wrap_text("Giving and asking for reasons", 200, 14) == [
            "Giving and asking for", "reasons",
        ]

    def test_short_labels_stay_on_one_line(self):
        """Labels of 20 characters or fewer are not wrapped."""
        assert label_lines("Logical vocabulary", 80, 14) == ["Logical vocabulary"]

    def test_long_labels_wrap(self):
        assert len(label_lines("Giving and asking for reasons", 80, 14)) == 5

    def test_line_offsets_centre_block(self):
        assert line_offsets(1, 14) == [0]
        assert line_offsets(3, 10) == pytest.approx([-12, 0, 12])
        assert line_offsets(2, 10) == pytest.approx([-6, 6])


class TestLatexDetection:
    """Test the already-LaTeX heuristic."""

    @pytest.mark.parametrize("text", [
        "x^2 + y^2 = 1",
        "$a + b$",
        "$$E = mc^2$$",
        r"\alpha decay",
        r"\frac{1}{2}",
        r"\textbf{bold}",
        "a_i",
        r"\(x\)",
    ])
    def test_latex(self, text):
        assert is_latex_content(text)

    @pytest.mark.parametrize("text", [
        "50% off",
        "Giving reasons",
        "R&D",
        "#1 priority",
        "{braces}",
    ])
    def test_plain(self, text):
        assert not is_latex_content(text)


class TestEscaping:
    """Test label escaping for TikZ node bodies."""

    def test_math_is_preserved(self):
        """Backslashes and carets survive in math content."""
        assert escape_latex("x^2 + y^2 = 1") == "x^2 + y^2 = 1"
        assert escape_latex(r"\alpha") == r"\alpha"

    def test_plain_percent(self):
        assert escape_latex("50% off") == r"50\% off"

    def test_latex_content_escapes_breaking_characters(self):
        assert escape_latex(r"$x$ & 100% #1") == r"$x$ \& 100\% \#1"

    def test_latex_content_keeps_existing_escapes(self):
        assert escape_latex(r"$x$ \% done") == r"$x$ \% done"

    def test_plain_full_escape(self):
        assert escape_latex("a & b") == r"a \& b"
        assert escape_latex("{x}") == r"\{x\}"
        assert escape_latex("~home") == r"\textasciitilde{}home"
        assert escape_latex("cost $5") == r"cost \$5"

    def test_backslash_not_double_escaped(self):
        """The replacement for a backslash keeps its own braces intact."""
        assert escape_latex("a\\") == r"a\textbackslash{}"

    def test_empty(self):
        assert escape_latex("") == ""
