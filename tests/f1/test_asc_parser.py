"""Tests for the ASC answer-sheet parser (F1)."""

import pytest

from quizdesk.core.asc_parser import (
    DEFAULT_OPTIONS,
    parse_asc,
    parse_balanced_parentheses,
)
from quizdesk.core.errors import ASCParseError


class TestParseAscValid:
    """Inputs that parse."""

    def test_mcq_only(self):
        """Digits 1-5 become 0-based correct answers."""
        questions = parse_asc("5: 12345")
        assert [q.correct_answer for q in questions] == [0, 1, 2, 3, 4]
        assert all(q.question_type == "multiple_choice" for q in questions)
        assert [q.text for q in questions] == [f"Question {i}" for i in range(1, 6)]

    def test_mcq_default_options(self):
        """Every question carries the five numbered options."""
        questions = parse_asc("1: 3")
        assert questions[0].options == DEFAULT_OPTIONS
        assert questions[0].options is not DEFAULT_OPTIONS

    def test_frq_without_model_answer(self):
        """F and f are free-response questions."""
        questions = parse_asc("2: Ff")
        assert [q.question_type for q in questions] == ["free_response", "free_response"]
        assert questions[0].correct_answer is None
        assert questions[0].model_answer == ""

    def test_frq_with_model_answer(self):
        """Parenthesised text after F is the model answer."""
        questions = parse_asc("5: 123FF(x=1)")
        assert questions[3].model_answer == ""
        assert questions[4].model_answer == "x=1"

    def test_nested_parentheses_in_model_answer(self):
        """Inner parentheses are kept."""
        questions = parse_asc("1: F(f(x) = (x+1)^2)")
        assert questions[0].model_answer == "f(x) = (x+1)^2"

    def test_whitespace_is_ignored(self):
        """Spaces and newlines between answers are skipped."""
        questions = parse_asc("  4:  1 2\n 3  F ")
        assert len(questions) == 4
        assert questions[2].correct_answer == 2

    def test_count_prefix_with_spaces(self):
        """Whitespace around the count is allowed."""
        assert len(parse_asc(" 3 : 111")) == 3

    def test_count_uses_leading_digits(self):
        """Trailing junk after the count digits is ignored."""
        assert len(parse_asc("2abc: 12")) == 2

    def test_model_answer_may_contain_any_character(self):
        """Characters invalid outside a group are fine inside one."""
        questions = parse_asc("2: F(7 + 9 = 16!) 1")
        assert questions[0].model_answer == "7 + 9 = 16!"
        assert questions[1].correct_answer == 0

    def test_to_dict(self):
        """Parsed questions serialize with all draft fields."""
        data = parse_asc("1: F(ok)")[0].to_dict()
        assert data["question_type"] == "free_response"
        assert data["model_answer"] == "ok"
        assert data["correct_answer"] is None
        assert data["options"] == DEFAULT_OPTIONS


class TestParseAscErrors:
    """Inputs that fail, with their reported positions."""

    def test_missing_colon(self):
        """No count prefix is a whole-input error."""
        with pytest.raises(ASCParseError) as exc_info:
            parse_asc("12345")
        assert "N:" in exc_info.value.message
        assert exc_info.value.position is None

    @pytest.mark.parametrize("text", ["0: 1", "-2: 1", "abc: 1", ": 1"])
    def test_invalid_count(self, text):
        """Count must be a positive integer."""
        with pytest.raises(ASCParseError) as exc_info:
            parse_asc(text)
        assert "question count" in exc_info.value.message
        assert exc_info.value.position == 0

    def test_non_ascii_count_digit(self):
        """Only ASCII digits form the count."""
        with pytest.raises(ASCParseError) as exc_info:
            parse_asc("\u0663: 123")
        assert "question count" in exc_info.value.message

    def test_non_ascii_digit_in_answers_is_unknown(self):
        """Superscript and other Unicode digits are not MCQ answers."""
        with pytest.raises(ASCParseError) as exc_info:
            parse_asc("1: \u00b2")
        assert exc_info.value.message == 'Unknown character "\u00b2"'
        assert exc_info.value.position == 3

    def test_invalid_count_position_skips_leading_whitespace(self):
        """Position points at the first non-blank character."""
        with pytest.raises(ASCParseError) as exc_info:
            parse_asc("   x: 1")
        assert exc_info.value.position == 3

    def test_invalid_mcq_digit(self):
        """Digits outside 1-5 are rejected at their position."""
        with pytest.raises(ASCParseError) as exc_info:
            parse_asc("3: 160")
        assert '"6"' in exc_info.value.message
        assert exc_info.value.position == 4

    def test_unknown_character(self):
        """Letters other than F are rejected at their position."""
        with pytest.raises(ASCParseError) as exc_info:
            parse_asc("3: 1x2")
        assert 'Unknown character "x"' in exc_info.value.message
        assert exc_info.value.position == 4

    def test_unbalanced_parentheses(self):
        """An unclosed model answer points at its opening parenthesis."""
        with pytest.raises(ASCParseError) as exc_info:
            parse_asc("2: 1F(abc")
        assert "Unbalanced" in exc_info.value.message
        assert exc_info.value.position == 5

    def test_position_includes_leading_whitespace(self):
        """Positions index the original, untrimmed input."""
        with pytest.raises(ASCParseError) as exc_info:
            parse_asc("  2: 1?")
        assert exc_info.value.position == 6

    def test_count_mismatch(self):
        """The number of answers must match the count."""
        with pytest.raises(ASCParseError) as exc_info:
            parse_asc("5: 123")
        assert exc_info.value.message == "Answer count mismatch: got 3, expected 5"
        assert exc_info.value.position is None

    def test_error_to_dict(self):
        """Errors serialize with message and position."""
        with pytest.raises(ASCParseError) as exc_info:
            parse_asc("1: 9")
        assert exc_info.value.to_dict() == {
            "error": exc_info.value.message,
            "position": 3,
        }


class TestParseBalancedParentheses:
    """Tests for parse_balanced_parentheses."""

    def test_simple_group(self):
        assert parse_balanced_parentheses("(abc)", 0) == ("abc", 4)

    def test_nested_group(self):
        assert parse_balanced_parentheses("x(a(b)c)d", 1) == ("a(b)c", 7)

    def test_not_an_opening_parenthesis(self):
        assert parse_balanced_parentheses("abc", 0) is None

    def test_start_out_of_range(self):
        assert parse_balanced_parentheses("(", 5) is None

    def test_unclosed(self):
        assert parse_balanced_parentheses("(a(b)", 0) is None
