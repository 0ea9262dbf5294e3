"""ASC answer-sheet parser.

ASC is the shorthand instructors type to enter a quiz answer key in one line:

    10: 12345 F F(x=1) 321

- The prefix before the first colon is the number of questions expected.
- Digits 1-5 are multiple-choice answers (stored 0-based).
- ``F``/``f`` is a free-response question; ``F(...)`` carries a model answer,
  which may itself contain balanced parentheses.
- Whitespace between answers is ignored.

The parser is a single left-to-right pass. Errors carry the offset into the
original input so editors can point at the offending character.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Literal

import structlog

from quizdesk.core.errors import ASCParseError

logger = structlog.get_logger(__name__)

# =============================================================================
# TYPES
# =============================================================================

QuestionType = Literal["multiple_choice", "free_response"]

DEFAULT_OPTIONS = ["1", "2", "3", "4", "5"]

MCQ_DIGITS = "12345"
ASCII_DIGITS = "0123456789"

_COUNT_PATTERN = re.compile(r"^[+-]?[0-9]+")


@dataclass
class ParsedQuestion:
    """A question produced by a bulk-entry parser."""

    text: str
    question_type: QuestionType
    correct_answer: int | None = None
    model_answer: str = ""
    explanation: str = ""
    options: list[str] = field(default_factory=lambda: list(DEFAULT_OPTIONS))

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "text": self.text,
            "options": list(self.options),
            "correct_answer": self.correct_answer,
            "explanation": self.explanation,
            "question_type": self.question_type,
            "model_answer": self.model_answer,
        }


# =============================================================================
# HELPERS
# =============================================================================


def parse_balanced_parentheses(text: str, start: int) -> tuple[str, int] | None:
    """Read a parenthesised group starting at ``start``.

    Args:
        text: Input string
        start: Index expected to hold the opening parenthesis

    Returns:
        (content, end) where content excludes the outer parentheses and end
        is the index of the matching closing parenthesis, or None when
        ``text[start]`` is not ``(`` or the group never closes.
    """
    if start >= len(text) or text[start] != "(":
        return None

    depth = 0
    content: list[str] = []

    for i in range(start, len(text)):
        char = text[i]
        if char == "(":
            depth += 1
            if depth > 1:
                content.append(char)
        elif char == ")":
            depth -= 1
            if depth == 0:
                return "".join(content), i
            content.append(char)
        else:
            content.append(char)

    return None


def _parse_count(prefix: str) -> int | None:
    """Parse the leading integer of the count prefix, as parseInt would."""
    match = _COUNT_PATTERN.match(prefix)
    if match is None:
        return None
    return int(match.group(0))


def _question_text(index: int) -> str:
    return f"Question {index}"


# =============================================================================
# PARSER
# =============================================================================


def parse_asc(text: str) -> list[ParsedQuestion]:
    """Parse ASC text into a list of questions.

    Args:
        text: Raw ASC input, e.g. ``"5: 123FF(x=1)"``

    Returns:
        Parsed questions, exactly as many as the count prefix declares.

    Raises:
        ASCParseError: With the offending position when the input is invalid.
    """
    stripped = text.strip()
    offset = len(text) - len(text.lstrip())

    colon = stripped.find(":")
    if colon == -1:
        raise ASCParseError(
            "Format error: start with 'N:' to give the number of questions "
            "(e.g. 10: 12345)"
        )

    expected = _parse_count(stripped[:colon].strip())
    if expected is None or expected <= 0:
        raise ASCParseError(
            "Invalid question count: use a positive integer", position=offset
        )

    body_start = offset + colon + 1
    body = stripped[colon + 1 :]
    questions: list[ParsedQuestion] = []

    i = 0
    while i < len(body):
        char = body[i]

        if char.isspace():
            i += 1
            continue

        if char in MCQ_DIGITS:
            questions.append(
                ParsedQuestion(
                    text=_question_text(len(questions) + 1),
                    question_type="multiple_choice",
                    correct_answer=int(char) - 1,
                )
            )
            i += 1
            continue

        if char in ASCII_DIGITS:
            raise ASCParseError(
                f'Invalid MCQ answer "{char}": only digits 1-5 are allowed',
                position=body_start + i,
            )

        if char in ("F", "f"):
            model_answer = ""
            next_index = i + 1
            if next_index < len(body) and body[next_index] == "(":
                group = parse_balanced_parentheses(body, next_index)
                if group is None:
                    raise ASCParseError(
                        "Unbalanced parentheses: model answer is never closed",
                        position=body_start + next_index,
                    )
                model_answer, end = group
                i = end + 1
            else:
                i += 1

            questions.append(
                ParsedQuestion(
                    text=_question_text(len(questions) + 1),
                    question_type="free_response",
                    model_answer=model_answer,
                )
            )
            continue

        raise ASCParseError(
            f'Unknown character "{char}"', position=body_start + i
        )

    if len(questions) != expected:
        raise ASCParseError(
            f"Answer count mismatch: got {len(questions)}, expected {expected}"
        )

    if not questions:
        raise ASCParseError("No questions found")

    logger.debug(
        "asc.parsed",
        count=len(questions),
        frq=sum(1 for q in questions if q.question_type == "free_response"),
    )
    return questions
