"""Block-format bulk question entry.

Questions are separated by blank lines:

    What is 2 + 2?
    4

    [FR] Derive the quadratic formula
    x = (-b ± sqrt(b^2 - 4ac)) / 2a

A multiple-choice block is the question text followed by the correct option
number (1-5). A free-response block starts with ``[FR]`` (or ``[서술형]``)
and every following line is part of the model answer.
"""

from __future__ import annotations

import re

from quizdesk.core.asc_parser import ParsedQuestion
from quizdesk.core.errors import BulkParseError

FRQ_TAGS = ("[FR]", "[서술형]")

_BLOCK_SEPARATOR = re.compile(r"\n\s*\n")
_LEADING_INT = re.compile(r"^[+-]?[0-9]+")


def _strip_frq_tag(line: str) -> str:
    for tag in FRQ_TAGS:
        if line.startswith(tag):
            return line[len(tag) :].strip()
    return line


def parse_bulk_questions(text: str) -> list[ParsedQuestion]:
    """Parse blank-line separated question blocks.

    Raises:
        BulkParseError: If a correct-answer line is not 1-5 or no question
            could be read at all.
    """
    questions: list[ParsedQuestion] = []

    for block in _BLOCK_SEPARATOR.split(text.strip()):
        lines = [line for line in block.strip().split("\n") if line.strip()]
        if len(lines) < 2:
            continue

        first_line = lines[0].strip()

        if first_line.startswith(FRQ_TAGS):
            questions.append(
                ParsedQuestion(
                    text=_strip_frq_tag(first_line),
                    question_type="free_response",
                    model_answer="\n".join(lines[1:]).strip(),
                )
            )
            continue

        answer_line = lines[1].strip()
        match = _LEADING_INT.match(answer_line)
        correct = int(match.group(0)) - 1 if match else -1

        if not 0 <= correct <= 4:
            raise BulkParseError(
                f'Question "{first_line}": correct answer "{answer_line}" '
                "must be a number between 1 and 5"
            )

        questions.append(
            ParsedQuestion(
                text=first_line,
                question_type="multiple_choice",
                correct_answer=correct,
            )
        )

    if not questions:
        raise BulkParseError("No questions found. Check the input format.")

    return questions
