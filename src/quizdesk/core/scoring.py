"""Automatic scoring of multiple-choice answers and percent helpers."""

from __future__ import annotations

import math
from typing import Any, Iterable, Literal

import structlog

from quizdesk.core.errors import NotFoundError
from quizdesk.db import assignments_repository as repo

logger = structlog.get_logger(__name__)

ScoreBand = Literal["high", "medium", "low"]


def percent(score: float, total: int) -> int:
    """Percent rounded half up, 0 when there is nothing to score."""
    if total <= 0:
        return 0
    return math.floor(score / total * 100 + 0.5)


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def score_band(percentage: float) -> ScoreBand:
    """Colour band used for score badges."""
    if percentage >= 80:
        return "high"
    if percentage >= 60:
        return "medium"
    return "low"


def _selected(answer: dict[str, Any]) -> int | None:
    value = answer.get("selected_answer")
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value


def calculate_submission_score(
    assignment_id: str, answers: Iterable[dict[str, Any]]
) -> tuple[int, int]:
    """Count correct multiple-choice answers against the stored key.

    Answers naming unknown questions are ignored. Free-response questions
    never match here; they are scored later by a grader.

    Returns:
        (score, total_questions)

    Raises:
        NotFoundError: If the assignment has no questions
    """
    questions = repo.get_questions(assignment_id)
    if not questions:
        raise NotFoundError("No questions found for this assignment")

    key = {q.id: q.correct_answer for q in questions}
    score = 0
    for answer in answers:
        selected = _selected(answer)
        if selected is None:
            continue
        correct = key.get(answer.get("question_id"))
        if correct is not None and selected == correct:
            score += 1

    logger.debug(
        "scoring.calculated",
        assignment_id=assignment_id,
        score=score,
        total=len(questions),
    )
    return score, len(questions)
