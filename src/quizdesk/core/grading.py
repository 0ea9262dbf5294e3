"""Manual grading of free-response answers.

A grade marks an answer right or wrong and may award partial credit in
points_earned (0 to 1). After grading, the submission score is recomputed
from every answer so multiple-choice and free-response points add up.
"""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from quizdesk.core.accounts import UserContext
from quizdesk.core.assignments import get_managed_assignment
from quizdesk.core.errors import ValidationError
from quizdesk.core.submissions import get_submission
from quizdesk.db import submissions_repository as repo
from quizdesk.db.submissions_repository import AnswerRecord

logger = structlog.get_logger(__name__)


@dataclass
class FRQGrade:
    """A grader's verdict on one answer."""

    answer_id: str
    is_correct: bool | None
    feedback: str | None = None
    points_earned: float | None = None


def list_frq_answers(submission_id: str) -> list[AnswerRecord]:
    """Free-response answers in question order."""
    return [a for a in repo.list_answers(submission_id) if a.question_type == "free_response"]


def ungraded_count(submission_id: str) -> int:
    return sum(1 for a in list_frq_answers(submission_id) if a.is_correct is None)


def _points(grade: FRQGrade) -> float:
    if grade.points_earned is None:
        return 1.0 if grade.is_correct else 0.0
    if not 0 <= grade.points_earned <= 1:
        raise ValidationError("Points must be between 0 and 1")
    return float(grade.points_earned)


def recalculate_submission_score(submission_id: str) -> float:
    """Recompute the score from all answers and store it.

    Answers with points_earned contribute those points; the others
    contribute 1 when marked correct.
    """
    score = 0.0
    for answer in repo.list_answers(submission_id):
        if answer.points_earned is not None:
            score += answer.points_earned
        elif answer.is_correct is True:
            score += 1

    repo.update_submission_score(submission_id, score)
    logger.info("grading.score_recalculated", submission_id=submission_id, score=score)
    return score


def grade_frq_answers(
    grader: UserContext, submission_id: str, grades: list[FRQGrade]
) -> float:
    """Store grades for a submission's free-response answers.

    Grades with is_correct None are skipped.

    Returns:
        The recalculated submission score

    Raises:
        NotFoundError: Unknown submission
        PermissionDeniedError: Grader does not manage the assignment
        ValidationError: Answer outside this submission or bad points
    """
    submission = get_submission(submission_id)
    get_managed_assignment(grader, submission.assignment_id)

    answer_ids = {a.id for a in list_frq_answers(submission_id)}
    pending = [g for g in grades if g.is_correct is not None]
    points = {}
    for grade in pending:
        if grade.answer_id not in answer_ids:
            raise ValidationError(f"Answer '{grade.answer_id}' is not a free-response answer of this submission")
        points[grade.answer_id] = _points(grade)

    for grade in pending:
        repo.update_answer_grade(
            answer_id=grade.answer_id,
            is_correct=bool(grade.is_correct),
            points_earned=points[grade.answer_id],
            feedback=grade.feedback or None,
            graded_by=grader.id,
        )

    logger.info(
        "grading.frq_graded",
        submission_id=submission_id,
        grader_id=grader.id,
        graded=len(pending),
        skipped=len(grades) - len(pending),
    )
    return recalculate_submission_score(submission_id)
