"""Repository functions for submissions and student_answers."""

from __future__ import annotations

import math
import sqlite3
from dataclasses import dataclass
from typing import Any

import structlog

from quizdesk.db.database import get_db, new_id, placeholders, utc_now

logger = structlog.get_logger(__name__)


@dataclass
class SubmissionRecord:
    """Submission record, optionally joined with assignment and student."""

    id: str
    assignment_id: str
    student_id: str
    submitted_at: str
    score: float | None
    total_questions: int
    assignment_title: str = ""
    assignment_type: str = ""
    assignment_due_date: str | None = None
    student_name: str = ""

    @property
    def percentage(self) -> int | None:
        """Rounded percent score, None while ungraded."""
        if self.score is None or self.total_questions <= 0:
            return None
        return math.floor(self.score / self.total_questions * 100 + 0.5)


@dataclass
class AnswerRecord:
    """Student answer record joined with its question."""

    id: str
    submission_id: str
    question_id: str
    selected_answer: int | None
    text_answer: str | None
    is_correct: bool | None
    points_earned: float | None
    graded_by: str | None
    graded_at: str | None
    feedback: str | None
    question_text: str = ""
    question_type: str = "multiple_choice"
    model_answer: str | None = None
    order_number: int = 0


_SUBMISSION_SELECT = """
    SELECT s.*,
           COALESCE(a.title, '') AS assignment_title,
           COALESCE(a.assignment_type, '') AS assignment_type,
           a.due_date AS assignment_due_date,
           COALESCE(p.full_name, '') AS student_name
    FROM submissions s
    LEFT JOIN assignments a ON a.id = s.assignment_id
    LEFT JOIN profiles p ON p.id = s.student_id
"""

_ANSWER_SELECT = """
    SELECT sa.*,
           q.text AS question_text,
           q.question_type AS question_type,
           q.model_answer AS model_answer,
           q.order_number AS order_number
    FROM student_answers sa
    JOIN questions q ON q.id = sa.question_id
"""


def _optional_bool(value: Any) -> bool | None:
    return None if value is None else bool(value)


def _row_to_submission(row: sqlite3.Row) -> SubmissionRecord:
    return SubmissionRecord(
        id=row["id"],
        assignment_id=row["assignment_id"],
        student_id=row["student_id"],
        submitted_at=row["submitted_at"],
        score=row["score"],
        total_questions=row["total_questions"],
        assignment_title=row["assignment_title"],
        assignment_type=row["assignment_type"],
        assignment_due_date=row["assignment_due_date"],
        student_name=row["student_name"],
    )


def _row_to_answer(row: sqlite3.Row) -> AnswerRecord:
    return AnswerRecord(
        id=row["id"],
        submission_id=row["submission_id"],
        question_id=row["question_id"],
        selected_answer=row["selected_answer"],
        text_answer=row["text_answer"],
        is_correct=_optional_bool(row["is_correct"]),
        points_earned=row["points_earned"],
        graded_by=row["graded_by"],
        graded_at=row["graded_at"],
        feedback=row["feedback"],
        question_text=row["question_text"],
        question_type=row["question_type"],
        model_answer=row["model_answer"],
        order_number=row["order_number"],
    )


# =============================================================================
# SUBMISSIONS
# =============================================================================


def insert_submission(
    assignment_id: str,
    student_id: str,
    score: float | None,
    total_questions: int,
    answers: list[dict[str, Any]],
) -> str:
    """Insert a submission and its answers in one transaction.

    Each answer dict holds question_id, selected_answer, text_answer and
    is_correct.

    Returns:
        The new submission ID
    """
    submission_id = new_id()

    with get_db() as conn:
        conn.execute(
            """
            INSERT INTO submissions (id, assignment_id, student_id, submitted_at, score, total_questions)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (submission_id, assignment_id, student_id, utc_now(), score, total_questions),
        )
        conn.executemany(
            """
            INSERT INTO student_answers (
                id, submission_id, question_id, selected_answer, text_answer, is_correct
            ) VALUES (?, ?, ?, ?, ?, ?)
            """,
            [
                (
                    new_id(),
                    submission_id,
                    a["question_id"],
                    a.get("selected_answer"),
                    a.get("text_answer"),
                    None if a.get("is_correct") is None else int(a["is_correct"]),
                )
                for a in answers
            ],
        )

    logger.debug(
        "submissions.inserted",
        submission_id=submission_id,
        assignment_id=assignment_id,
        answers=len(answers),
    )
    return submission_id


def get_submission(submission_id: str) -> SubmissionRecord | None:
    """Get submission by ID."""
    with get_db() as conn:
        row = conn.execute(
            _SUBMISSION_SELECT + " WHERE s.id = ?", (submission_id,)
        ).fetchone()
    return _row_to_submission(row) if row else None


def count_submissions(assignment_id: str, student_id: str) -> int:
    """Number of attempts a student has made on an assignment."""
    with get_db() as conn:
        row = conn.execute(
            "SELECT COUNT(*) AS n FROM submissions WHERE assignment_id = ? AND student_id = ?",
            (assignment_id, student_id),
        ).fetchone()
    return row["n"]


def list_submissions_for_student(student_id: str) -> list[SubmissionRecord]:
    """A student's submissions, newest first."""
    with get_db() as conn:
        rows = conn.execute(
            _SUBMISSION_SELECT
            + " WHERE s.student_id = ? ORDER BY s.submitted_at DESC, s.rowid DESC",
            (student_id,),
        ).fetchall()
    return [_row_to_submission(row) for row in rows]


def list_submissions_for_assignments(assignment_ids: list[str]) -> list[SubmissionRecord]:
    """Submissions on any of the given assignments, newest first."""
    if not assignment_ids:
        return []
    with get_db() as conn:
        rows = conn.execute(
            _SUBMISSION_SELECT
            + f" WHERE s.assignment_id IN ({placeholders(assignment_ids)})"
            + " ORDER BY s.submitted_at DESC, s.rowid DESC",
            assignment_ids,
        ).fetchall()
    return [_row_to_submission(row) for row in rows]


def update_submission_score(submission_id: str, score: float | None) -> None:
    """Overwrite a submission's score."""
    with get_db() as conn:
        conn.execute(
            "UPDATE submissions SET score = ? WHERE id = ?", (score, submission_id)
        )
    logger.debug("submissions.score_updated", submission_id=submission_id, score=score)


# =============================================================================
# ANSWERS
# =============================================================================


def list_answers(submission_id: str) -> list[AnswerRecord]:
    """Answers of a submission ordered by question order."""
    with get_db() as conn:
        rows = conn.execute(
            _ANSWER_SELECT + " WHERE sa.submission_id = ? ORDER BY q.order_number",
            (submission_id,),
        ).fetchall()
    return [_row_to_answer(row) for row in rows]


def update_answer_grade(
    answer_id: str,
    is_correct: bool,
    points_earned: float | None,
    feedback: str | None,
    graded_by: str,
) -> bool:
    """Store a grader's verdict on one answer."""
    with get_db() as conn:
        cursor = conn.execute(
            """
            UPDATE student_answers
            SET is_correct = ?, points_earned = ?, feedback = ?, graded_by = ?, graded_at = ?
            WHERE id = ?
            """,
            (int(is_correct), points_earned, feedback, graded_by, utc_now(), answer_id),
        )
    return cursor.rowcount > 0
