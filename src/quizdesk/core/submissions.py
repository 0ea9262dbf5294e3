"""Quiz submission by students and submission listings."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import structlog

from quizdesk.core.accounts import UserContext
from quizdesk.core.assignments import get_assignment
from quizdesk.core.errors import (
    AttemptLimitError,
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from quizdesk.core.scoring import calculate_submission_score
from quizdesk.db import assignments_repository as assignments_repo
from quizdesk.db import submissions_repository as repo
from quizdesk.db.assignments_repository import QuestionRecord
from quizdesk.db.submissions_repository import AnswerRecord, SubmissionRecord

logger = structlog.get_logger(__name__)


@dataclass
class SubmissionResult:
    """A stored submission together with the answer key."""

    submission: SubmissionRecord
    questions: list[QuestionRecord] = field(default_factory=list)
    answers: list[AnswerRecord] = field(default_factory=list)


def check_attempts(assignment_id: str, student_id: str) -> int:
    """Return the number of previous attempts if another one is allowed.

    Raises:
        AttemptLimitError: max_attempts is set and used up
        ConflictError: The assignment is not resubmittable and was submitted
    """
    assignment = get_assignment(assignment_id)
    previous = repo.count_submissions(assignment_id, student_id)

    if assignment.max_attempts is not None and previous >= assignment.max_attempts:
        raise AttemptLimitError(assignment.max_attempts)
    if not assignment.is_resubmittable and previous >= 1:
        raise ConflictError("You have already submitted this assignment")
    return previous


def _collect_answers(
    questions: list[QuestionRecord], answers: list[dict[str, Any]]
) -> list[dict[str, Any]]:
    """Match answers to questions and check that every question is answered."""
    by_question = {a.get("question_id"): a for a in answers}
    known = {q.id for q in questions}
    unknown = [qid for qid in by_question if qid not in known]
    if unknown:
        raise ValidationError(f"Unknown question '{unknown[0]}'")

    rows = []
    for i, question in enumerate(questions, start=1):
        answer = by_question.get(question.id) or {}
        if question.question_type == "free_response":
            text = (answer.get("text_answer") or "").strip()
            if not text:
                raise ValidationError(f"Please answer question {i}")
            rows.append(
                {
                    "question_id": question.id,
                    "selected_answer": None,
                    "text_answer": text,
                    "is_correct": None,
                }
            )
            continue

        selected = answer.get("selected_answer")
        if isinstance(selected, bool) or not isinstance(selected, int) or not 0 <= selected <= 4:
            raise ValidationError(f"Please answer question {i}")
        rows.append(
            {
                "question_id": question.id,
                "selected_answer": selected,
                "text_answer": None,
                "is_correct": selected == question.correct_answer,
            }
        )
    return rows


def submit_assignment(
    student: UserContext, assignment_id: str, answers: list[dict[str, Any]]
) -> SubmissionResult:
    """Score and store a student's attempt.

    Multiple-choice answers are marked right or wrong immediately;
    free-response answers wait for a grader.

    Raises:
        NotFoundError: Unknown assignment or no questions
        PermissionDeniedError: Assignment not assigned to the student
        AttemptLimitError, ConflictError: No attempts left
        ValidationError: A question is unanswered
    """
    get_assignment(assignment_id)
    if not assignments_repo.is_student_assigned(assignment_id, student.id):
        raise PermissionDeniedError("This assignment is not assigned to you")

    previous = check_attempts(assignment_id, student.id)

    questions = assignments_repo.get_questions(assignment_id)
    if not questions:
        raise NotFoundError("No questions found for this assignment")
    rows = _collect_answers(questions, answers)

    score, total = calculate_submission_score(assignment_id, rows)
    submission_id = repo.insert_submission(
        assignment_id=assignment_id,
        student_id=student.id,
        score=score,
        total_questions=total,
        answers=rows,
    )

    logger.info(
        "submissions.created",
        submission_id=submission_id,
        assignment_id=assignment_id,
        student_id=student.id,
        attempt=previous + 1,
        score=score,
        total=total,
    )
    return SubmissionResult(
        submission=repo.get_submission(submission_id),
        questions=questions,
        answers=repo.list_answers(submission_id),
    )


def get_submission(submission_id: str) -> SubmissionRecord:
    """Load a submission.

    Raises:
        NotFoundError: If it does not exist
    """
    submission = repo.get_submission(submission_id)
    if submission is None:
        raise NotFoundError(f"Submission '{submission_id}' not found")
    return submission


def get_submission_detail(user: UserContext, submission_id: str) -> SubmissionResult:
    """A submission with its answers and answer key.

    Visible to the submitting student, the assignment owner and admins.
    """
    submission = get_submission(submission_id)
    assignment = get_assignment(submission.assignment_id)
    allowed = (
        user.is_admin
        or submission.student_id == user.id
        or assignment.instructor_id == user.id
    )
    if not allowed:
        raise PermissionDeniedError("You cannot view this submission")

    return SubmissionResult(
        submission=submission,
        questions=assignments_repo.get_questions(submission.assignment_id),
        answers=repo.list_answers(submission_id),
    )


def list_student_submissions(student_id: str) -> list[SubmissionRecord]:
    """Newest first with assignment title."""
    return repo.list_submissions_for_student(student_id)


def list_assignment_submissions(assignment_id: str) -> list[SubmissionRecord]:
    """Newest first with student name."""
    return repo.list_submissions_for_assignments([assignment_id])
