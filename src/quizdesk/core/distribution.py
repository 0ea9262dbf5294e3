"""Handing assignments out to students."""

from __future__ import annotations

from dataclasses import dataclass, field

import structlog

from quizdesk.core.accounts import UserContext
from quizdesk.core.assignments import get_managed_assignment
from quizdesk.core.errors import NotFoundError, ValidationError
from quizdesk.db import assignments_repository as repo
from quizdesk.db import submissions_repository as submissions_repo
from quizdesk.db import users_repository as users
from quizdesk.db.assignments_repository import (
    AssignmentRecord,
    CompletionRecord,
    QuestionRecord,
)
from quizdesk.db.submissions_repository import SubmissionRecord

logger = structlog.get_logger(__name__)


@dataclass
class StudentAssignment:
    """An assignment as a student sees it on their dashboard."""

    assignment: AssignmentRecord
    questions: list[QuestionRecord] = field(default_factory=list)
    latest_submission: SubmissionRecord | None = None
    submission_count: int = 0
    completion: CompletionRecord | None = None

    @property
    def can_submit(self) -> bool:
        """Whether another attempt is allowed."""
        if self.assignment.assignment_type == "reading":
            return False
        if self.submission_count == 0:
            return True
        if not self.assignment.is_resubmittable:
            return False
        max_attempts = self.assignment.max_attempts
        return max_attempts is None or self.submission_count < max_attempts


def list_verified_students() -> list[users.ProfileRecord]:
    return users.list_verified_students()


def list_assigned_student_ids(assignment_id: str) -> list[str]:
    return repo.list_assigned_student_ids(assignment_id)


def _verified_student_ids() -> set[str]:
    return {p.id for p in users.list_verified_students()}


def assign_student(user: UserContext, assignment_id: str, student_id: str) -> bool:
    """Link one verified student. Returns False when already linked."""
    get_managed_assignment(user, assignment_id)
    if student_id not in _verified_student_ids():
        raise ValidationError("Only verified students can be assigned")

    added = repo.assign_students(assignment_id, [student_id]) > 0
    logger.info("distribution.assigned", assignment_id=assignment_id, student_id=student_id, added=added)
    return added


def unassign_student(user: UserContext, assignment_id: str, student_id: str) -> bool:
    """Remove one link. Returns False when there was none."""
    get_managed_assignment(user, assignment_id)
    removed = repo.unassign_students(assignment_id, [student_id]) > 0
    logger.info("distribution.unassigned", assignment_id=assignment_id, student_id=student_id, removed=removed)
    return removed


def toggle_student(user: UserContext, assignment_id: str, student_id: str) -> bool:
    """Assign if not assigned, otherwise unassign.

    Returns:
        True when the student ends up assigned
    """
    if repo.is_student_assigned(assignment_id, student_id):
        unassign_student(user, assignment_id, student_id)
        return False
    assign_student(user, assignment_id, student_id)
    return True


def assign_all(user: UserContext, assignment_id: str) -> int:
    """Assign every verified student not yet linked.

    Returns:
        Number of students added
    """
    get_managed_assignment(user, assignment_id)
    assigned = set(repo.list_assigned_student_ids(assignment_id))
    to_add = [p.id for p in users.list_verified_students() if p.id not in assigned]
    if not to_add:
        return 0

    added = repo.assign_students(assignment_id, to_add)
    logger.info("distribution.assigned_all", assignment_id=assignment_id, added=added)
    return added


def unassign_all(user: UserContext, assignment_id: str) -> int:
    """Remove every link of the assignment."""
    get_managed_assignment(user, assignment_id)
    removed = repo.unassign_students(assignment_id)
    logger.info("distribution.unassigned_all", assignment_id=assignment_id, removed=removed)
    return removed


def list_student_assignments(student_id: str) -> list[StudentAssignment]:
    """Assignments linked to the student, newest first.

    Each carries its questions without answers, the student's most recent
    submission and attempt count, and the completion for reading work.
    """
    assignments = repo.list_assignments_by_ids(repo.list_assignment_ids_for_student(student_id))

    # Newest first, so the first one seen per assignment is the latest
    latest: dict[str, SubmissionRecord] = {}
    counts: dict[str, int] = {}
    for submission in submissions_repo.list_submissions_for_student(student_id):
        latest.setdefault(submission.assignment_id, submission)
        counts[submission.assignment_id] = counts.get(submission.assignment_id, 0) + 1

    completions = {c.assignment_id: c for c in repo.list_completions_for_student(student_id)}

    return [
        StudentAssignment(
            assignment=a,
            questions=[q.without_answers() for q in repo.get_questions(a.id)],
            latest_submission=latest.get(a.id),
            submission_count=counts.get(a.id, 0),
            completion=completions.get(a.id),
        )
        for a in assignments
    ]


def get_student_assignment(student_id: str, assignment_id: str) -> StudentAssignment:
    """One assignment from the student's list.

    Raises:
        NotFoundError: If it is not assigned to the student
    """
    for item in list_student_assignments(student_id):
        if item.assignment.id == assignment_id:
            return item
    raise NotFoundError("Assignment not found or not assigned to you")
