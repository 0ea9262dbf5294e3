"""Completion tracking for reading assignments."""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass, field

import structlog

from quizdesk.core.accounts import UserContext
from quizdesk.core.assignments import get_assignment
from quizdesk.core.errors import (
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from quizdesk.db import assignments_repository as repo
from quizdesk.db import users_repository as users
from quizdesk.db.assignments_repository import CompletionRecord

logger = structlog.get_logger(__name__)


@dataclass
class CompletionStatusItem:
    student_id: str
    student_name: str
    student_email: str
    completed_at: str | None = None
    notes: str | None = None


@dataclass
class CompletionStatus:
    """Who has finished a reading assignment."""

    items: list[CompletionStatusItem] = field(default_factory=list)
    completed_count: int = 0
    total_count: int = 0


def mark_complete(
    student: UserContext, assignment_id: str, notes: str | None = None
) -> CompletionRecord:
    """Record that the student finished a reading assignment.

    Raises:
        NotFoundError: Unknown assignment
        ValidationError: Not a reading assignment
        PermissionDeniedError: Not assigned to the student
        ConflictError: Already marked complete
    """
    assignment = get_assignment(assignment_id)
    if assignment.assignment_type != "reading":
        raise ValidationError("Only reading assignments can be marked complete")
    if not repo.is_student_assigned(assignment_id, student.id):
        raise PermissionDeniedError("This assignment is not assigned to you")

    try:
        completion = repo.insert_completion(assignment_id, student.id, notes or None)
    except sqlite3.IntegrityError as e:
        raise ConflictError("Assignment already marked complete") from e

    logger.info("completions.marked", assignment_id=assignment_id, student_id=student.id)
    return completion


def undo_completion(student: UserContext, assignment_id: str) -> None:
    """Remove the student's completion.

    Raises:
        NotFoundError: If there was none
    """
    if not repo.delete_completion(assignment_id, student.id):
        raise NotFoundError("Assignment is not marked complete")
    logger.info("completions.undone", assignment_id=assignment_id, student_id=student.id)


def completion_status(assignment_id: str, search: str = "") -> CompletionStatus:
    """Completion state of every assigned student.

    search filters case-insensitively on name or email; the completed and
    total counts always cover all assigned students.
    """
    student_ids = repo.list_assigned_student_ids(assignment_id)
    profiles = users.get_profiles_by_ids(student_ids)
    completions = {c.student_id: c for c in repo.list_completions_for_assignment(assignment_id)}

    items = []
    for student_id in student_ids:
        profile = profiles.get(student_id)
        if profile is None:
            continue
        completion = completions.get(student_id)
        items.append(
            CompletionStatusItem(
                student_id=student_id,
                student_name=profile.full_name or "Unknown",
                student_email=profile.email or "",
                completed_at=completion.completed_at if completion else None,
                notes=completion.notes if completion else None,
            )
        )

    completed = sum(1 for item in items if item.completed_at)
    query = search.strip().lower()
    if query:
        items = [
            item
            for item in items
            if query in item.student_name.lower() or query in item.student_email.lower()
        ]

    return CompletionStatus(items=items, completed_count=completed, total_count=len(profiles))
