"""Assignment authoring.

Instructors build a draft (title, settings, questions, optional attachment),
validate it and save it with its questions in one transaction. Questions can
be entered one by one, pasted as bulk text or typed as an ASC answer sheet.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import structlog

from quizdesk.core.accounts import UserContext
from quizdesk.core.asc_highlight import has_errors, render_html, tokenize_asc
from quizdesk.core.asc_parser import DEFAULT_OPTIONS, ParsedQuestion, parse_asc
from quizdesk.core.bulk_questions import parse_bulk_questions
from quizdesk.core.errors import (
    ASCParseError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from quizdesk.db import assignments_repository as repo
from quizdesk.db.assignments_repository import AssignmentRecord, QuestionRecord

logger = structlog.get_logger(__name__)

ASSIGNMENT_TYPES = ("quiz", "reading")
FILE_TYPES = ("image", "pdf", "document", "presentation")


# =============================================================================
# DRAFTS
# =============================================================================


@dataclass
class QuestionDraft:
    """A question as entered in the authoring form."""

    text: str
    options: list[str] = field(default_factory=lambda: list(DEFAULT_OPTIONS))
    correct_answer: int | None = 0
    explanation: str = ""
    question_type: str = "multiple_choice"
    model_answer: str = ""

    @classmethod
    def from_parsed(cls, parsed: ParsedQuestion) -> "QuestionDraft":
        return cls(
            text=parsed.text,
            options=list(parsed.options),
            correct_answer=parsed.correct_answer,
            explanation=parsed.explanation,
            question_type=parsed.question_type,
            model_answer=parsed.model_answer,
        )

    def to_row(self) -> dict[str, Any]:
        is_mcq = self.question_type == "multiple_choice"
        return {
            "text": self.text,
            "options": list(self.options),
            "correct_answer": self.correct_answer if is_mcq else None,
            "explanation": self.explanation,
            "question_type": self.question_type,
            "model_answer": "" if is_mcq else self.model_answer,
        }


@dataclass
class AssignmentDraft:
    """An assignment ready to be validated and saved."""

    title: str
    description: str | None = None
    due_date: str | None = None
    assignment_type: str = "quiz"
    is_resubmittable: bool = False
    max_attempts: int | None = None
    file_url: str | None = None
    file_type: str | None = None
    questions: list[QuestionDraft] = field(default_factory=list)


def validate_draft(draft: AssignmentDraft) -> None:
    """Apply the authoring form rules.

    Raises:
        ValidationError: With the first failing rule
    """
    if not draft.title.strip():
        raise ValidationError("Please enter an assignment title")
    if draft.assignment_type not in ASSIGNMENT_TYPES:
        raise ValidationError(f"Unknown assignment type '{draft.assignment_type}'")
    if draft.file_type is not None and draft.file_type not in FILE_TYPES:
        raise ValidationError(f"Unknown file type '{draft.file_type}'")
    if draft.is_resubmittable and draft.max_attempts is not None and draft.max_attempts < 1:
        raise ValidationError("Max attempts must be at least 1")
    if draft.assignment_type == "quiz" and not draft.questions:
        raise ValidationError("A quiz needs at least one question")

    for i, question in enumerate(draft.questions, start=1):
        if not question.text.strip():
            raise ValidationError(f"Question {i} text is required")
        if question.question_type == "free_response":
            continue
        if question.question_type != "multiple_choice":
            raise ValidationError(f"Question {i} has an unknown type")
        for j in range(4):
            if j >= len(question.options) or not question.options[j].strip():
                raise ValidationError(f"Question {i}, Option {j + 1} is required")
        if question.correct_answer is None or not 0 <= question.correct_answer <= 4:
            raise ValidationError(f"Question {i} needs a correct answer between 1 and 5")


# =============================================================================
# CRUD
# =============================================================================


def create_assignment(instructor: UserContext, draft: AssignmentDraft) -> AssignmentRecord:
    """Validate and save a draft owned by the instructor."""
    validate_draft(draft)

    assignment_id = repo.insert_assignment(
        title=draft.title.strip(),
        instructor_id=instructor.id,
        questions=[q.to_row() for q in draft.questions],
        description=draft.description or None,
        due_date=draft.due_date,
        assignment_type=draft.assignment_type,
        file_url=draft.file_url,
        file_type=draft.file_type,
        is_resubmittable=draft.is_resubmittable,
        max_attempts=draft.max_attempts if draft.is_resubmittable else None,
    )

    logger.info(
        "assignments.created",
        assignment_id=assignment_id,
        instructor_id=instructor.id,
        questions=len(draft.questions),
        assignment_type=draft.assignment_type,
    )
    return get_assignment(assignment_id)


def get_assignment(assignment_id: str) -> AssignmentRecord:
    """Load an assignment.

    Raises:
        NotFoundError: If it does not exist
    """
    assignment = repo.get_assignment(assignment_id)
    if assignment is None:
        raise NotFoundError(f"Assignment '{assignment_id}' not found")
    return assignment


def can_manage(user: UserContext, assignment: AssignmentRecord) -> bool:
    """Owners and admins manage an assignment."""
    return user.is_admin or assignment.instructor_id == user.id


def get_managed_assignment(user: UserContext, assignment_id: str) -> AssignmentRecord:
    """Load an assignment the user is allowed to manage.

    Raises:
        NotFoundError: If it does not exist
        PermissionDeniedError: If the user neither owns it nor is an admin
    """
    assignment = get_assignment(assignment_id)
    if not can_manage(user, assignment):
        raise PermissionDeniedError("You do not manage this assignment")
    return assignment


def list_instructor_assignments(instructor_id: str) -> list[AssignmentRecord]:
    """Newest first with question and submission counts."""
    return repo.list_assignments_by_instructor(instructor_id)


def delete_assignment(user: UserContext, assignment_id: str) -> None:
    """Delete an assignment with its questions, links and submissions."""
    get_managed_assignment(user, assignment_id)
    repo.delete_assignment(assignment_id)
    logger.info("assignments.deleted", assignment_id=assignment_id, by=user.id)


# =============================================================================
# QUESTIONS
# =============================================================================


def get_assignment_questions(
    assignment_id: str, include_answers: bool = False
) -> list[QuestionRecord]:
    """Questions ordered by order_number.

    Without answers, correct_answer, explanation and model_answer are None.
    """
    questions = repo.get_questions(assignment_id)
    if include_answers:
        return questions
    return [q.without_answers() for q in questions]


def add_questions(
    user: UserContext, assignment_id: str, questions: list[QuestionDraft]
) -> list[QuestionRecord]:
    """Append questions to an existing assignment."""
    assignment = get_managed_assignment(user, assignment_id)
    validate_draft(
        AssignmentDraft(
            title=assignment.title,
            assignment_type="reading",
            questions=questions,
        )
    )
    if not questions:
        raise ValidationError("No questions to add")

    repo.append_questions(assignment_id, [q.to_row() for q in questions])
    logger.info("assignments.questions_added", assignment_id=assignment_id, count=len(questions))
    return repo.get_questions(assignment_id)


def questions_from_asc(text: str) -> list[QuestionDraft]:
    """Draft questions from an ASC answer sheet."""
    return [QuestionDraft.from_parsed(p) for p in parse_asc(text)]


def questions_from_bulk(text: str) -> list[QuestionDraft]:
    """Draft questions from blank-line separated bulk text."""
    return [QuestionDraft.from_parsed(p) for p in parse_bulk_questions(text)]


def preview_asc(text: str) -> dict[str, Any]:
    """Editor preview: highlighted tokens plus the parse outcome."""
    tokens = tokenize_asc(text)
    preview: dict[str, Any] = {
        "tokens": [t.to_dict() for t in tokens],
        "html": render_html(tokens),
        "has_errors": has_errors(tokens),
        "questions": [],
        "error": None,
        "position": None,
    }
    if not text.strip():
        return preview

    try:
        preview["questions"] = [q.to_dict() for q in parse_asc(text)]
    except ASCParseError as e:
        preview["error"] = e.message
        preview["position"] = e.position
    return preview
