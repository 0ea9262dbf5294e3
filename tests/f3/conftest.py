"""Fixtures for F3 tests - Assignments, submissions and grading."""

from typing import Any

import pytest

from quizdesk.core import assignments, distribution, submissions
from quizdesk.core.assignments import AssignmentDraft, QuestionDraft
from quizdesk.db import assignments_repository as assignments_repo


@pytest.fixture
def quiz_draft() -> AssignmentDraft:
    """Three MCQs (answers 1, 2, 3) and one free-response question."""
    return AssignmentDraft(
        title="Algebra basics",
        description="Chapter 1",
        questions=[
            QuestionDraft(text="2 + 2?", correct_answer=0, explanation="Count"),
            QuestionDraft(text="3 * 3?", correct_answer=1),
            QuestionDraft(text="10 / 2?", correct_answer=2),
            QuestionDraft(
                text="Explain zero",
                question_type="free_response",
                correct_answer=None,
                model_answer="Additive identity",
            ),
        ],
    )


@pytest.fixture
def quiz(instructor, student, quiz_draft):
    """The quiz draft saved and assigned to the default student."""
    assignment = assignments.create_assignment(instructor, quiz_draft)
    distribution.assign_student(instructor, assignment.id, student.id)
    return assignment


@pytest.fixture
def reading(instructor, student):
    """A reading assignment assigned to the default student."""
    assignment = assignments.create_assignment(
        instructor,
        AssignmentDraft(title="Read chapter 2", assignment_type="reading"),
    )
    distribution.assign_student(instructor, assignment.id, student.id)
    return assignment


@pytest.fixture
def answer_quiz():
    """Build an answer list for an assignment.

    selections holds 0-based MCQ choices in question order; FRQs get text.
    """

    def _answers(assignment_id: str, selections: list[int], text: str = "Because") -> list[dict[str, Any]]:
        picks = iter(selections)
        answers = []
        for question in assignments_repo.get_questions(assignment_id):
            if question.question_type == "free_response":
                answers.append({"question_id": question.id, "text_answer": text})
            else:
                answers.append({"question_id": question.id, "selected_answer": next(picks)})
        return answers

    return _answers


@pytest.fixture
def submit(answer_quiz):
    """Submit an attempt as a student."""

    def _submit(user, assignment_id: str, selections: list[int], text: str = "Because"):
        return submissions.submit_assignment(user, assignment_id, answer_quiz(assignment_id, selections, text))

    return _submit
