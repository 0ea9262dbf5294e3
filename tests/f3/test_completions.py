"""Tests for reading assignment completions (F3)."""

import pytest

from quizdesk.core import completions, distribution
from quizdesk.core.errors import (
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)


class TestMarkComplete:
    """Tests for mark_complete and undo_completion."""

    def test_mark_and_undo(self, student, reading):
        completion = completions.mark_complete(student, reading.id, notes="Done early")
        assert completion.completed_at
        assert completion.notes == "Done early"
        assert distribution.get_student_assignment(student.id, reading.id).completion is not None

        completions.undo_completion(student, reading.id)
        assert distribution.get_student_assignment(student.id, reading.id).completion is None

    def test_twice(self, student, reading):
        completions.mark_complete(student, reading.id)
        with pytest.raises(ConflictError):
            completions.mark_complete(student, reading.id)

    def test_quiz_cannot_be_completed(self, student, quiz):
        with pytest.raises(ValidationError) as exc_info:
            completions.mark_complete(student, quiz.id)
        assert exc_info.value.message == "Only reading assignments can be marked complete"

    def test_not_assigned(self, make_user, reading):
        with pytest.raises(PermissionDeniedError):
            completions.mark_complete(make_user("student"), reading.id)

    def test_undo_without_completion(self, student, reading):
        with pytest.raises(NotFoundError):
            completions.undo_completion(student, reading.id)


class TestCompletionStatus:
    """Tests for completion_status."""

    @pytest.fixture
    def classroom(self, make_user, instructor, student, reading):
        alice = make_user("student", name="Alice Adams")
        bob = make_user("student", name="Bob Brown")
        distribution.assign_all(instructor, reading.id)
        completions.mark_complete(student, reading.id)
        completions.mark_complete(alice, reading.id, notes="ok")
        return alice, bob

    def test_counts(self, classroom, reading):
        status = completions.completion_status(reading.id)
        assert status.total_count == 3
        assert status.completed_count == 2
        assert len(status.items) == 3

    def test_search_filters_items_not_counts(self, classroom, reading):
        alice, _ = classroom
        status = completions.completion_status(reading.id, search="ALICE")
        assert [i.student_id for i in status.items] == [alice.id]
        assert status.items[0].notes == "ok"
        assert status.completed_count == 2
        assert status.total_count == 3

    def test_search_by_email(self, classroom, reading):
        _, bob = classroom
        status = completions.completion_status(reading.id, search=bob.email)
        assert [i.student_name for i in status.items] == ["Bob Brown"]
        assert status.items[0].completed_at is None
