"""Tests for assigning work to students (F3)."""

import pytest

from quizdesk.core import assignments, distribution
from quizdesk.core.errors import NotFoundError, PermissionDeniedError, ValidationError


class TestAssignStudents:
    """Linking and unlinking students."""

    @pytest.fixture
    def assignment(self, instructor, quiz_draft):
        return assignments.create_assignment(instructor, quiz_draft)

    def test_toggle(self, instructor, student, assignment):
        assert distribution.toggle_student(instructor, assignment.id, student.id) is True
        assert distribution.list_assigned_student_ids(assignment.id) == [student.id]

        assert distribution.toggle_student(instructor, assignment.id, student.id) is False
        assert distribution.list_assigned_student_ids(assignment.id) == []

    def test_assign_twice_is_noop(self, instructor, student, assignment):
        assert distribution.assign_student(instructor, assignment.id, student.id) is True
        assert distribution.assign_student(instructor, assignment.id, student.id) is False
        assert distribution.list_assigned_student_ids(assignment.id) == [student.id]

    def test_unverified_student_rejected(self, make_user, instructor, assignment):
        pending = make_user("student", verified=False)
        with pytest.raises(ValidationError):
            distribution.assign_student(instructor, assignment.id, pending.id)

    def test_instructor_cannot_be_assigned(self, make_user, instructor, assignment):
        with pytest.raises(ValidationError):
            distribution.assign_student(instructor, assignment.id, make_user("instructor").id)

    def test_only_owner_assigns(self, make_user, student, assignment):
        with pytest.raises(PermissionDeniedError):
            distribution.assign_student(make_user("instructor"), assignment.id, student.id)

    def test_assign_all_and_unassign_all(self, make_user, instructor, student, assignment):
        others = [make_user("student"), make_user("student")]
        make_user("student", verified=False)
        distribution.assign_student(instructor, assignment.id, student.id)

        assert distribution.assign_all(instructor, assignment.id) == 2
        assert set(distribution.list_assigned_student_ids(assignment.id)) == {
            student.id,
            *(o.id for o in others),
        }
        assert distribution.assign_all(instructor, assignment.id) == 0

        assert distribution.unassign_all(instructor, assignment.id) == 3
        assert distribution.list_assigned_student_ids(assignment.id) == []

    def test_list_verified_students(self, make_user, student):
        make_user("student", verified=False)
        make_user("instructor")
        assert [p.id for p in distribution.list_verified_students()] == [student.id]


class TestStudentAssignments:
    """The student's view of assigned work."""

    def test_only_assigned_work_is_listed(self, instructor, student, make_user, quiz, quiz_draft):
        assignments.create_assignment(instructor, quiz_draft)
        items = distribution.list_student_assignments(student.id)
        assert [i.assignment.id for i in items] == [quiz.id]
        assert distribution.list_student_assignments(make_user("student").id) == []

    def test_questions_hide_answers(self, student, quiz):
        item = distribution.get_student_assignment(student.id, quiz.id)
        assert len(item.questions) == 4
        assert all(q.correct_answer is None and q.model_answer is None for q in item.questions)

    def test_latest_submission_and_count(self, instructor, student, quiz_draft, submit):
        quiz_draft.is_resubmittable = True
        assignment = assignments.create_assignment(instructor, quiz_draft)
        distribution.assign_student(instructor, assignment.id, student.id)

        submit(student, assignment.id, [0, 0, 0])
        second = submit(student, assignment.id, [0, 1, 2])

        item = distribution.get_student_assignment(student.id, assignment.id)
        assert item.submission_count == 2
        assert item.latest_submission.id == second.submission.id
        assert item.can_submit is True

    def test_can_submit_once(self, student, quiz, submit):
        assert distribution.get_student_assignment(student.id, quiz.id).can_submit is True
        submit(student, quiz.id, [0, 1, 2])
        assert distribution.get_student_assignment(student.id, quiz.id).can_submit is False

    def test_reading_cannot_be_submitted(self, student, reading):
        item = distribution.get_student_assignment(student.id, reading.id)
        assert item.can_submit is False
        assert item.completion is None

    def test_not_assigned(self, student, instructor, quiz_draft):
        other = assignments.create_assignment(instructor, quiz_draft)
        with pytest.raises(NotFoundError) as exc_info:
            distribution.get_student_assignment(student.id, other.id)
        assert exc_info.value.message == "Assignment not found or not assigned to you"
