"""Tests for free-response grading (F3)."""

import pytest

from quizdesk.core import grading, submissions
from quizdesk.core.errors import PermissionDeniedError, ValidationError
from quizdesk.core.grading import FRQGrade


@pytest.fixture
def submitted(student, quiz, submit):
    """A submission with 2 of 3 MCQs right and one ungraded FRQ."""
    return submit(student, quiz.id, [0, 1, 4]).submission


class TestGradeFRQ:
    """Tests for grade_frq_answers."""

    def test_lists_only_frq_answers(self, submitted):
        answers = grading.list_frq_answers(submitted.id)
        assert len(answers) == 1
        assert answers[0].question_text == "Explain zero"
        assert answers[0].model_answer == "Additive identity"
        assert grading.ungraded_count(submitted.id) == 1

    def test_correct_adds_a_point(self, instructor, submitted):
        frq = grading.list_frq_answers(submitted.id)[0]
        score = grading.grade_frq_answers(
            instructor, submitted.id, [FRQGrade(frq.id, True, feedback="Nice")]
        )

        assert score == 3
        assert submissions.get_submission(submitted.id).score == 3
        graded = grading.list_frq_answers(submitted.id)[0]
        assert graded.is_correct is True
        assert graded.points_earned == 1.0
        assert graded.feedback == "Nice"
        assert graded.graded_by == instructor.id
        assert graded.graded_at
        assert grading.ungraded_count(submitted.id) == 0

    def test_incorrect_keeps_mcq_score(self, instructor, submitted):
        frq = grading.list_frq_answers(submitted.id)[0]
        assert grading.grade_frq_answers(instructor, submitted.id, [FRQGrade(frq.id, False)]) == 2

    def test_partial_credit(self, instructor, submitted):
        frq = grading.list_frq_answers(submitted.id)[0]
        score = grading.grade_frq_answers(
            instructor, submitted.id, [FRQGrade(frq.id, True, points_earned=0.5)]
        )
        assert score == 2.5
        assert submissions.get_submission(submitted.id).percentage == 63

    def test_regrade_replaces_previous_grade(self, instructor, submitted):
        frq = grading.list_frq_answers(submitted.id)[0]
        grading.grade_frq_answers(instructor, submitted.id, [FRQGrade(frq.id, True)])
        assert grading.grade_frq_answers(instructor, submitted.id, [FRQGrade(frq.id, False)]) == 2

    def test_undecided_grades_are_skipped(self, instructor, submitted):
        frq = grading.list_frq_answers(submitted.id)[0]
        assert grading.grade_frq_answers(instructor, submitted.id, [FRQGrade(frq.id, None)]) == 2
        assert grading.ungraded_count(submitted.id) == 1

    @pytest.mark.parametrize("points", [-0.1, 1.5])
    def test_points_out_of_range(self, instructor, submitted, points):
        frq = grading.list_frq_answers(submitted.id)[0]
        with pytest.raises(ValidationError) as exc_info:
            grading.grade_frq_answers(instructor, submitted.id, [FRQGrade(frq.id, True, points_earned=points)])
        assert exc_info.value.message == "Points must be between 0 and 1"

    def test_mcq_answer_cannot_be_graded(self, instructor, submitted):
        mcq = submissions.get_submission_detail(instructor, submitted.id).answers[0]
        with pytest.raises(ValidationError):
            grading.grade_frq_answers(instructor, submitted.id, [FRQGrade(mcq.id, False)])

    def test_invalid_grade_writes_nothing(self, instructor, submitted):
        """One bad grade rejects the whole batch."""
        frq = grading.list_frq_answers(submitted.id)[0]
        with pytest.raises(ValidationError):
            grading.grade_frq_answers(
                instructor,
                submitted.id,
                [FRQGrade(frq.id, True), FRQGrade("bogus", True)],
            )
        assert grading.ungraded_count(submitted.id) == 1

    def test_other_instructor_cannot_grade(self, make_user, submitted):
        frq = grading.list_frq_answers(submitted.id)[0]
        with pytest.raises(PermissionDeniedError):
            grading.grade_frq_answers(make_user("instructor"), submitted.id, [FRQGrade(frq.id, True)])

    def test_recalculate_from_answers(self, submitted):
        assert grading.recalculate_submission_score(submitted.id) == 2
