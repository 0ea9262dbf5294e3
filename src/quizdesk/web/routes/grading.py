"""Submission detail and free-response grading endpoints."""

from fastapi import APIRouter, Depends

from quizdesk.core import grading, submissions
from quizdesk.core.accounts import UserContext
from quizdesk.core.assignments import get_managed_assignment
from quizdesk.core.grading import FRQGrade
from quizdesk.web.deps import require_instructor, require_verified
from quizdesk.web.schemas import (
    AnswerResponse,
    FRQAnswerListResponse,
    GradeRequest,
    GradeResultResponse,
    SubmissionDetailResponse,
)

router = APIRouter(prefix="/api/submissions", tags=["grading"])


@router.get("/{submission_id}", response_model=SubmissionDetailResponse)
async def get_submission(
    submission_id: str, user: UserContext = Depends(require_verified)
) -> SubmissionDetailResponse:
    """Submission with answers, for its student, the instructor or an admin."""
    return SubmissionDetailResponse.model_validate(
        submissions.get_submission_detail(user, submission_id)
    )


@router.get("/{submission_id}/frq", response_model=FRQAnswerListResponse)
async def list_frq_answers(
    submission_id: str, user: UserContext = Depends(require_instructor)
) -> FRQAnswerListResponse:
    """Free-response answers awaiting or holding grades."""
    submission = submissions.get_submission(submission_id)
    get_managed_assignment(user, submission.assignment_id)

    answers = grading.list_frq_answers(submission_id)
    return FRQAnswerListResponse(
        answers=[AnswerResponse.model_validate(a) for a in answers],
        ungraded_count=sum(1 for a in answers if a.is_correct is None),
    )


@router.post("/{submission_id}/frq", response_model=GradeResultResponse)
async def grade_frq_answers(
    submission_id: str, body: GradeRequest, user: UserContext = Depends(require_instructor)
) -> GradeResultResponse:
    """Store grades and return the recalculated score."""
    score = grading.grade_frq_answers(
        user,
        submission_id,
        [FRQGrade(**g.model_dump()) for g in body.grades],
    )
    return GradeResultResponse(
        submission_id=submission_id,
        score=score,
        ungraded_count=grading.ungraded_count(submission_id),
    )
