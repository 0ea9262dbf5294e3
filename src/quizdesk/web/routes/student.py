"""Student dashboard endpoints."""

from fastapi import APIRouter, Depends, status

from quizdesk.core import completions, distribution, submissions
from quizdesk.core.accounts import UserContext
from quizdesk.core.analytics import student_quick_stats
from quizdesk.core.distribution import StudentAssignment
from quizdesk.core.scoring import score_band
from quizdesk.web.deps import require_student
from quizdesk.web.routes.assignments import assignment_response
from quizdesk.web.schemas import (
    CompleteRequest,
    CompletionResponse,
    QuestionResponse,
    StudentAssignmentListResponse,
    StudentAssignmentResponse,
    StudentQuickStatsResponse,
    SubmissionDetailResponse,
    SubmissionListResponse,
    SubmissionResponse,
    SubmitRequest,
    SuccessResponse,
)

router = APIRouter(prefix="/api/student", tags=["student"])


def _student_assignment_response(item: StudentAssignment) -> StudentAssignmentResponse:
    return StudentAssignmentResponse(
        assignment=assignment_response(item.assignment),
        questions=[QuestionResponse.model_validate(q) for q in item.questions],
        latest_submission=(
            SubmissionResponse.model_validate(item.latest_submission)
            if item.latest_submission
            else None
        ),
        submission_count=item.submission_count,
        can_submit=item.can_submit,
        completion=(
            CompletionResponse.model_validate(item.completion) if item.completion else None
        ),
    )


@router.get("/assignments", response_model=StudentAssignmentListResponse)
async def my_assignments(user: UserContext = Depends(require_student)) -> StudentAssignmentListResponse:
    """Assignments handed to the caller, newest first."""
    items = [_student_assignment_response(i) for i in distribution.list_student_assignments(user.id)]
    return StudentAssignmentListResponse(assignments=items, count=len(items))


@router.get("/assignments/{assignment_id}", response_model=StudentAssignmentResponse)
async def my_assignment(
    assignment_id: str, user: UserContext = Depends(require_student)
) -> StudentAssignmentResponse:
    return _student_assignment_response(distribution.get_student_assignment(user.id, assignment_id))


@router.post(
    "/assignments/{assignment_id}/submit",
    response_model=SubmissionDetailResponse,
    status_code=status.HTTP_201_CREATED,
)
async def submit(
    assignment_id: str, body: SubmitRequest, user: UserContext = Depends(require_student)
) -> SubmissionDetailResponse:
    """Submit answers; the response reveals the answer key."""
    result = submissions.submit_assignment(
        user, assignment_id, [a.model_dump() for a in body.answers]
    )
    return SubmissionDetailResponse.model_validate(result)


@router.post(
    "/assignments/{assignment_id}/complete",
    response_model=CompletionResponse,
    status_code=status.HTTP_201_CREATED,
)
async def complete(
    assignment_id: str, body: CompleteRequest, user: UserContext = Depends(require_student)
) -> CompletionResponse:
    """Mark a reading assignment as done."""
    return CompletionResponse.model_validate(
        completions.mark_complete(user, assignment_id, body.notes)
    )


@router.delete("/assignments/{assignment_id}/complete", response_model=SuccessResponse)
async def undo_complete(
    assignment_id: str, user: UserContext = Depends(require_student)
) -> SuccessResponse:
    completions.undo_completion(user, assignment_id)
    return SuccessResponse()


@router.get("/submissions", response_model=SubmissionListResponse)
async def my_submissions(user: UserContext = Depends(require_student)) -> SubmissionListResponse:
    items = [
        SubmissionResponse.model_validate(s)
        for s in submissions.list_student_submissions(user.id)
    ]
    return SubmissionListResponse(submissions=items, count=len(items))


@router.get("/stats", response_model=StudentQuickStatsResponse)
async def my_stats(user: UserContext = Depends(require_student)) -> StudentQuickStatsResponse:
    stats = student_quick_stats(user.id)
    response = StudentQuickStatsResponse.model_validate(stats)
    if stats.last_score is not None:
        response.band = score_band(stats.average_score)
    return response
