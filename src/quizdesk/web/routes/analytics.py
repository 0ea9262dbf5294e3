"""Score analytics endpoints for instructors and admins."""

from fastapi import APIRouter, Depends

from quizdesk.core import analytics
from quizdesk.core.accounts import UserContext
from quizdesk.core.scoring import score_band
from quizdesk.web.deps import require_instructor
from quizdesk.web.schemas import (
    StudentProgressListResponse,
    StudentProgressResponse,
    StudentQuickStatsResponse,
    StudentScoreReportResponse,
)

router = APIRouter(prefix="/api/analytics", tags=["analytics"])


@router.get("/students", response_model=StudentProgressListResponse)
async def student_progress(user: UserContext = Depends(require_instructor)) -> StudentProgressListResponse:
    """Progress of every student assigned to the caller's assignments."""
    items = [
        StudentProgressResponse.model_validate(p)
        for p in analytics.instructor_student_progress(user.id)
    ]
    return StudentProgressListResponse(students=items, count=len(items))


@router.get("/students/{student_id}/quick", response_model=StudentQuickStatsResponse)
async def student_quick_stats(
    student_id: str, _: UserContext = Depends(require_instructor)
) -> StudentQuickStatsResponse:
    stats = analytics.student_quick_stats(student_id)
    response = StudentQuickStatsResponse.model_validate(stats)
    if stats.last_score is not None:
        response.band = score_band(stats.average_score)
    return response


@router.get("/students/{student_id}/report", response_model=StudentScoreReportResponse)
async def student_score_report(
    student_id: str, search: str = "", _: UserContext = Depends(require_instructor)
) -> StudentScoreReportResponse:
    """Averages, trend, distribution and the submission list."""
    return StudentScoreReportResponse.model_validate(
        analytics.student_score_report(student_id, search)
    )
