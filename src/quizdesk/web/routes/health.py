"""Health check endpoint."""

from datetime import datetime, timezone

from fastapi import APIRouter, Response, status

from quizdesk import __version__
from quizdesk.db.database import check_db
from quizdesk.web.schemas import HealthResponse

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
def health_check(response: Response) -> HealthResponse:
    """Report API version and whether the database answers.

    Responds 503 with status "degraded" when the database can't be queried.
    """
    database_ok = check_db()
    if not database_ok:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return HealthResponse(
        status="ok" if database_ok else "degraded",
        database="ok" if database_ok else "unavailable",
        version=__version__,
        timestamp=datetime.now(timezone.utc).isoformat(),
    )
