"""Function endpoints: server-side scoring and user deletion.

Both answer with `{"error": "..."}` bodies instead of FastAPI's
`{"detail": ...}` so existing function clients keep working.
"""

from typing import Any

import structlog
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from quizdesk.core import admin
from quizdesk.core.accounts import UserContext, resolve_session
from quizdesk.core.errors import AuthenticationError, QuizdeskError
from quizdesk.core.scoring import calculate_submission_score

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/functions/v1", tags=["functions"])


def _error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


async def _json_body(request: Request) -> Any:
    try:
        return await request.json()
    except ValueError:
        return None


def _requester(request: Request) -> UserContext | JSONResponse:
    """Resolve the bearer token or build the matching error response."""
    auth_header = request.headers.get("Authorization")
    if not auth_header:
        return _error("Missing authorization header", 401)
    token = auth_header.replace("Bearer ", "", 1).strip()
    try:
        return resolve_session(token)
    except AuthenticationError:
        return _error("Unauthorized", 401)


@router.post("/calculate-submission-score")
async def calculate_score(request: Request) -> JSONResponse:
    """Score multiple-choice answers against the stored key.

    Body: {"assignment_id": str, "student_answers": [{"question_id", "selected_answer"}]}
    """
    body = await _json_body(request)
    if body is None:
        return _error("Invalid JSON in request body", 400)

    assignment_id = body.get("assignment_id") if isinstance(body, dict) else None
    answers = body.get("student_answers") if isinstance(body, dict) else None
    logger.info(
        "functions.score_requested",
        assignment_id=assignment_id,
        answers=len(answers) if isinstance(answers, list) else 0,
    )
    if not assignment_id or not isinstance(answers, list):
        return _error("Missing required fields: assignment_id and student_answers", 400)

    requester = _requester(request)
    if isinstance(requester, JSONResponse):
        return requester

    try:
        score, total = calculate_submission_score(
            assignment_id, [a for a in answers if isinstance(a, dict)]
        )
    except QuizdeskError as e:
        return _error(e.message, e.status_code)

    logger.info("functions.score_calculated", assignment_id=assignment_id, score=score, total=total)
    return JSONResponse(content={"score": score, "total_questions": total})


@router.post("/delete-user")
async def delete_user(request: Request) -> JSONResponse:
    """Admin-only removal of a user and everything that depends on them.

    Body: {"userId": str}
    """
    auth_header = request.headers.get("Authorization")
    if not auth_header:
        return _error("No authorization header", 401)

    requester = _requester(request)
    if isinstance(requester, JSONResponse):
        return requester
    if not requester.is_admin:
        return _error("Admin access required", 403)

    body = await _json_body(request)
    user_id = body.get("userId") if isinstance(body, dict) else None

    try:
        result = admin.delete_user(requester, user_id)
    except QuizdeskError as e:
        return _error(e.message, e.status_code)

    return JSONResponse(content=result)
