"""Route handlers for the Web API."""

from quizdesk.web.routes.admin import router as admin_router
from quizdesk.web.routes.analytics import router as analytics_router
from quizdesk.web.routes.assignments import router as assignments_router
from quizdesk.web.routes.auth import router as auth_router
from quizdesk.web.routes.files import router as files_router
from quizdesk.web.routes.functions import router as functions_router
from quizdesk.web.routes.grading import router as grading_router
from quizdesk.web.routes.health import router as health_router
from quizdesk.web.routes.student import router as student_router

__all__ = [
    "admin_router",
    "analytics_router",
    "assignments_router",
    "auth_router",
    "files_router",
    "functions_router",
    "grading_router",
    "health_router",
    "student_router",
]
