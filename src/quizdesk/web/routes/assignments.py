"""Assignment management endpoints for instructors (and admins)."""

from fastapi import APIRouter, Depends, File, UploadFile, status

from quizdesk.core import assignments, distribution, submissions
from quizdesk.core.accounts import UserContext
from quizdesk.core.analytics import assignment_stats
from quizdesk.core.assignments import AssignmentDraft, QuestionDraft
from quizdesk.core.completions import completion_status
from quizdesk.core.errors import PermissionDeniedError
from quizdesk.core.files import preview_for, store_upload
from quizdesk.db import assignments_repository as repo
from quizdesk.db.assignments_repository import AssignmentRecord
from quizdesk.web.deps import require_instructor, require_verified
from quizdesk.web.schemas import (
    ASCPreviewResponse,
    AssignedStudentsResponse,
    AssignmentCreate,
    AssignmentDetailResponse,
    AssignmentListResponse,
    AssignmentResponse,
    AssignmentStatsResponse,
    CompletionStatusResponse,
    CountResponse,
    FilePreviewResponse,
    FileUploadResponse,
    ParsedQuestionsResponse,
    QuestionInput,
    QuestionResponse,
    QuestionsAppend,
    StudentBrief,
    SubmissionListResponse,
    SubmissionResponse,
    SuccessResponse,
    TextInput,
    ToggleResponse,
)

router = APIRouter(prefix="/api/assignments", tags=["assignments"])


def assignment_response(assignment: AssignmentRecord) -> AssignmentResponse:
    response = AssignmentResponse.model_validate(assignment)
    if assignment.file_url:
        response.file_preview = FilePreviewResponse(
            **preview_for(assignment.file_url, assignment.file_type)
        )
    return response


def _question_drafts(questions: list[QuestionInput]) -> list[QuestionDraft]:
    return [QuestionDraft(**q.model_dump()) for q in questions]


def _parsed_response(drafts: list[QuestionDraft]) -> ParsedQuestionsResponse:
    return ParsedQuestionsResponse(
        questions=[QuestionInput(**d.to_row()) for d in drafts],
        count=len(drafts),
    )


# =============================================================================
# AUTHORING
# =============================================================================


@router.post("", response_model=AssignmentDetailResponse, status_code=status.HTTP_201_CREATED)
async def create_assignment(
    body: AssignmentCreate, user: UserContext = Depends(require_instructor)
) -> AssignmentDetailResponse:
    """Create an assignment with its questions."""
    draft = AssignmentDraft(
        title=body.title,
        description=body.description,
        due_date=body.due_date,
        assignment_type=body.assignment_type,
        is_resubmittable=body.is_resubmittable,
        max_attempts=body.max_attempts,
        file_url=body.file_url,
        file_type=body.file_type,
        questions=_question_drafts(body.questions),
    )
    assignment = assignments.create_assignment(user, draft)
    questions = assignments.get_assignment_questions(assignment.id, include_answers=True)
    return AssignmentDetailResponse(
        assignment=assignment_response(assignment),
        questions=[QuestionResponse.model_validate(q) for q in questions],
    )


@router.get("", response_model=AssignmentListResponse)
async def list_assignments(user: UserContext = Depends(require_instructor)) -> AssignmentListResponse:
    """The caller's assignments, newest first."""
    items = [assignment_response(a) for a in assignments.list_instructor_assignments(user.id)]
    return AssignmentListResponse(assignments=items, count=len(items))


@router.post("/files", response_model=FileUploadResponse, status_code=status.HTTP_201_CREATED)
async def upload_file(
    file: UploadFile = File(...), _: UserContext = Depends(require_instructor)
) -> FileUploadResponse:
    """Store an attachment; pass the returned url and file_type on create."""
    content = await file.read()
    stored = store_upload(file.filename or "upload", content, file.content_type or "")
    return FileUploadResponse.model_validate(stored)


@router.post("/asc/preview", response_model=ASCPreviewResponse)
async def preview_asc(body: TextInput, _: UserContext = Depends(require_instructor)) -> ASCPreviewResponse:
    """Highlight ASC text and report the first parse error, if any."""
    return ASCPreviewResponse(**assignments.preview_asc(body.text))


@router.post("/asc/parse", response_model=ParsedQuestionsResponse)
async def parse_asc(body: TextInput, _: UserContext = Depends(require_instructor)) -> ParsedQuestionsResponse:
    return _parsed_response(assignments.questions_from_asc(body.text))


@router.post("/bulk/parse", response_model=ParsedQuestionsResponse)
async def parse_bulk(body: TextInput, _: UserContext = Depends(require_instructor)) -> ParsedQuestionsResponse:
    return _parsed_response(assignments.questions_from_bulk(body.text))


# =============================================================================
# SINGLE ASSIGNMENT
# =============================================================================


@router.get("/{assignment_id}", response_model=AssignmentDetailResponse)
async def get_assignment(
    assignment_id: str, user: UserContext = Depends(require_verified)
) -> AssignmentDetailResponse:
    """Managers see answers; assigned students see questions only."""
    assignment = assignments.get_assignment(assignment_id)
    manager = assignments.can_manage(user, assignment)
    if not manager and not repo.is_student_assigned(assignment_id, user.id):
        raise PermissionDeniedError("This assignment is not assigned to you")

    questions = assignments.get_assignment_questions(assignment_id, include_answers=manager)
    return AssignmentDetailResponse(
        assignment=assignment_response(assignment),
        questions=[QuestionResponse.model_validate(q) for q in questions],
    )


@router.delete("/{assignment_id}", response_model=SuccessResponse)
async def delete_assignment(
    assignment_id: str, user: UserContext = Depends(require_instructor)
) -> SuccessResponse:
    assignments.delete_assignment(user, assignment_id)
    return SuccessResponse()


@router.post("/{assignment_id}/questions", response_model=list[QuestionResponse])
async def add_questions(
    assignment_id: str, body: QuestionsAppend, user: UserContext = Depends(require_instructor)
) -> list[QuestionResponse]:
    """Append questions after the existing ones."""
    questions = assignments.add_questions(user, assignment_id, _question_drafts(body.questions))
    return [QuestionResponse.model_validate(q) for q in questions]


# =============================================================================
# STUDENTS
# =============================================================================


@router.get("/{assignment_id}/students", response_model=AssignedStudentsResponse)
async def list_students(
    assignment_id: str, user: UserContext = Depends(require_instructor)
) -> AssignedStudentsResponse:
    """Verified students and the IDs assigned to this assignment."""
    assignments.get_managed_assignment(user, assignment_id)
    return AssignedStudentsResponse(
        students=[StudentBrief.model_validate(p) for p in distribution.list_verified_students()],
        assigned_ids=distribution.list_assigned_student_ids(assignment_id),
    )


@router.post("/{assignment_id}/students/{student_id}/toggle", response_model=ToggleResponse)
async def toggle_student(
    assignment_id: str, student_id: str, user: UserContext = Depends(require_instructor)
) -> ToggleResponse:
    assigned = distribution.toggle_student(user, assignment_id, student_id)
    return ToggleResponse(student_id=student_id, assigned=assigned)


@router.put("/{assignment_id}/students/{student_id}", response_model=ToggleResponse)
async def assign_student(
    assignment_id: str, student_id: str, user: UserContext = Depends(require_instructor)
) -> ToggleResponse:
    distribution.assign_student(user, assignment_id, student_id)
    return ToggleResponse(student_id=student_id, assigned=True)


@router.delete("/{assignment_id}/students/{student_id}", response_model=ToggleResponse)
async def unassign_student(
    assignment_id: str, student_id: str, user: UserContext = Depends(require_instructor)
) -> ToggleResponse:
    distribution.unassign_student(user, assignment_id, student_id)
    return ToggleResponse(student_id=student_id, assigned=False)


@router.post("/{assignment_id}/students/assign-all", response_model=CountResponse)
async def assign_all(
    assignment_id: str, user: UserContext = Depends(require_instructor)
) -> CountResponse:
    """Assign every verified student not yet assigned."""
    return CountResponse(count=distribution.assign_all(user, assignment_id))


@router.post("/{assignment_id}/students/unassign-all", response_model=CountResponse)
async def unassign_all(
    assignment_id: str, user: UserContext = Depends(require_instructor)
) -> CountResponse:
    return CountResponse(count=distribution.unassign_all(user, assignment_id))


# =============================================================================
# RESULTS
# =============================================================================


@router.get("/{assignment_id}/submissions", response_model=SubmissionListResponse)
async def list_submissions(
    assignment_id: str, user: UserContext = Depends(require_instructor)
) -> SubmissionListResponse:
    assignments.get_managed_assignment(user, assignment_id)
    items = [
        SubmissionResponse.model_validate(s)
        for s in submissions.list_assignment_submissions(assignment_id)
    ]
    return SubmissionListResponse(submissions=items, count=len(items))


@router.get("/{assignment_id}/stats", response_model=AssignmentStatsResponse)
async def get_stats(
    assignment_id: str, user: UserContext = Depends(require_instructor)
) -> AssignmentStatsResponse:
    assignments.get_managed_assignment(user, assignment_id)
    return AssignmentStatsResponse.model_validate(assignment_stats(assignment_id))


@router.get("/{assignment_id}/completions", response_model=CompletionStatusResponse)
async def get_completions(
    assignment_id: str, search: str = "", user: UserContext = Depends(require_instructor)
) -> CompletionStatusResponse:
    """Completion state of assigned students, optionally filtered."""
    assignments.get_managed_assignment(user, assignment_id)
    return CompletionStatusResponse.model_validate(completion_status(assignment_id, search))
