"""Pydantic schemas for the Web API.

Request bodies and response models. Response models read attributes so the
core dataclass records can be passed straight to model_validate().
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, EmailStr, Field


class RecordModel(BaseModel):
    """Response model built from a core record."""

    model_config = {"from_attributes": True}


# =============================================================================
# HEALTH
# =============================================================================


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    database: str
    version: str
    timestamp: str


# =============================================================================
# AUTH SCHEMAS
# =============================================================================


class SignUpRequest(BaseModel):
    """Request body for sign-up. Other field rules are applied by the core layer."""

    email: EmailStr
    password: str
    full_name: str
    role: str


class SignInRequest(BaseModel):
    """Request body for sign-in."""

    email: EmailStr
    password: str


class UserResponse(RecordModel):
    """The signed-in user."""

    id: str
    email: str
    full_name: str
    verified: bool
    roles: list[str]
    created_at: str = ""


class SignInResponse(RecordModel):
    """Issued session token."""

    token: str
    expires_at: str
    user: UserResponse


# =============================================================================
# ADMIN SCHEMAS
# =============================================================================


class AdminUserResponse(RecordModel):
    """Row of the user administration table."""

    id: str
    email: str
    full_name: str
    role: str
    verified: bool
    created_at: str


class AdminUserListResponse(BaseModel):
    """Users split into the approval queue and approved users."""

    pending: list[AdminUserResponse]
    verified: list[AdminUserResponse]


class SuccessResponse(BaseModel):
    success: bool = True


# =============================================================================
# ASSIGNMENT SCHEMAS
# =============================================================================


class QuestionInput(BaseModel):
    """A question in an authoring request."""

    text: str
    options: list[str] = Field(default_factory=lambda: ["1", "2", "3", "4", "5"])
    correct_answer: int | None = 0
    explanation: str = ""
    question_type: Literal["multiple_choice", "free_response"] = "multiple_choice"
    model_answer: str = ""


class AssignmentCreate(BaseModel):
    """Request body for creating an assignment.

    Upload the attachment first (POST /api/assignments/files) and pass the
    returned file_url and file_type here.
    """

    title: str
    description: str | None = None
    due_date: str | None = None
    assignment_type: Literal["quiz", "reading"] = "quiz"
    is_resubmittable: bool = False
    max_attempts: int | None = Field(default=None, ge=1)
    file_url: str | None = None
    file_type: Literal["image", "pdf", "document", "presentation"] | None = None
    questions: list[QuestionInput] = Field(default_factory=list)


class QuestionsAppend(BaseModel):
    """Request body for appending questions."""

    questions: list[QuestionInput]


class QuestionResponse(RecordModel):
    """A question; answer fields are null unless answers are visible."""

    id: str
    assignment_id: str
    text: str
    options: list[str]
    correct_answer: int | None
    explanation: str | None
    order_number: int
    question_type: str
    model_answer: str | None


class FilePreviewResponse(BaseModel):
    """How to display an attachment."""

    category: str
    kind: str
    embed_url: str


class AssignmentResponse(RecordModel):
    """An assignment with counts."""

    id: str
    title: str
    description: str | None
    instructor_id: str
    instructor_name: str = ""
    due_date: str | None
    assignment_type: str
    file_url: str | None
    file_type: str | None
    is_resubmittable: bool
    max_attempts: int | None
    created_at: str
    updated_at: str
    question_count: int = 0
    submission_count: int = 0
    file_preview: FilePreviewResponse | None = None


class AssignmentListResponse(BaseModel):
    assignments: list[AssignmentResponse]
    count: int


class AssignmentDetailResponse(BaseModel):
    """An assignment together with its questions."""

    assignment: AssignmentResponse
    questions: list[QuestionResponse]


class FileUploadResponse(RecordModel):
    """Stored attachment."""

    name: str
    url: str
    file_type: str | None
    size: int


# =============================================================================
# QUESTION ENTRY SCHEMAS
# =============================================================================


class TextInput(BaseModel):
    """Raw ASC or bulk text."""

    text: str


class ASCTokenResponse(RecordModel):
    type: str
    value: str
    start: int


class ASCPreviewResponse(BaseModel):
    """Highlighted ASC input plus the parse outcome."""

    tokens: list[ASCTokenResponse]
    html: str
    has_errors: bool
    questions: list[dict[str, Any]]
    error: str | None = None
    position: int | None = None


class ParsedQuestionsResponse(BaseModel):
    """Questions read from ASC or bulk text, ready for a draft."""

    questions: list[QuestionInput]
    count: int


# =============================================================================
# DISTRIBUTION SCHEMAS
# =============================================================================


class StudentBrief(RecordModel):
    id: str
    email: str
    full_name: str


class AssignedStudentsResponse(BaseModel):
    """Verified students and which of them hold the assignment."""

    students: list[StudentBrief]
    assigned_ids: list[str]


class ToggleResponse(BaseModel):
    student_id: str
    assigned: bool


class CountResponse(BaseModel):
    count: int


# =============================================================================
# SUBMISSION SCHEMAS
# =============================================================================


class AnswerInput(BaseModel):
    """One answer in a submission."""

    question_id: str
    selected_answer: int | None = None
    text_answer: str | None = None


class SubmitRequest(BaseModel):
    answers: list[AnswerInput]


class SubmissionResponse(RecordModel):
    """A submission with its assignment and student names."""

    id: str
    assignment_id: str
    student_id: str
    submitted_at: str
    score: float | None
    total_questions: int
    percentage: int | None = None
    assignment_title: str = ""
    assignment_type: str = ""
    student_name: str = ""


class SubmissionListResponse(BaseModel):
    submissions: list[SubmissionResponse]
    count: int


class AnswerResponse(RecordModel):
    """A stored answer joined with its question."""

    id: str
    submission_id: str
    question_id: str
    selected_answer: int | None
    text_answer: str | None
    is_correct: bool | None
    points_earned: float | None
    graded_by: str | None
    graded_at: str | None
    feedback: str | None
    question_text: str = ""
    question_type: str = "multiple_choice"
    model_answer: str | None = None
    order_number: int = 0


class SubmissionDetailResponse(RecordModel):
    """A submission with the answer key and the student's answers."""

    submission: SubmissionResponse
    questions: list[QuestionResponse]
    answers: list[AnswerResponse]


class CompletionResponse(RecordModel):
    id: str
    assignment_id: str
    student_id: str
    completed_at: str | None
    notes: str | None
    assignment_title: str = ""
    assignment_type: str = ""


class StudentAssignmentResponse(RecordModel):
    """An assignment on the student dashboard."""

    assignment: AssignmentResponse
    questions: list[QuestionResponse]
    latest_submission: SubmissionResponse | None = None
    submission_count: int = 0
    can_submit: bool = True
    completion: CompletionResponse | None = None


class StudentAssignmentListResponse(BaseModel):
    assignments: list[StudentAssignmentResponse]
    count: int


class CompleteRequest(BaseModel):
    notes: str | None = None


class CompletionStatusItemResponse(RecordModel):
    student_id: str
    student_name: str
    student_email: str
    completed_at: str | None
    notes: str | None


class CompletionStatusResponse(RecordModel):
    items: list[CompletionStatusItemResponse]
    completed_count: int
    total_count: int


# =============================================================================
# GRADING SCHEMAS
# =============================================================================


class GradeInput(BaseModel):
    """A grade for one free-response answer; null is_correct skips it."""

    answer_id: str
    is_correct: bool | None = None
    feedback: str | None = None
    points_earned: float | None = None


class GradeRequest(BaseModel):
    grades: list[GradeInput]


class FRQAnswerListResponse(BaseModel):
    answers: list[AnswerResponse]
    ungraded_count: int


class GradeResultResponse(BaseModel):
    submission_id: str
    score: float
    ungraded_count: int


# =============================================================================
# ANALYTICS SCHEMAS
# =============================================================================


class ScoreBinResponse(RecordModel):
    range: str
    count: int
    percentage: int = 0


class AssignmentStatsResponse(RecordModel):
    total_submissions: int
    completed_submissions: int
    completion_rate: int
    average_score: int
    score_distribution: list[ScoreBinResponse]
    total_assigned: int
    is_past_due: bool


class StudentQuickStatsResponse(RecordModel):
    average_score: int
    submission_count: int
    trend: Literal["up", "down", "stable"]
    last_score: int | None
    band: Literal["high", "medium", "low"] | None = None


class TrendPointResponse(RecordModel):
    name: str
    score: int
    assignment: str


class StudentScoreReportResponse(RecordModel):
    average_score: int
    highest_score: int
    lowest_score: int
    trend: list[TrendPointResponse]
    distribution: list[ScoreBinResponse]
    submissions: list[SubmissionResponse]
    completions: list[CompletionResponse]


class AssignmentProgressResponse(RecordModel):
    score: float | None
    total_questions: int
    submitted: bool


class StudentProgressResponse(RecordModel):
    student_id: str
    student_name: str
    student_email: str
    assignments: dict[str, AssignmentProgressResponse]
    average_score: float
    completed_count: int


class StudentProgressListResponse(BaseModel):
    students: list[StudentProgressResponse]
    count: int
