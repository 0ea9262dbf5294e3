"""Score analytics for instructors and admins.

All percentages are per-submission: score / total_questions * 100, rounded
half up. Ungraded submissions (score is None) are counted as submissions
but left out of every average and histogram.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Literal

import structlog

from quizdesk.core.assignments import get_assignment
from quizdesk.core.scoring import percent, round_half_up
from quizdesk.db import assignments_repository as assignments_repo
from quizdesk.db import submissions_repository as submissions_repo
from quizdesk.db import users_repository as users
from quizdesk.db.assignments_repository import CompletionRecord
from quizdesk.db.submissions_repository import SubmissionRecord

logger = structlog.get_logger(__name__)

Trend = Literal["up", "down", "stable"]

# (label, lower bound inclusive); the last bin is open above
ASSIGNMENT_BINS = [
    ("0-9", 0),
    ("10-19", 10),
    ("20-29", 20),
    ("30-39", 30),
    ("40-49", 40),
    ("50-59", 50),
    ("60-69", 60),
    ("70-79", 70),
    ("80-89", 80),
    ("90-100", 90),
]

STUDENT_BINS = [
    ("0-59", 0),
    ("60-69", 60),
    ("70-79", 70),
    ("80-89", 80),
    ("90-100", 90),
]

TREND_THRESHOLD = 5


# =============================================================================
# TYPES
# =============================================================================


@dataclass
class ScoreBin:
    range: str
    count: int
    percentage: int = 0


@dataclass
class AssignmentStats:
    total_submissions: int
    completed_submissions: int
    completion_rate: int
    average_score: int
    score_distribution: list[ScoreBin]
    total_assigned: int
    is_past_due: bool


@dataclass
class StudentQuickStats:
    average_score: int
    submission_count: int
    trend: Trend
    last_score: int | None


@dataclass
class TrendPoint:
    name: str
    score: int
    assignment: str


@dataclass
class StudentScoreReport:
    average_score: int
    highest_score: int
    lowest_score: int
    trend: list[TrendPoint]
    distribution: list[ScoreBin]
    submissions: list[SubmissionRecord]
    completions: list[CompletionRecord]


@dataclass
class AssignmentProgress:
    score: float | None
    total_questions: int
    submitted: bool


@dataclass
class StudentProgress:
    student_id: str
    student_name: str
    student_email: str
    assignments: dict[str, AssignmentProgress] = field(default_factory=dict)
    average_score: float = 0.0
    completed_count: int = 0


# =============================================================================
# HELPERS
# =============================================================================


def _graded_percents(submissions: list[SubmissionRecord]) -> list[int]:
    return [
        percent(s.score, s.total_questions)
        for s in submissions
        if s.score is not None
    ]


def _histogram(scores: list[int], bins: list[tuple[str, int]]) -> list[int]:
    counts = [0] * len(bins)
    for score in scores:
        index = 0
        for i, (_, lower) in enumerate(bins):
            if score >= lower:
                index = i
        counts[index] += 1
    return counts


def _mean(values: list[int]) -> int:
    return round_half_up(sum(values) / len(values)) if values else 0


def _parse_timestamp(value: str) -> datetime | None:
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def is_past_due(due_date: str | None, now: datetime | None = None) -> bool:
    if not due_date:
        return False
    due = _parse_timestamp(due_date)
    if due is None:
        return False
    return due < (now or datetime.now(timezone.utc))


def score_trend(percents_newest_first: list[int]) -> Trend:
    """Compare the 3 most recent scores with up to 3 before them.

    Needs at least 4 graded scores; otherwise stable.
    """
    if len(percents_newest_first) < 4:
        return "stable"
    recent = sum(percents_newest_first[:3]) / 3
    older_scores = percents_newest_first[3:6]
    older = sum(older_scores) / len(older_scores)
    if recent > older + TREND_THRESHOLD:
        return "up"
    if recent < older - TREND_THRESHOLD:
        return "down"
    return "stable"


# =============================================================================
# REPORTS
# =============================================================================


def assignment_stats(assignment_id: str) -> AssignmentStats:
    """Submission and score summary for one assignment."""
    assignment = get_assignment(assignment_id)
    submissions = submissions_repo.list_submissions_for_assignments([assignment_id])
    total_assigned = len(assignments_repo.list_assigned_student_ids(assignment_id))

    scores = _graded_percents(submissions)
    completed = len(scores)
    counts = _histogram(scores, ASSIGNMENT_BINS)
    distribution = [
        ScoreBin(
            range=label,
            count=count,
            percentage=round_half_up(count / completed * 100) if completed else 0,
        )
        for (label, _), count in zip(ASSIGNMENT_BINS, counts)
    ]

    unique_students = len({s.student_id for s in submissions})
    completion_rate = (
        round_half_up(unique_students / total_assigned * 100) if total_assigned else 0
    )

    return AssignmentStats(
        total_submissions=len(submissions),
        completed_submissions=completed,
        completion_rate=completion_rate,
        average_score=_mean(scores),
        score_distribution=distribution,
        total_assigned=total_assigned,
        is_past_due=is_past_due(assignment.due_date),
    )


def student_quick_stats(student_id: str) -> StudentQuickStats:
    """Average, attempt count, trend and last score for a student card."""
    submissions = submissions_repo.list_submissions_for_student(student_id)
    scores = _graded_percents(submissions)

    return StudentQuickStats(
        average_score=_mean(scores),
        submission_count=len(submissions),
        trend=score_trend(scores),
        last_score=scores[0] if scores else None,
    )


def student_score_report(student_id: str, search: str = "") -> StudentScoreReport:
    """Detailed score analysis for one student.

    search filters the submission list by assignment title; statistics
    always cover every submission.
    """
    submissions = submissions_repo.list_submissions_for_student(student_id)
    graded = [s for s in submissions if s.score is not None]
    scores = _graded_percents(graded)

    chronological = sorted(graded, key=lambda s: s.submitted_at)
    trend = [
        TrendPoint(
            name=str(i),
            score=percent(s.score, s.total_questions),
            assignment=s.assignment_title,
        )
        for i, s in enumerate(chronological, start=1)
    ]

    distribution = [
        ScoreBin(range=label, count=count)
        for (label, _), count in zip(STUDENT_BINS, _histogram(scores, STUDENT_BINS))
    ]

    query = search.strip().lower()
    listed = [s for s in submissions if query in s.assignment_title.lower()]

    return StudentScoreReport(
        average_score=_mean(scores),
        highest_score=max(scores) if scores else 0,
        lowest_score=min(scores) if scores else 0,
        trend=trend,
        distribution=distribution,
        submissions=listed,
        completions=assignments_repo.list_completions_for_student(student_id),
    )


def instructor_student_progress(instructor_id: str) -> list[StudentProgress]:
    """Per-student progress across all of an instructor's assignments.

    For each assigned (student, assignment) pair the latest submission is
    used. The average covers submitted, graded assignments only.
    """
    assignment_ids = [
        a.id for a in assignments_repo.list_assignments_by_instructor(instructor_id)
    ]
    links = assignments_repo.list_assignment_links(assignment_ids)
    if not links:
        return []

    profiles = users.get_profiles_by_ids(sorted({student_id for student_id, _ in links}))

    # Newest first, so setdefault keeps the latest attempt
    latest: dict[tuple[str, str], SubmissionRecord] = {}
    for s in submissions_repo.list_submissions_for_assignments(assignment_ids):
        latest.setdefault((s.student_id, s.assignment_id), s)

    progress: dict[str, StudentProgress] = {}
    for student_id, assignment_id in links:
        profile = profiles.get(student_id)
        if profile is None:
            continue
        entry = progress.setdefault(
            student_id,
            StudentProgress(
                student_id=student_id,
                student_name=profile.full_name or "Unknown",
                student_email=profile.email or "",
            ),
        )
        submission = latest.get((student_id, assignment_id))
        entry.assignments[assignment_id] = AssignmentProgress(
            score=submission.score if submission else None,
            total_questions=submission.total_questions if submission else 0,
            submitted=submission is not None,
        )

    for entry in progress.values():
        graded = [
            a.score / a.total_questions * 100
            for a in entry.assignments.values()
            if a.submitted and a.score is not None and a.total_questions > 0
        ]
        entry.average_score = sum(graded) / len(graded) if graded else 0.0
        entry.completed_count = len(graded)

    logger.debug(
        "analytics.student_progress",
        instructor_id=instructor_id,
        students=len(progress),
        assignments=len(assignment_ids),
    )
    return list(progress.values())
