"""Repository functions for assignments, questions, student_assignments and
assignment_completions.
"""

from __future__ import annotations

import json
import sqlite3
from dataclasses import dataclass
from typing import Any

import structlog

from quizdesk.db.database import get_db, new_id, placeholders, utc_now

logger = structlog.get_logger(__name__)


@dataclass
class AssignmentRecord:
    """Assignment record from database."""

    id: str
    title: str
    description: str | None
    instructor_id: str
    due_date: str | None
    assignment_type: str
    file_url: str | None
    file_type: str | None
    is_resubmittable: bool
    max_attempts: int | None
    created_at: str
    updated_at: str
    instructor_name: str = ""
    question_count: int = 0
    submission_count: int = 0


@dataclass
class QuestionRecord:
    """Question record from database."""

    id: str
    assignment_id: str
    text: str
    options: list[str]
    correct_answer: int | None
    explanation: str | None
    order_number: int
    question_type: str
    model_answer: str | None
    created_at: str

    def without_answers(self) -> "QuestionRecord":
        """Copy with answer-revealing fields cleared."""
        return QuestionRecord(
            id=self.id,
            assignment_id=self.assignment_id,
            text=self.text,
            options=list(self.options),
            correct_answer=None,
            explanation=None,
            order_number=self.order_number,
            question_type=self.question_type,
            model_answer=None,
            created_at=self.created_at,
        )


@dataclass
class CompletionRecord:
    """Reading-assignment completion record."""

    id: str
    assignment_id: str
    student_id: str
    completed_at: str | None
    notes: str | None
    created_at: str
    assignment_title: str = ""
    assignment_type: str = ""


_ASSIGNMENT_SELECT = """
    SELECT a.*,
           COALESCE(p.full_name, '') AS instructor_name,
           (SELECT COUNT(*) FROM questions q WHERE q.assignment_id = a.id) AS question_count,
           (SELECT COUNT(*) FROM submissions s WHERE s.assignment_id = a.id) AS submission_count
    FROM assignments a
    LEFT JOIN profiles p ON p.id = a.instructor_id
"""


def _row_to_assignment(row: sqlite3.Row) -> AssignmentRecord:
    return AssignmentRecord(
        id=row["id"],
        title=row["title"],
        description=row["description"],
        instructor_id=row["instructor_id"],
        due_date=row["due_date"],
        assignment_type=row["assignment_type"],
        file_url=row["file_url"],
        file_type=row["file_type"],
        is_resubmittable=bool(row["is_resubmittable"]),
        max_attempts=row["max_attempts"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
        instructor_name=row["instructor_name"],
        question_count=row["question_count"],
        submission_count=row["submission_count"],
    )


def _row_to_question(row: sqlite3.Row) -> QuestionRecord:
    return QuestionRecord(
        id=row["id"],
        assignment_id=row["assignment_id"],
        text=row["text"],
        options=json.loads(row["options"]),
        correct_answer=row["correct_answer"],
        explanation=row["explanation"],
        order_number=row["order_number"],
        question_type=row["question_type"],
        model_answer=row["model_answer"],
        created_at=row["created_at"],
    )


def _insert_questions(
    conn: sqlite3.Connection,
    assignment_id: str,
    questions: list[dict[str, Any]],
    start_order: int,
    now: str,
) -> None:
    conn.executemany(
        """
        INSERT INTO questions (
            id, assignment_id, text, options, correct_answer, explanation,
            order_number, question_type, model_answer, created_at
        ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """,
        [
            (
                new_id(),
                assignment_id,
                q["text"],
                json.dumps(q["options"]),
                q.get("correct_answer"),
                q.get("explanation") or None,
                start_order + index,
                q.get("question_type", "multiple_choice"),
                q.get("model_answer") or None,
                now,
            )
            for index, q in enumerate(questions)
        ],
    )


# =============================================================================
# ASSIGNMENTS
# =============================================================================


def insert_assignment(
    title: str,
    instructor_id: str,
    questions: list[dict[str, Any]],
    description: str | None = None,
    due_date: str | None = None,
    assignment_type: str = "quiz",
    file_url: str | None = None,
    file_type: str | None = None,
    is_resubmittable: bool = False,
    max_attempts: int | None = None,
) -> str:
    """Insert an assignment and its questions in one transaction.

    Questions receive order_number equal to their list index.

    Returns:
        The new assignment ID
    """
    assignment_id = new_id()
    now = utc_now()

    with get_db() as conn:
        conn.execute(
            """
            INSERT INTO assignments (
                id, title, description, instructor_id, due_date, assignment_type,
                file_url, file_type, is_resubmittable, max_attempts, created_at, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                assignment_id,
                title,
                description,
                instructor_id,
                due_date,
                assignment_type,
                file_url,
                file_type,
                int(is_resubmittable),
                max_attempts,
                now,
                now,
            ),
        )
        _insert_questions(conn, assignment_id, questions, 0, now)

    logger.debug(
        "assignments.inserted", assignment_id=assignment_id, questions=len(questions)
    )
    return assignment_id


def get_assignment(assignment_id: str) -> AssignmentRecord | None:
    """Get assignment by ID, with counts and instructor name."""
    with get_db() as conn:
        row = conn.execute(
            _ASSIGNMENT_SELECT + " WHERE a.id = ?", (assignment_id,)
        ).fetchone()
    return _row_to_assignment(row) if row else None


def list_assignments_by_instructor(instructor_id: str) -> list[AssignmentRecord]:
    """Instructor's assignments, newest first."""
    with get_db() as conn:
        rows = conn.execute(
            _ASSIGNMENT_SELECT
            + " WHERE a.instructor_id = ? ORDER BY a.created_at DESC, a.rowid DESC",
            (instructor_id,),
        ).fetchall()
    return [_row_to_assignment(row) for row in rows]


def list_assignments_by_ids(assignment_ids: list[str]) -> list[AssignmentRecord]:
    """Assignments with the given IDs, newest first."""
    if not assignment_ids:
        return []
    with get_db() as conn:
        rows = conn.execute(
            _ASSIGNMENT_SELECT
            + f" WHERE a.id IN ({placeholders(assignment_ids)})"
            + " ORDER BY a.created_at DESC, a.rowid DESC",
            assignment_ids,
        ).fetchall()
    return [_row_to_assignment(row) for row in rows]


def delete_assignment(assignment_id: str) -> bool:
    """Delete assignment; questions, submissions and links cascade."""
    with get_db() as conn:
        cursor = conn.execute("DELETE FROM assignments WHERE id = ?", (assignment_id,))

    deleted = cursor.rowcount > 0
    if deleted:
        logger.debug("assignments.deleted", assignment_id=assignment_id)
    return deleted


# =============================================================================
# QUESTIONS
# =============================================================================


def get_questions(assignment_id: str) -> list[QuestionRecord]:
    """Questions of an assignment ordered by order_number."""
    with get_db() as conn:
        rows = conn.execute(
            "SELECT * FROM questions WHERE assignment_id = ? ORDER BY order_number",
            (assignment_id,),
        ).fetchall()
    return [_row_to_question(row) for row in rows]


def append_questions(assignment_id: str, questions: list[dict[str, Any]]) -> int:
    """Append questions after the current last order_number.

    Returns:
        Number of questions inserted
    """
    now = utc_now()
    with get_db() as conn:
        row = conn.execute(
            "SELECT COALESCE(MAX(order_number) + 1, 0) AS next FROM questions WHERE assignment_id = ?",
            (assignment_id,),
        ).fetchone()
        _insert_questions(conn, assignment_id, questions, row["next"], now)
        conn.execute(
            "UPDATE assignments SET updated_at = ? WHERE id = ?", (now, assignment_id)
        )
    return len(questions)


def delete_question(question_id: str) -> bool:
    """Delete a single question."""
    with get_db() as conn:
        cursor = conn.execute("DELETE FROM questions WHERE id = ?", (question_id,))
    return cursor.rowcount > 0


# =============================================================================
# STUDENT ASSIGNMENTS
# =============================================================================


def assign_students(assignment_id: str, student_ids: list[str]) -> int:
    """Link students to an assignment, skipping existing links.

    Returns:
        Number of new links
    """
    now = utc_now()
    with get_db() as conn:
        cursor = conn.executemany(
            """
            INSERT OR IGNORE INTO student_assignments (id, assignment_id, student_id, created_at)
            VALUES (?, ?, ?, ?)
            """,
            [(new_id(), assignment_id, sid, now) for sid in student_ids],
        )
    return cursor.rowcount


def unassign_students(assignment_id: str, student_ids: list[str] | None = None) -> int:
    """Remove links; all of the assignment's links when student_ids is None."""
    with get_db() as conn:
        if student_ids is None:
            cursor = conn.execute(
                "DELETE FROM student_assignments WHERE assignment_id = ?",
                (assignment_id,),
            )
        else:
            if not student_ids:
                return 0
            cursor = conn.execute(
                f"DELETE FROM student_assignments WHERE assignment_id = ? "
                f"AND student_id IN ({placeholders(student_ids)})",
                [assignment_id, *student_ids],
            )
    return cursor.rowcount


def list_assigned_student_ids(assignment_id: str) -> list[str]:
    """Students linked to an assignment, in link order."""
    with get_db() as conn:
        rows = conn.execute(
            "SELECT student_id FROM student_assignments WHERE assignment_id = ? ORDER BY created_at, rowid",
            (assignment_id,),
        ).fetchall()
    return [r["student_id"] for r in rows]


def list_assignment_ids_for_student(student_id: str) -> list[str]:
    """Assignments linked to a student."""
    with get_db() as conn:
        rows = conn.execute(
            "SELECT assignment_id FROM student_assignments WHERE student_id = ?",
            (student_id,),
        ).fetchall()
    return [r["assignment_id"] for r in rows]


def list_assignment_links(assignment_ids: list[str]) -> list[tuple[str, str]]:
    """(student_id, assignment_id) pairs for the given assignments."""
    if not assignment_ids:
        return []
    with get_db() as conn:
        rows = conn.execute(
            f"SELECT student_id, assignment_id FROM student_assignments "
            f"WHERE assignment_id IN ({placeholders(assignment_ids)}) ORDER BY created_at, rowid",
            assignment_ids,
        ).fetchall()
    return [(r["student_id"], r["assignment_id"]) for r in rows]


def is_student_assigned(assignment_id: str, student_id: str) -> bool:
    """True when the student is linked to the assignment."""
    with get_db() as conn:
        row = conn.execute(
            "SELECT 1 FROM student_assignments WHERE assignment_id = ? AND student_id = ?",
            (assignment_id, student_id),
        ).fetchone()
    return row is not None


# =============================================================================
# COMPLETIONS
# =============================================================================


def _row_to_completion(row: sqlite3.Row) -> CompletionRecord:
    keys = row.keys()
    return CompletionRecord(
        id=row["id"],
        assignment_id=row["assignment_id"],
        student_id=row["student_id"],
        completed_at=row["completed_at"],
        notes=row["notes"],
        created_at=row["created_at"],
        assignment_title=row["assignment_title"] if "assignment_title" in keys else "",
        assignment_type=row["assignment_type"] if "assignment_type" in keys else "",
    )


def insert_completion(
    assignment_id: str, student_id: str, notes: str | None = None
) -> CompletionRecord:
    """Record a completion.

    Raises:
        sqlite3.IntegrityError: If the student already completed it
    """
    completion_id = new_id()
    now = utc_now()
    with get_db() as conn:
        conn.execute(
            """
            INSERT INTO assignment_completions (id, assignment_id, student_id, completed_at, notes, created_at)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (completion_id, assignment_id, student_id, now, notes, now),
        )
    return CompletionRecord(
        id=completion_id,
        assignment_id=assignment_id,
        student_id=student_id,
        completed_at=now,
        notes=notes,
        created_at=now,
    )


def delete_completion(assignment_id: str, student_id: str) -> bool:
    """Remove a student's completion."""
    with get_db() as conn:
        cursor = conn.execute(
            "DELETE FROM assignment_completions WHERE assignment_id = ? AND student_id = ?",
            (assignment_id, student_id),
        )
    return cursor.rowcount > 0


def list_completions_for_assignment(assignment_id: str) -> list[CompletionRecord]:
    """Completions of one assignment."""
    with get_db() as conn:
        rows = conn.execute(
            "SELECT * FROM assignment_completions WHERE assignment_id = ?",
            (assignment_id,),
        ).fetchall()
    return [_row_to_completion(row) for row in rows]


def list_completions_for_student(student_id: str) -> list[CompletionRecord]:
    """Completions of one student with assignment title and type."""
    with get_db() as conn:
        rows = conn.execute(
            """
            SELECT c.*, a.title AS assignment_title, a.assignment_type AS assignment_type
            FROM assignment_completions c
            JOIN assignments a ON a.id = c.assignment_id
            WHERE c.student_id = ?
            ORDER BY c.completed_at DESC
            """,
            (student_id,),
        ).fetchall()
    return [_row_to_completion(row) for row in rows]
