"""SQLite database connection and schema management.

Provides connection management and schema initialization for quizdesk.
Relational invariants (one instructor per assignment, one completion per
student and assignment, cascades) live in the schema.
"""

from __future__ import annotations

import sqlite3
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Generator

import structlog

from quizdesk.config.app_config import load_app_config

logger = structlog.get_logger(__name__)

# Current database path (set by init_db; falls back to config)
_db_path: Path | None = None


def init_db(db_path: Path | None = None) -> Path:
    """Initialize database with schema.

    Creates the database file and all required tables if they don't exist.

    Args:
        db_path: Path to database file. Defaults to the configured path.

    Returns:
        The path that was initialized.
    """
    global _db_path
    _db_path = db_path or load_app_config().database.path

    _db_path.parent.mkdir(parents=True, exist_ok=True)

    with get_db() as conn:
        _create_schema(conn)

    logger.info("database.initialized", path=str(_db_path))
    return _db_path


def reset_db_path() -> None:
    """Forget the initialized path so the next call re-reads config."""
    global _db_path
    _db_path = None


@contextmanager
def get_db() -> Generator[sqlite3.Connection, None, None]:
    """Get database connection as context manager.

    Commits when the block exits normally, rolls back and re-raises on any
    exception.

    Yields:
        SQLite connection with row factory set to sqlite3.Row

    Example:
        with get_db() as conn:
            rows = conn.execute("SELECT * FROM assignments").fetchall()
    """
    db_path = _db_path or load_app_config().database.path

    db_path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")

    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def check_db() -> bool:
    """Return True when the database opens and the schema is queryable."""
    try:
        with get_db() as conn:
            conn.execute("SELECT COUNT(*) FROM profiles").fetchone()
    except sqlite3.Error as e:
        logger.warning("database.unreachable", error=str(e))
        return False
    return True


def new_id() -> str:
    """Generate a row identifier."""
    return str(uuid.uuid4())


def utc_now() -> str:
    """Current UTC time as ISO-8601 string."""
    return datetime.now(timezone.utc).isoformat()


def placeholders(values: list) -> str:
    """Comma-separated '?' list for IN clauses."""
    return ", ".join("?" for _ in values)


def _create_schema(conn: sqlite3.Connection) -> None:
    """Create database schema.

    Uses IF NOT EXISTS for idempotency.
    """
    conn.executescript(
        """
        CREATE TABLE IF NOT EXISTS profiles (
            id TEXT PRIMARY KEY,
            email TEXT NOT NULL UNIQUE,
            full_name TEXT NOT NULL DEFAULT '',
            password_hash TEXT NOT NULL,
            verified INTEGER NOT NULL DEFAULT 0,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL
        );

        CREATE TABLE IF NOT EXISTS user_roles (
            id TEXT PRIMARY KEY,
            user_id TEXT NOT NULL REFERENCES profiles(id) ON DELETE CASCADE,
            role TEXT NOT NULL CHECK(role IN ('admin', 'instructor', 'student')),
            created_at TEXT NOT NULL,
            UNIQUE(user_id, role)
        );

        CREATE TABLE IF NOT EXISTS auth_sessions (
            token TEXT PRIMARY KEY,
            user_id TEXT NOT NULL REFERENCES profiles(id) ON DELETE CASCADE,
            created_at TEXT NOT NULL,
            expires_at TEXT NOT NULL
        );

        CREATE TABLE IF NOT EXISTS assignments (
            id TEXT PRIMARY KEY,
            title TEXT NOT NULL,
            description TEXT,
            instructor_id TEXT NOT NULL REFERENCES profiles(id) ON DELETE CASCADE,
            due_date TEXT,
            assignment_type TEXT NOT NULL DEFAULT 'quiz'
                CHECK(assignment_type IN ('quiz', 'reading')),
            file_url TEXT,
            file_type TEXT
                CHECK(file_type IN ('image', 'pdf', 'document', 'presentation')),
            is_resubmittable INTEGER NOT NULL DEFAULT 0,
            max_attempts INTEGER CHECK(max_attempts IS NULL OR max_attempts >= 1),
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL
        );

        CREATE TABLE IF NOT EXISTS questions (
            id TEXT PRIMARY KEY,
            assignment_id TEXT NOT NULL REFERENCES assignments(id) ON DELETE CASCADE,
            text TEXT NOT NULL,
            options TEXT NOT NULL,
            correct_answer INTEGER
                CHECK(correct_answer IS NULL OR (correct_answer >= 0 AND correct_answer <= 4)),
            explanation TEXT,
            order_number INTEGER NOT NULL,
            question_type TEXT NOT NULL DEFAULT 'multiple_choice'
                CHECK(question_type IN ('multiple_choice', 'free_response')),
            model_answer TEXT,
            created_at TEXT NOT NULL
        );

        CREATE TABLE IF NOT EXISTS student_assignments (
            id TEXT PRIMARY KEY,
            assignment_id TEXT NOT NULL REFERENCES assignments(id) ON DELETE CASCADE,
            student_id TEXT NOT NULL REFERENCES profiles(id) ON DELETE CASCADE,
            created_at TEXT NOT NULL,
            UNIQUE(assignment_id, student_id)
        );

        -- No uniqueness on (assignment, student): resubmission is allowed
        -- and attempt limits are enforced by the submission service.
        CREATE TABLE IF NOT EXISTS submissions (
            id TEXT PRIMARY KEY,
            assignment_id TEXT NOT NULL REFERENCES assignments(id) ON DELETE CASCADE,
            student_id TEXT NOT NULL REFERENCES profiles(id) ON DELETE CASCADE,
            submitted_at TEXT NOT NULL,
            score REAL,
            total_questions INTEGER NOT NULL
        );

        CREATE TABLE IF NOT EXISTS student_answers (
            id TEXT PRIMARY KEY,
            submission_id TEXT NOT NULL REFERENCES submissions(id) ON DELETE CASCADE,
            question_id TEXT NOT NULL REFERENCES questions(id) ON DELETE CASCADE,
            selected_answer INTEGER
                CHECK(selected_answer IS NULL OR (selected_answer >= 0 AND selected_answer <= 4)),
            text_answer TEXT,
            is_correct INTEGER,
            points_earned REAL
                CHECK(points_earned IS NULL OR (points_earned >= 0 AND points_earned <= 1)),
            graded_by TEXT REFERENCES profiles(id) ON DELETE SET NULL,
            graded_at TEXT,
            feedback TEXT,
            UNIQUE(submission_id, question_id),
            CHECK(selected_answer IS NOT NULL OR text_answer IS NOT NULL)
        );

        CREATE TABLE IF NOT EXISTS assignment_completions (
            id TEXT PRIMARY KEY,
            assignment_id TEXT NOT NULL REFERENCES assignments(id) ON DELETE CASCADE,
            student_id TEXT NOT NULL REFERENCES profiles(id) ON DELETE CASCADE,
            completed_at TEXT,
            notes TEXT,
            created_at TEXT NOT NULL,
            UNIQUE(assignment_id, student_id)
        );

        CREATE INDEX IF NOT EXISTS idx_assignments_instructor ON assignments(instructor_id);
        CREATE INDEX IF NOT EXISTS idx_questions_assignment ON questions(assignment_id);
        CREATE INDEX IF NOT EXISTS idx_submissions_assignment ON submissions(assignment_id);
        CREATE INDEX IF NOT EXISTS idx_submissions_student ON submissions(student_id);
        CREATE INDEX IF NOT EXISTS idx_answers_submission ON student_answers(submission_id);
        CREATE INDEX IF NOT EXISTS idx_sessions_user ON auth_sessions(user_id);
        """
    )
