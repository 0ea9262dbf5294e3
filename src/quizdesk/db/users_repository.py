"""Repository functions for profiles, user_roles and auth_sessions.

Also holds the cascading user deletion, which must run as one transaction
across every table that references a profile.
"""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass, field

import structlog

from quizdesk.db.database import get_db, new_id, placeholders, utc_now

logger = structlog.get_logger(__name__)


@dataclass
class ProfileRecord:
    """Profile record from database."""

    id: str
    email: str
    full_name: str
    password_hash: str
    verified: bool
    created_at: str
    updated_at: str
    roles: list[str] = field(default_factory=list)

    @property
    def primary_role(self) -> str:
        """First role held, or "none"."""
        return self.roles[0] if self.roles else "none"


@dataclass
class SessionRecord:
    """Auth session record from database."""

    token: str
    user_id: str
    created_at: str
    expires_at: str


def _row_to_profile(row: sqlite3.Row, roles: list[str] | None = None) -> ProfileRecord:
    return ProfileRecord(
        id=row["id"],
        email=row["email"],
        full_name=row["full_name"] or "",
        password_hash=row["password_hash"],
        verified=bool(row["verified"]),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
        roles=roles or [],
    )


def _roles_for(conn: sqlite3.Connection, user_id: str) -> list[str]:
    rows = conn.execute(
        "SELECT role FROM user_roles WHERE user_id = ? ORDER BY created_at, rowid",
        (user_id,),
    ).fetchall()
    return [r["role"] for r in rows]


# =============================================================================
# PROFILES
# =============================================================================


def insert_profile(
    email: str,
    full_name: str,
    password_hash: str,
    role: str,
    verified: bool = False,
) -> ProfileRecord:
    """Insert a profile together with its role.

    Raises:
        sqlite3.IntegrityError: If the email is already registered
    """
    user_id = new_id()
    now = utc_now()

    with get_db() as conn:
        conn.execute(
            """
            INSERT INTO profiles (id, email, full_name, password_hash, verified, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (user_id, email, full_name, password_hash, int(verified), now, now),
        )
        conn.execute(
            "INSERT INTO user_roles (id, user_id, role, created_at) VALUES (?, ?, ?, ?)",
            (new_id(), user_id, role, now),
        )

    logger.debug("profiles.inserted", user_id=user_id, role=role)

    return ProfileRecord(
        id=user_id,
        email=email,
        full_name=full_name,
        password_hash=password_hash,
        verified=verified,
        created_at=now,
        updated_at=now,
        roles=[role],
    )


def get_profile_by_id(user_id: str) -> ProfileRecord | None:
    """Get profile (with roles) by ID."""
    with get_db() as conn:
        row = conn.execute("SELECT * FROM profiles WHERE id = ?", (user_id,)).fetchone()
        if row is None:
            return None
        return _row_to_profile(row, _roles_for(conn, user_id))


def get_profile_by_email(email: str) -> ProfileRecord | None:
    """Get profile (with roles) by email, case-insensitively."""
    with get_db() as conn:
        row = conn.execute(
            "SELECT * FROM profiles WHERE lower(email) = lower(?)", (email,)
        ).fetchone()
        if row is None:
            return None
        return _row_to_profile(row, _roles_for(conn, row["id"]))


def get_profiles_by_ids(user_ids: list[str]) -> dict[str, ProfileRecord]:
    """Get profiles keyed by ID. Missing IDs are absent from the result."""
    if not user_ids:
        return {}
    with get_db() as conn:
        rows = conn.execute(
            f"SELECT * FROM profiles WHERE id IN ({placeholders(user_ids)})",
            user_ids,
        ).fetchall()
    return {row["id"]: _row_to_profile(row) for row in rows}


def list_profiles() -> list[ProfileRecord]:
    """All profiles with their roles, newest first."""
    with get_db() as conn:
        rows = conn.execute(
            "SELECT * FROM profiles ORDER BY created_at DESC, rowid DESC"
        ).fetchall()
        role_rows = conn.execute(
            "SELECT user_id, role FROM user_roles ORDER BY created_at, rowid"
        ).fetchall()

    roles: dict[str, list[str]] = {}
    for r in role_rows:
        roles.setdefault(r["user_id"], []).append(r["role"])

    return [_row_to_profile(row, roles.get(row["id"], [])) for row in rows]


def list_verified_students() -> list[ProfileRecord]:
    """Verified profiles holding the student role, by name."""
    with get_db() as conn:
        rows = conn.execute(
            """
            SELECT p.* FROM profiles p
            JOIN user_roles r ON r.user_id = p.id
            WHERE r.role = 'student' AND p.verified = 1
            ORDER BY p.full_name, p.email
            """
        ).fetchall()
    return [_row_to_profile(row, ["student"]) for row in rows]


def set_verified(user_id: str, verified: bool) -> bool:
    """Set the verified flag. Returns False if the profile does not exist."""
    with get_db() as conn:
        cursor = conn.execute(
            "UPDATE profiles SET verified = ?, updated_at = ? WHERE id = ?",
            (int(verified), utc_now(), user_id),
        )

    updated = cursor.rowcount > 0
    if updated:
        logger.debug("profiles.verified_changed", user_id=user_id, verified=verified)
    return updated


def delete_profile(user_id: str) -> bool:
    """Delete a profile; roles and sessions cascade."""
    with get_db() as conn:
        cursor = conn.execute("DELETE FROM profiles WHERE id = ?", (user_id,))

    deleted = cursor.rowcount > 0
    if deleted:
        logger.debug("profiles.deleted", user_id=user_id)
    return deleted


# =============================================================================
# SESSIONS
# =============================================================================


def insert_session(token: str, user_id: str, expires_at: str) -> SessionRecord:
    """Store a new auth session."""
    now = utc_now()
    with get_db() as conn:
        conn.execute(
            "INSERT INTO auth_sessions (token, user_id, created_at, expires_at) VALUES (?, ?, ?, ?)",
            (token, user_id, now, expires_at),
        )
    return SessionRecord(token=token, user_id=user_id, created_at=now, expires_at=expires_at)


def get_session(token: str) -> SessionRecord | None:
    """Get an auth session by token."""
    with get_db() as conn:
        row = conn.execute(
            "SELECT * FROM auth_sessions WHERE token = ?", (token,)
        ).fetchone()
    if row is None:
        return None
    return SessionRecord(
        token=row["token"],
        user_id=row["user_id"],
        created_at=row["created_at"],
        expires_at=row["expires_at"],
    )


def delete_session(token: str) -> bool:
    """Delete an auth session."""
    with get_db() as conn:
        cursor = conn.execute("DELETE FROM auth_sessions WHERE token = ?", (token,))
    return cursor.rowcount > 0


def delete_expired_sessions(now: str) -> int:
    """Delete sessions that expired before `now` (ISO 8601). Returns the count."""
    with get_db() as conn:
        cursor = conn.execute(
            "DELETE FROM auth_sessions WHERE julianday(expires_at) < julianday(?)", (now,)
        )
    return cursor.rowcount


# =============================================================================
# CASCADING DELETE
# =============================================================================


def delete_user_cascade(user_id: str) -> dict[str, int]:
    """Delete a user and every row that depends on them.

    Order:
    1. the user's instructor assignments are gathered;
    2. submissions by the user or on those assignments are gathered;
    3. their answers, then the submissions, are deleted;
    4. the user's own completions and student assignments are deleted;
    5. questions, completions and student assignments of the instructor
       assignments are deleted, then the assignments;
    6. graded_by is cleared wherever the user graded;
    7. roles, sessions and the profile are deleted.

    Returns:
        Number of rows removed per table.
    """
    counts: dict[str, int] = {}

    with get_db() as conn:
        assignment_ids = [
            r["id"]
            for r in conn.execute(
                "SELECT id FROM assignments WHERE instructor_id = ?", (user_id,)
            ).fetchall()
        ]

        query = "SELECT id FROM submissions WHERE student_id = ?"
        params: list[str] = [user_id]
        if assignment_ids:
            query += f" OR assignment_id IN ({placeholders(assignment_ids)})"
            params += assignment_ids
        submission_ids = [r["id"] for r in conn.execute(query, params).fetchall()]

        if submission_ids:
            marks = placeholders(submission_ids)
            counts["student_answers"] = conn.execute(
                f"DELETE FROM student_answers WHERE submission_id IN ({marks})",
                submission_ids,
            ).rowcount
            counts["submissions"] = conn.execute(
                f"DELETE FROM submissions WHERE id IN ({marks})", submission_ids
            ).rowcount

        counts["assignment_completions"] = conn.execute(
            "DELETE FROM assignment_completions WHERE student_id = ?", (user_id,)
        ).rowcount
        counts["student_assignments"] = conn.execute(
            "DELETE FROM student_assignments WHERE student_id = ?", (user_id,)
        ).rowcount

        if assignment_ids:
            marks = placeholders(assignment_ids)
            counts["questions"] = conn.execute(
                f"DELETE FROM questions WHERE assignment_id IN ({marks})",
                assignment_ids,
            ).rowcount
            counts["assignment_completions"] += conn.execute(
                f"DELETE FROM assignment_completions WHERE assignment_id IN ({marks})",
                assignment_ids,
            ).rowcount
            counts["student_assignments"] += conn.execute(
                f"DELETE FROM student_assignments WHERE assignment_id IN ({marks})",
                assignment_ids,
            ).rowcount
            counts["assignments"] = conn.execute(
                f"DELETE FROM assignments WHERE id IN ({marks})", assignment_ids
            ).rowcount

        conn.execute(
            "UPDATE student_answers SET graded_by = NULL WHERE graded_by = ?",
            (user_id,),
        )

        counts["user_roles"] = conn.execute(
            "DELETE FROM user_roles WHERE user_id = ?", (user_id,)
        ).rowcount
        conn.execute("DELETE FROM auth_sessions WHERE user_id = ?", (user_id,))
        counts["profiles"] = conn.execute(
            "DELETE FROM profiles WHERE id = ?", (user_id,)
        ).rowcount

    logger.info("users.deleted", user_id=user_id, **counts)
    return counts
