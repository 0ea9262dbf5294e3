"""Accounts and sessions.

New users sign up as instructor or student and stay unverified until an
administrator approves them. Sign-in issues an opaque bearer token stored in
the auth_sessions table.
"""

from __future__ import annotations

import secrets
import sqlite3
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

import structlog
from werkzeug.security import check_password_hash, generate_password_hash

from quizdesk.config.app_config import load_app_config
from quizdesk.core.errors import AuthenticationError, ConflictError, NotFoundError
from quizdesk.db import users_repository as users
from quizdesk.utils.validators import (
    validate_email,
    validate_full_name,
    validate_password,
    validate_signup_role,
)

logger = structlog.get_logger(__name__)


@dataclass
class UserContext:
    """The authenticated user as seen by route guards."""

    id: str
    email: str
    full_name: str
    verified: bool
    roles: list[str] = field(default_factory=list)
    created_at: str = ""

    def has_role(self, role: str) -> bool:
        return role in self.roles

    @property
    def is_admin(self) -> bool:
        return "admin" in self.roles

    @classmethod
    def from_profile(cls, profile: users.ProfileRecord) -> "UserContext":
        return cls(
            id=profile.id,
            email=profile.email,
            full_name=profile.full_name,
            verified=profile.verified,
            roles=list(profile.roles),
            created_at=profile.created_at,
        )


@dataclass
class SignInResult:
    """Token issued on sign-in."""

    token: str
    expires_at: str
    user: UserContext


def _hash_password(password: str) -> str:
    return generate_password_hash(
        password, method=load_app_config().auth.password_hash_method
    )


def _create_profile(
    email: str, password: str, full_name: str, role: str, verified: bool
) -> UserContext:
    try:
        profile = users.insert_profile(
            email=email,
            full_name=full_name,
            password_hash=_hash_password(password),
            role=role,
            verified=verified,
        )
    except sqlite3.IntegrityError as e:
        raise ConflictError(f"User with email '{email}' already exists") from e
    return UserContext.from_profile(profile)


def sign_up(email: str, password: str, full_name: str, role: str) -> UserContext:
    """Register a new, unverified instructor or student.

    Raises:
        ValidationError: On any invalid field
        ConflictError: If the email is already registered
    """
    email = validate_email(email)
    validate_password(password)
    full_name = validate_full_name(full_name)
    validate_signup_role(role)

    if users.get_profile_by_email(email) is not None:
        raise ConflictError(f"User with email '{email}' already exists")

    user = _create_profile(email, password, full_name, role, verified=False)
    logger.info("accounts.signed_up", user_id=user.id, role=role)
    return user


def create_admin(email: str, password: str, full_name: str) -> UserContext:
    """Create a verified administrator (used by the CLI bootstrap)."""
    email = validate_email(email)
    validate_password(password)
    full_name = validate_full_name(full_name)

    user = _create_profile(email, password, full_name, "admin", verified=True)
    logger.info("accounts.admin_created", user_id=user.id)
    return user


def sign_in(email: str, password: str) -> SignInResult:
    """Check credentials and issue a session token.

    Unverified users may sign in; route guards send them to the pending
    approval state.

    Raises:
        AuthenticationError: On unknown email or wrong password
    """
    email = validate_email(email)
    validate_password(password, min_length=1)

    profile = users.get_profile_by_email(email)
    if profile is None or not check_password_hash(profile.password_hash, password):
        logger.info("accounts.sign_in_failed", email=email)
        raise AuthenticationError("Invalid email or password")

    now = datetime.now(timezone.utc)
    purged = users.delete_expired_sessions(now.isoformat())
    if purged:
        logger.debug("accounts.sessions_purged", count=purged)

    ttl = timedelta(hours=load_app_config().auth.session_ttl_hours)
    expires_at = (now + ttl).isoformat()
    token = secrets.token_urlsafe(32)
    users.insert_session(token, profile.id, expires_at)

    logger.info("accounts.signed_in", user_id=profile.id)
    return SignInResult(
        token=token, expires_at=expires_at, user=UserContext.from_profile(profile)
    )


def sign_out(token: str) -> None:
    """Invalidate a session token. Unknown tokens are ignored."""
    if users.delete_session(token):
        logger.info("accounts.signed_out")


def resolve_session(token: str) -> UserContext:
    """Look up the user behind a bearer token.

    Raises:
        AuthenticationError: If the token is unknown or expired
    """
    session = users.get_session(token)
    if session is None:
        raise AuthenticationError("Invalid session")

    expires_at = datetime.fromisoformat(session.expires_at)
    if expires_at.tzinfo is None:
        expires_at = expires_at.replace(tzinfo=timezone.utc)
    if expires_at < datetime.now(timezone.utc):
        users.delete_session(token)
        raise AuthenticationError("Session expired")

    profile = users.get_profile_by_id(session.user_id)
    if profile is None:
        raise AuthenticationError("Invalid session")

    return UserContext.from_profile(profile)


def get_user(user_id: str) -> UserContext:
    """Load a user by ID.

    Raises:
        NotFoundError: If no profile exists
    """
    profile = users.get_profile_by_id(user_id)
    if profile is None:
        raise NotFoundError(f"User '{user_id}' not found")
    return UserContext.from_profile(profile)
