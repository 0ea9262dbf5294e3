"""User administration: approval queue and account removal."""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from quizdesk.core.accounts import UserContext
from quizdesk.core.errors import NotFoundError, PermissionDeniedError, ValidationError
from quizdesk.db import users_repository as users

logger = structlog.get_logger(__name__)


@dataclass
class UserSummary:
    """Row of the admin user table."""

    id: str
    email: str
    full_name: str
    role: str
    verified: bool
    created_at: str

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "email": self.email,
            "full_name": self.full_name,
            "role": self.role,
            "verified": self.verified,
            "created_at": self.created_at,
        }


def _summary(profile: users.ProfileRecord) -> UserSummary:
    return UserSummary(
        id=profile.id,
        email=profile.email,
        full_name=profile.full_name,
        role=profile.primary_role,
        verified=profile.verified,
        created_at=profile.created_at,
    )


def list_users() -> tuple[list[UserSummary], list[UserSummary]]:
    """Split all users into (pending, verified), newest first."""
    pending: list[UserSummary] = []
    verified: list[UserSummary] = []
    for profile in users.list_profiles():
        (verified if profile.verified else pending).append(_summary(profile))
    return pending, verified


def _set_verified(user_id: str, verified: bool) -> None:
    if not users.set_verified(user_id, verified):
        raise NotFoundError(f"User '{user_id}' not found")


def approve_user(user_id: str) -> None:
    """Grant access to a pending user."""
    _set_verified(user_id, True)
    logger.info("admin.user_approved", user_id=user_id)


def revoke_access(user_id: str) -> None:
    """Return a verified user to the pending state."""
    _set_verified(user_id, False)
    logger.info("admin.access_revoked", user_id=user_id)


def reject_user(user_id: str) -> None:
    """Delete a pending user's profile. Roles and sessions cascade."""
    if not users.delete_profile(user_id):
        raise NotFoundError(f"User '{user_id}' not found")
    logger.info("admin.user_rejected", user_id=user_id)


def delete_user(requester: UserContext, user_id: str | None) -> dict:
    """Remove a user and everything that depends on them.

    Raises:
        PermissionDeniedError: If the requester is not an admin
        ValidationError: If no user ID is given
        NotFoundError: If the user does not exist
    """
    if not requester.is_admin:
        raise PermissionDeniedError("Admin access required")
    if not user_id:
        raise ValidationError("User ID is required")
    if users.get_profile_by_id(user_id) is None:
        raise NotFoundError(f"User '{user_id}' not found")

    counts = users.delete_user_cascade(user_id)
    logger.info("admin.user_deleted", user_id=user_id, by=requester.id, rows=sum(counts.values()))
    return {"success": True}
