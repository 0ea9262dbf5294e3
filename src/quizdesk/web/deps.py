"""Authentication dependencies for route handlers.

Clients send the token from /api/auth/signin as `Authorization: Bearer <token>`.
"""

from typing import Callable

from fastapi import Depends, HTTPException, Request, status

from quizdesk.core.accounts import UserContext, resolve_session
from quizdesk.core.errors import AuthenticationError


def bearer_token(request: Request) -> str | None:
    """Token from the Authorization header, if any."""
    auth_header = request.headers.get("Authorization")
    if auth_header and auth_header.startswith("Bearer "):
        return auth_header[len("Bearer ") :].strip() or None
    return None


async def get_current_user(request: Request) -> UserContext:
    token = bearer_token(request)
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated"
        )
    try:
        return resolve_session(token)
    except AuthenticationError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail=e.message
        ) from e


async def require_verified(user: UserContext = Depends(get_current_user)) -> UserContext:
    """Unverified accounts wait on the pending approval screen."""
    if not user.verified:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Your account is pending approval",
        )
    return user


def require_role(*roles: str) -> Callable:
    """Dependency factory: verified user holding any of the roles.

    Admins pass every role check.
    """

    async def checker(user: UserContext = Depends(require_verified)) -> UserContext:
        if user.is_admin or any(user.has_role(role) for role in roles):
            return user
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"{' or '.join(r.capitalize() for r in roles)} access required",
        )

    return checker


require_admin = require_role("admin")
require_instructor = require_role("instructor")
require_student = require_role("student")
