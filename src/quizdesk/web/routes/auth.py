"""Sign-up, sign-in and session endpoints."""

from fastapi import APIRouter, Depends, Request, status

from quizdesk.core import accounts
from quizdesk.core.accounts import UserContext
from quizdesk.web.deps import bearer_token, get_current_user
from quizdesk.web.schemas import (
    SignInRequest,
    SignInResponse,
    SignUpRequest,
    SuccessResponse,
    UserResponse,
)

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/signup", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def sign_up(body: SignUpRequest) -> UserResponse:
    """Register an instructor or student; an admin must approve them."""
    user = accounts.sign_up(body.email, body.password, body.full_name, body.role)
    return UserResponse.model_validate(user)


@router.post("/signin", response_model=SignInResponse)
async def sign_in(body: SignInRequest) -> SignInResponse:
    result = accounts.sign_in(body.email, body.password)
    return SignInResponse.model_validate(result)


@router.post("/signout", response_model=SuccessResponse)
async def sign_out(request: Request) -> SuccessResponse:
    token = bearer_token(request)
    if token:
        accounts.sign_out(token)
    return SuccessResponse()


@router.get("/me", response_model=UserResponse)
async def me(user: UserContext = Depends(get_current_user)) -> UserResponse:
    """Current user, including unverified ones."""
    return UserResponse.model_validate(user)
