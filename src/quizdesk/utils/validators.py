"""Input validation helpers for account forms.

Rules:
- email: trimmed, checked by email-validator, at most 255 characters
- password: 6-100 characters on sign-up, 1-100 on sign-in
- full name: trimmed, 1-100 characters
- self-assignable roles: instructor, student
"""

from pydantic.networks import validate_email as parse_email
from pydantic_core import PydanticCustomError

from quizdesk.core.errors import ValidationError

SIGNUP_ROLES = ("instructor", "student")
ALL_ROLES = ("admin", "instructor", "student")


def validate_email(email: str) -> str:
    """Validate and normalize an email address.

    Returns:
        The trimmed email with its domain normalized

    Raises:
        ValidationError: If the format is invalid or it is too long
    """
    email = email.strip()
    if len(email) > 255:
        raise ValidationError("Email must be less than 255 characters")
    try:
        _, email = parse_email(email)
    except PydanticCustomError as e:
        raise ValidationError("Please enter a valid email address") from e
    return email


def validate_password(password: str, min_length: int = 6) -> str:
    """Validate password length.

    Args:
        password: Raw password
        min_length: 6 for sign-up, 1 for sign-in
    """
    if len(password) < min_length:
        if min_length <= 1:
            raise ValidationError("Password is required")
        raise ValidationError(f"Password must be at least {min_length} characters")
    if len(password) > 100:
        raise ValidationError("Password must be less than 100 characters")
    return password


def validate_full_name(full_name: str) -> str:
    """Validate and trim a display name."""
    full_name = full_name.strip()
    if not full_name:
        raise ValidationError("Full name is required")
    if len(full_name) > 100:
        raise ValidationError("Full name must be less than 100 characters")
    return full_name


def validate_signup_role(role: str) -> str:
    """Only instructor and student may be chosen at sign-up."""
    if role not in SIGNUP_ROLES:
        raise ValidationError("Please select a role")
    return role
