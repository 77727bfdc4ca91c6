"""Input normalisation and validation rules for account fields."""

from __future__ import annotations

import string

from email_validator import EmailNotValidError, validate_email

from .errors import FieldError

FULL_NAME_MIN = 2
FULL_NAME_MAX = 100
PASSWORD_MIN_LENGTH = 8
PASSWORD_MAX_LENGTH = 128
PASSWORD_SYMBOLS = "@$!%*?&"


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def normalize_full_name(full_name: str) -> str:
    return (full_name or "").strip()


def full_name_errors(full_name: str, field: str = "fullName") -> list[FieldError]:
    """Validate an already-trimmed full name."""
    if not full_name:
        return [FieldError(field, "Full name is required")]
    if len(full_name) < FULL_NAME_MIN:
        return [FieldError(field, f"Full name must be at least {FULL_NAME_MIN} characters")]
    if len(full_name) > FULL_NAME_MAX:
        return [FieldError(field, f"Full name cannot exceed {FULL_NAME_MAX} characters")]
    return []


def email_errors(email: str, field: str = "email") -> list[FieldError]:
    """Validate an already-normalised email address."""
    if not email:
        return [FieldError(field, "Email is required")]
    try:
        validate_email(email, check_deliverability=False)
    except EmailNotValidError:
        return [FieldError(field, "Please provide a valid email address")]
    return []


def password_errors(password: str, field: str = "password") -> list[FieldError]:
    """Return one error per strength rule the password fails."""
    if not password:
        return [FieldError(field, "Password is required")]
    if len(password) > PASSWORD_MAX_LENGTH:
        return [FieldError(field, f"Password cannot exceed {PASSWORD_MAX_LENGTH} characters")]

    errors: list[FieldError] = []
    if len(password) < PASSWORD_MIN_LENGTH:
        errors.append(
            FieldError(field, f"Password must be at least {PASSWORD_MIN_LENGTH} characters long")
        )
    if not any(ch in string.ascii_lowercase for ch in password):
        errors.append(FieldError(field, "Password must contain at least one lowercase letter"))
    if not any(ch in string.ascii_uppercase for ch in password):
        errors.append(FieldError(field, "Password must contain at least one uppercase letter"))
    if not any(ch in string.digits for ch in password):
        errors.append(FieldError(field, "Password must contain at least one number"))
    if not any(ch in PASSWORD_SYMBOLS for ch in password):
        errors.append(
            FieldError(
                field,
                f"Password must contain at least one special character ({PASSWORD_SYMBOLS})",
            )
        )
    return errors
