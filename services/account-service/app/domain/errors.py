"""Error taxonomy raised by the account domain and mapped to HTTP by the API layer."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class FieldError:
    field: str
    message: str


class AccountError(Exception):
    """Base class for expected, client-facing failures."""

    status_code: int = 400
    default_message: str = "Request failed"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AccountError):
    status_code = 400
    default_message = "Validation failed"

    def __init__(self, errors: list[FieldError], message: str | None = None) -> None:
        super().__init__(message)
        self.errors = list(errors)

    @classmethod
    def single(cls, field: str, message: str) -> "ValidationError":
        return cls([FieldError(field, message)])


class Unauthorized(AccountError):
    status_code = 401
    default_message = "Not authorized to access this route"


class InvalidCredentials(Unauthorized):
    default_message = "Invalid email or password"


class Forbidden(AccountError):
    status_code = 403
    default_message = "You do not have permission to perform this action"


class NotFound(AccountError):
    status_code = 404
    default_message = "Not found"


class Conflict(AccountError):
    status_code = 409
    default_message = "Conflict"


class InvalidOperation(AccountError):
    status_code = 400
    default_message = "Invalid operation"


class InternalError(AccountError):
    status_code = 500
    default_message = "Server error"
