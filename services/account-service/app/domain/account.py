from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum


class Role(str, Enum):
    user = "user"
    admin = "admin"


class AccountStatus(str, Enum):
    active = "active"
    inactive = "inactive"

    @property
    def is_active(self) -> bool:
        if self is AccountStatus.active:
            return True
        if self is AccountStatus.inactive:
            return False
        raise AssertionError(f"unhandled account status: {self!r}")


@dataclass(slots=True)
class Account:
    """Aggregate root for a user account."""

    account_id: str
    full_name: str
    email: str
    created_at: datetime
    updated_at: datetime
    role: Role = Role.user
    status: AccountStatus = AccountStatus.active
    last_login_at: datetime | None = None
    password_hash: str | None = field(default=None, repr=False)

    def redacted(self) -> "Account":
        """Return a copy safe to hand to request handlers (no password hash)."""
        return replace(self, password_hash=None)
