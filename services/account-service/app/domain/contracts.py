"""Domain-level request contracts shared by multiple layers."""

from __future__ import annotations

from dataclasses import dataclass

from .account import Account, AccountStatus, Role


@dataclass(slots=True)
class SignupInput:
    """Raw signup fields; normalised and validated by the service."""

    full_name: str
    email: str
    password: str


@dataclass(slots=True)
class LoginInput:
    email: str
    password: str


@dataclass(slots=True)
class ProvisionAccountInput:
    """Privileged account creation, the only path that may assign ``admin``."""

    full_name: str
    email: str
    password: str
    role: Role = Role.user
    status: AccountStatus = AccountStatus.active


@dataclass(slots=True)
class UpdateProfileInput:
    full_name: str | None = None
    email: str | None = None


@dataclass(slots=True)
class ChangePasswordInput:
    current_password: str
    new_password: str


@dataclass(slots=True)
class NewAccountRecord:
    """Validated values handed to the repository for insertion."""

    full_name: str
    email: str
    password_hash: str
    role: Role = Role.user
    status: AccountStatus = AccountStatus.active


@dataclass(slots=True)
class AuthResult:
    """An account together with a freshly issued bearer token."""

    account: Account
    token: str
    expires_in: int


@dataclass(slots=True)
class AccountPage:
    accounts: list[Account]
    page: int
    limit: int
    total: int

    @property
    def total_pages(self) -> int:
        return (self.total + self.limit - 1) // self.limit
