"""Account service orchestrating validation, persistence, hashing and token issuance."""

from __future__ import annotations

import logging
from typing import Protocol, Tuple

from .account import Account, AccountStatus, Role
from .contracts import (
    AccountPage,
    AuthResult,
    ChangePasswordInput,
    LoginInput,
    NewAccountRecord,
    ProvisionAccountInput,
    SignupInput,
    UpdateProfileInput,
)
from .errors import (
    Conflict,
    FieldError,
    Forbidden,
    InternalError,
    InvalidCredentials,
    InvalidOperation,
    NotFound,
    Unauthorized,
    ValidationError,
)
from .validation import (
    email_errors,
    full_name_errors,
    normalize_email,
    normalize_full_name,
    password_errors,
)
from ..security.passwords import PasswordHasher
from ..security.tokens import TokenService

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


class AccountStore(Protocol):
    def create_account(self, record: NewAccountRecord) -> Account: ...

    def get_account(self, account_id: str) -> Account | None: ...

    def find_by_email(self, email: str) -> Account | None: ...

    def update_profile(
        self, account_id: str, *, full_name: str | None = None, email: str | None = None
    ) -> Account | None: ...

    def update_password_hash(self, account_id: str, password_hash: str) -> Account | None: ...

    def touch_last_login(self, account_id: str) -> Account | None: ...

    def set_status(self, account_id: str, status: AccountStatus) -> Account | None: ...

    def list_accounts(self, *, offset: int, limit: int) -> Tuple[list[Account], int]: ...


class AccountService:
    """Account workflows: signup, login, profile self-service and admin status changes."""

    def __init__(
        self,
        repository: AccountStore,
        hasher: PasswordHasher,
        tokens: TokenService,
    ) -> None:
        """Store dependencies used to orchestrate persistence, hashing and token issuance."""
        self._repository = repository
        self._hasher = hasher
        self._tokens = tokens

    def signup(self, payload: SignupInput) -> AuthResult:
        """Register a regular ``user`` account and issue its first token."""
        account = self._create(
            ProvisionAccountInput(
                full_name=payload.full_name,
                email=payload.email,
                password=payload.password,
            )
        )
        logger.info("account %s signed up", account.account_id)
        return self._authenticated(account)

    def provision_account(self, payload: ProvisionAccountInput) -> Account:
        """Create an account with an explicit role and status (operator tooling only)."""
        account = self._create(payload)
        logger.info(
            "account %s provisioned with role=%s status=%s",
            account.account_id,
            account.role.value,
            account.status.value,
        )
        return account

    def login(self, payload: LoginInput) -> AuthResult:
        """Verify credentials and issue a token.

        Unknown emails and wrong passwords raise the same ``InvalidCredentials``
        error. The active-status check only runs once the password has verified.
        """
        email = normalize_email(payload.email)
        account = self._repository.find_by_email(email) if email else None
        if account is None or not self._hasher.verify(payload.password, account.password_hash):
            logger.info("login rejected: invalid credentials")
            raise InvalidCredentials()
        if not account.status.is_active:
            logger.info("login rejected for inactive account %s", account.account_id)
            raise Forbidden("Your account has been deactivated. Please contact admin.")

        updated = self._repository.touch_last_login(account.account_id)
        if updated is None:
            raise InternalError()
        logger.info("account %s logged in", account.account_id)
        return self._authenticated(updated)

    def logout(self, account: Account) -> None:
        """Acknowledge a logout; tokens are stateless and simply discarded by the client."""
        logger.info("account %s logged out", account.account_id)

    def get_profile(self, account_id: str) -> Account:
        account = self._repository.get_account(account_id)
        if account is None:
            raise NotFound("User not found")
        return account.redacted()

    def update_profile(self, account_id: str, payload: UpdateProfileInput) -> Account:
        """Change the caller's full name and/or email; nothing else is writable here."""
        if payload.full_name is None and payload.email is None:
            raise ValidationError.single("fullName", "Provide a full name or email to update")

        full_name = normalize_full_name(payload.full_name) if payload.full_name is not None else None
        email = normalize_email(payload.email) if payload.email is not None else None

        errors: list[FieldError] = []
        if full_name is not None:
            errors.extend(full_name_errors(full_name))
        if email is not None:
            errors.extend(email_errors(email))
        if errors:
            raise ValidationError(errors)

        if email is not None:
            owner = self._repository.find_by_email(email)
            if owner is not None and owner.account_id != account_id:
                raise Conflict("Email is already in use")

        updated = self._repository.update_profile(account_id, full_name=full_name, email=email)
        if updated is None:
            raise NotFound("User not found")
        logger.info("account %s updated its profile", account_id)
        return updated.redacted()

    def change_password(self, account_id: str, payload: ChangePasswordInput) -> None:
        account = self._repository.get_account(account_id)
        if account is None:
            raise NotFound("User not found")
        if not self._hasher.verify(payload.current_password, account.password_hash):
            raise Unauthorized("Current password is incorrect")

        errors = password_errors(payload.new_password, field="newPassword")
        if errors:
            raise ValidationError(errors)
        if payload.new_password == payload.current_password:
            raise ValidationError.single(
                "newPassword", "New password must be different from the current password"
            )

        if self._repository.update_password_hash(account_id, self._hasher.hash(payload.new_password)) is None:
            raise NotFound("User not found")
        logger.info("account %s changed its password", account_id)

    def list_accounts(self, page: int = 1, limit: int = DEFAULT_PAGE_SIZE) -> AccountPage:
        """Return one newest-first page of accounts.

        A non-positive ``page`` or ``limit`` falls back to the default and
        ``limit`` is capped at ``MAX_PAGE_SIZE``.
        """
        page = page if page >= 1 else 1
        limit = min(limit, MAX_PAGE_SIZE) if limit >= 1 else DEFAULT_PAGE_SIZE

        accounts, total = self._repository.list_accounts(offset=(page - 1) * limit, limit=limit)
        return AccountPage(
            accounts=[account.redacted() for account in accounts],
            page=page,
            limit=limit,
            total=total,
        )

    def activate_account(self, actor: Account, target_id: str) -> Account:
        return self._set_status(actor, target_id, AccountStatus.active)

    def deactivate_account(self, actor: Account, target_id: str) -> Account:
        return self._set_status(actor, target_id, AccountStatus.inactive)

    def _set_status(self, actor: Account, target_id: str, status: AccountStatus) -> Account:
        target = self._repository.get_account(target_id)
        if target is None:
            raise NotFound("User not found")
        if actor.role is not Role.admin:
            raise Forbidden("You do not have permission to perform this action")
        if target.account_id == actor.account_id:
            raise InvalidOperation("You cannot change your own account status")
        if target.status is status:
            raise Conflict(f"User is already {status.value}")

        updated = self._repository.set_status(target_id, status)
        if updated is None:
            # lost a race with a concurrent identical change
            raise Conflict(f"User is already {status.value}")
        logger.info(
            "admin %s set account %s status to %s",
            actor.account_id,
            target_id,
            status.value,
        )
        return updated.redacted()

    def _create(self, payload: ProvisionAccountInput) -> Account:
        full_name = normalize_full_name(payload.full_name)
        email = normalize_email(payload.email)
        errors = [
            *full_name_errors(full_name),
            *email_errors(email),
            *password_errors(payload.password),
        ]
        if errors:
            raise ValidationError(errors)

        if self._repository.find_by_email(email) is not None:
            raise Conflict("Email is already registered")

        return self._repository.create_account(
            NewAccountRecord(
                full_name=full_name,
                email=email,
                password_hash=self._hasher.hash(payload.password),
                role=payload.role,
                status=payload.status,
            )
        )

    def _authenticated(self, account: Account) -> AuthResult:
        issued = self._tokens.issue(account.account_id)
        return AuthResult(account=account.redacted(), token=issued.token, expires_in=issued.expires_in)
