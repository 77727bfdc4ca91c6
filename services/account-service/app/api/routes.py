"""HTTP route definitions for the account service."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Request, status
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from schemas import Account as AccountOut
from schemas import AccountList, AuthPayload, Envelope, Pagination

from ..domain.account import Account
from ..domain.contracts import (
    AuthResult,
    ChangePasswordInput,
    LoginInput,
    SignupInput,
    UpdateProfileInput,
)
from ..domain.service import DEFAULT_PAGE_SIZE, AccountService
from ..security.guard import get_current_account, require_admin

auth_router = APIRouter(prefix="/api/auth", tags=["auth"])
users_router = APIRouter(prefix="/api/users", tags=["users"])
admin_router = APIRouter(prefix="/api/admin", tags=["admin"])


class RequestModel(BaseModel):
    """Inbound JSON body; camelCase keys, unknown keys rejected."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")


class SignupRequest(RequestModel):
    full_name: str
    email: str
    password: str


class LoginRequest(RequestModel):
    email: str
    password: str


class UpdateProfileRequest(RequestModel):
    full_name: str | None = None
    email: str | None = None


class ChangePasswordRequest(RequestModel):
    current_password: str
    new_password: str


def get_service(request: Request) -> AccountService:
    """Resolve the `AccountService` stored on the FastAPI application state."""
    service: AccountService = request.app.state.account_service
    return service


def account_out(account: Account) -> AccountOut:
    """Build the public representation of an account (never includes the hash)."""
    return AccountOut(
        id=account.account_id,
        full_name=account.full_name,
        email=account.email,
        role=account.role.value,
        status=account.status.value,
        last_login_at=account.last_login_at,
        created_at=account.created_at,
    )


def ok(data: BaseModel | None = None, message: str | None = None) -> Envelope:
    return Envelope(
        success=True,
        message=message,
        data=data.model_dump(mode="json", by_alias=True) if data is not None else None,
    )


def _auth_payload(result: AuthResult) -> AuthPayload:
    return AuthPayload(user=account_out(result.account), token=result.token, expires_in=result.expires_in)


def _int_param(value: str | None, default: int) -> int:
    # unparsable query values fall back like missing ones
    try:
        return int(value) if value is not None else default
    except ValueError:
        return default


class UserData(BaseModel):
    user: AccountOut


@auth_router.post(
    "/signup",
    response_model=Envelope,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
)
def signup(payload: SignupRequest, service: AccountService = Depends(get_service)) -> Envelope:
    """Register a new account and return it with a bearer token."""
    result = service.signup(
        SignupInput(full_name=payload.full_name, email=payload.email, password=payload.password)
    )
    return ok(_auth_payload(result), "User registered successfully")


@auth_router.post("/login", response_model=Envelope, response_model_exclude_none=True)
def login(payload: LoginRequest, service: AccountService = Depends(get_service)) -> Envelope:
    result = service.login(LoginInput(email=payload.email, password=payload.password))
    return ok(_auth_payload(result), "Login successful")


@auth_router.get("/me", response_model=Envelope, response_model_exclude_none=True)
def me(account: Account = Depends(get_current_account)) -> Envelope:
    return ok(UserData(user=account_out(account)))


@auth_router.post("/logout", response_model=Envelope, response_model_exclude_none=True)
def logout(
    account: Account = Depends(get_current_account),
    service: AccountService = Depends(get_service),
) -> Envelope:
    """Acknowledge logout; the client is responsible for discarding its token."""
    service.logout(account)
    return ok(message="Logged out successfully")


@users_router.get("/profile", response_model=Envelope, response_model_exclude_none=True)
def get_profile(
    account: Account = Depends(get_current_account),
    service: AccountService = Depends(get_service),
) -> Envelope:
    return ok(UserData(user=account_out(service.get_profile(account.account_id))))


@users_router.put("/profile", response_model=Envelope, response_model_exclude_none=True)
def update_profile(
    payload: UpdateProfileRequest,
    account: Account = Depends(get_current_account),
    service: AccountService = Depends(get_service),
) -> Envelope:
    """Update the caller's full name and/or email."""
    updated = service.update_profile(
        account.account_id,
        UpdateProfileInput(full_name=payload.full_name, email=payload.email),
    )
    return ok(UserData(user=account_out(updated)), "Profile updated successfully")


@users_router.put("/change-password", response_model=Envelope, response_model_exclude_none=True)
def change_password(
    payload: ChangePasswordRequest,
    account: Account = Depends(get_current_account),
    service: AccountService = Depends(get_service),
) -> Envelope:
    service.change_password(
        account.account_id,
        ChangePasswordInput(
            current_password=payload.current_password,
            new_password=payload.new_password,
        ),
    )
    return ok(message="Password changed successfully")


@admin_router.get("/users", response_model=Envelope, response_model_exclude_none=True)
def list_users(
    page: str | None = Query(default=None),
    limit: str | None = Query(default=None),
    admin: Account = Depends(require_admin),
    service: AccountService = Depends(get_service),
) -> Envelope:
    """Return a newest-first page of all accounts."""
    result = service.list_accounts(
        page=_int_param(page, 1),
        limit=_int_param(limit, DEFAULT_PAGE_SIZE),
    )
    return ok(
        AccountList(
            users=[account_out(account) for account in result.accounts],
            pagination=Pagination(
                current_page=result.page,
                total_pages=result.total_pages,
                total_users=result.total,
                users_per_page=result.limit,
            ),
        )
    )


@admin_router.put("/users/{account_id}/activate", response_model=Envelope, response_model_exclude_none=True)
def activate_user(
    account_id: str,
    admin: Account = Depends(require_admin),
    service: AccountService = Depends(get_service),
) -> Envelope:
    updated = service.activate_account(admin, account_id)
    return ok(UserData(user=account_out(updated)), "User activated successfully")


@admin_router.put("/users/{account_id}/deactivate", response_model=Envelope, response_model_exclude_none=True)
def deactivate_user(
    account_id: str,
    admin: Account = Depends(require_admin),
    service: AccountService = Depends(get_service),
) -> Envelope:
    updated = service.deactivate_account(admin, account_id)
    return ok(UserData(user=account_out(updated)), "User deactivated successfully")


routers = (auth_router, users_router, admin_router)
