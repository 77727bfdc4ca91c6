"""Request authentication and authorization pipeline.

A protected request runs through an ordered sequence of stages. Each stage
takes an :class:`AuthContext` and returns an updated copy, or raises an
:class:`~app.domain.errors.AccountError` to stop the request:

1. ``extract_bearer``  - ``Authorization: Bearer <token>`` must be present.
2. ``verify_token``    - signature/structure/expiry; no database access yet.
3. ``resolve_account`` - the subject must still exist.
4. ``require_active``  - inactive accounts are forbidden, not unauthorized.
5. ``require_role``    - optional role gate.
6. ``admit``           - strip the password hash before handing the account on.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Callable, Iterable, Protocol, Sequence

from fastapi import Request

from ..domain.account import Account, Role
from ..domain.errors import Forbidden, InternalError, Unauthorized
from .tokens import InvalidToken, TokenService

logger = logging.getLogger(__name__)

NOT_AUTHORIZED = "Not authorized to access this route"
INVALID_TOKEN = "Invalid or expired token"
ACCOUNT_NOT_FOUND = "User not found"
ACCOUNT_INACTIVE = "Your account has been deactivated. Please contact admin."
ROLE_DENIED = "You do not have permission to perform this action"


class AccountLookup(Protocol):
    def get_account(self, account_id: str) -> Account | None: ...


@dataclass(frozen=True, slots=True)
class AuthContext:
    authorization: str | None
    token: str | None = None
    subject: str | None = None
    account: Account | None = None


Stage = Callable[[AuthContext], AuthContext]


def extract_bearer(ctx: AuthContext) -> AuthContext:
    header = (ctx.authorization or "").strip()
    scheme, _, token = header.partition(" ")
    token = token.strip()
    if scheme.lower() != "bearer" or not token:
        raise Unauthorized(NOT_AUTHORIZED)
    return replace(ctx, token=token)


def verify_token(tokens: TokenService) -> Stage:
    def stage(ctx: AuthContext) -> AuthContext:
        try:
            subject = tokens.verify(ctx.token or "")
        except InvalidToken as exc:
            raise Unauthorized(INVALID_TOKEN) from exc
        return replace(ctx, subject=subject)

    return stage


def resolve_account(accounts: AccountLookup) -> Stage:
    def stage(ctx: AuthContext) -> AuthContext:
        account = accounts.get_account(ctx.subject or "")
        if account is None:
            logger.info("token subject %s no longer resolves to an account", ctx.subject)
            raise Unauthorized(ACCOUNT_NOT_FOUND)
        return replace(ctx, account=account)

    return stage


def _resolved(ctx: AuthContext) -> Account:
    if ctx.account is None:
        # a stage ran before resolve_account
        raise InternalError()
    return ctx.account


def require_active(ctx: AuthContext) -> AuthContext:
    if not _resolved(ctx).status.is_active:
        raise Forbidden(ACCOUNT_INACTIVE)
    return ctx


def require_role(roles: Iterable[Role]) -> Stage:
    allowed = frozenset(roles)

    def stage(ctx: AuthContext) -> AuthContext:
        if _resolved(ctx).role not in allowed:
            raise Forbidden(ROLE_DENIED)
        return ctx

    return stage


def admit(ctx: AuthContext) -> AuthContext:
    return replace(ctx, account=_resolved(ctx).redacted())


class AuthGuard:
    """Runs the fixed authentication stages plus an optional role gate."""

    def __init__(
        self,
        tokens: TokenService,
        accounts: AccountLookup,
        roles: Iterable[Role] | None = None,
    ) -> None:
        stages: list[Stage] = [
            extract_bearer,
            verify_token(tokens),
            resolve_account(accounts),
            require_active,
        ]
        if roles is not None:
            stages.append(require_role(roles))
        stages.append(admit)
        self._stages: Sequence[Stage] = tuple(stages)

    def authenticate(self, authorization: str | None) -> Account:
        """Return the admitted account for an ``Authorization`` header value."""
        ctx = AuthContext(authorization=authorization)
        for stage in self._stages:
            ctx = stage(ctx)
        return _resolved(ctx)


def _guard_for(request: Request, roles: Iterable[Role] | None) -> AuthGuard:
    return AuthGuard(request.app.state.token_service, request.app.state.account_repository, roles)


def get_current_account(request: Request) -> Account:
    """FastAPI dependency admitting any active, authenticated account."""
    return _guard_for(request, None).authenticate(request.headers.get("Authorization"))


def require_roles(*roles: Role) -> Callable[..., Account]:
    """Build a FastAPI dependency that also requires one of ``roles``."""

    def dependency(request: Request) -> Account:
        return _guard_for(request, roles).authenticate(request.headers.get("Authorization"))

    return dependency


require_admin = require_roles(Role.admin)
