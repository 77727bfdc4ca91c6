from __future__ import annotations

import uuid
from dataclasses import replace
from datetime import datetime, timedelta, timezone

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.api.errors import install_error_handlers
from app.api.routes import routers
from app.config import Settings
from app.domain.account import Account, AccountStatus, Role
from app.domain.contracts import NewAccountRecord, ProvisionAccountInput
from app.domain.errors import Conflict
from app.domain.service import AccountService
from app.main import wire_services
from app.security.passwords import PasswordHasher
from app.security.tokens import TokenService

TEST_SETTINGS = Settings(
    jwt_secret="test-secret",
    jwt_issuer="accounts.test",
    jwt_ttl_seconds=3600,
    password_hash_rounds=1000,
)

ADMIN_PASSWORD = "Admin@123456"
USER_PASSWORD = "Secret1!"


class FakeRepository:
    """In-memory repository mimicking Postgres-backed behaviors."""

    def __init__(self) -> None:
        self._accounts: dict[str, Account] = {}
        self._clock = datetime(2024, 1, 1, tzinfo=timezone.utc)
        self.lookups = 0

    def _now(self) -> datetime:
        # strictly increasing so newest-first ordering is deterministic
        self._clock += timedelta(seconds=1)
        return self._clock

    def _email_owner(self, email: str) -> Account | None:
        for account in self._accounts.values():
            if account.email.lower() == email.lower():
                return account
        return None

    def create_account(self, record: NewAccountRecord) -> Account:
        if self._email_owner(record.email) is not None:
            raise Conflict("Email is already registered")
        now = self._now()
        account = Account(
            account_id=str(uuid.uuid4()),
            full_name=record.full_name,
            email=record.email,
            password_hash=record.password_hash,
            role=record.role,
            status=record.status,
            created_at=now,
            updated_at=now,
        )
        self._accounts[account.account_id] = account
        return account

    def get_account(self, account_id: str) -> Account | None:
        self.lookups += 1
        return self._accounts.get(account_id)

    def find_by_email(self, email: str) -> Account | None:
        return self._email_owner(email)

    def update_profile(self, account_id, *, full_name=None, email=None):
        account = self._accounts.get(account_id)
        if account is None:
            return None
        if email is not None:
            owner = self._email_owner(email)
            if owner is not None and owner.account_id != account_id:
                raise Conflict("Email is already registered")
        updated = replace(
            account,
            full_name=full_name if full_name is not None else account.full_name,
            email=email if email is not None else account.email,
            updated_at=self._now(),
        )
        self._accounts[account_id] = updated
        return updated

    def update_password_hash(self, account_id: str, password_hash: str):
        return self._update(account_id, password_hash=password_hash)

    def touch_last_login(self, account_id: str):
        return self._update(account_id, last_login_at=datetime.now(timezone.utc))

    def set_status(self, account_id: str, status: AccountStatus):
        account = self._accounts.get(account_id)
        if account is None or account.status is status:
            return None
        return self._update(account_id, status=status)

    def list_accounts(self, *, offset: int, limit: int):
        ordered = sorted(self._accounts.values(), key=lambda a: a.created_at, reverse=True)
        return ordered[offset : offset + limit], len(ordered)

    def _update(self, account_id: str, **changes):
        account = self._accounts.get(account_id)
        if account is None:
            return None
        updated = replace(account, updated_at=self._now(), **changes)
        self._accounts[account_id] = updated
        return updated


@pytest.fixture
def repository() -> FakeRepository:
    return FakeRepository()


@pytest.fixture
def hasher() -> PasswordHasher:
    return PasswordHasher(TEST_SETTINGS.password_hash_rounds)


@pytest.fixture
def tokens() -> TokenService:
    return TokenService(
        secret=TEST_SETTINGS.jwt_secret,
        ttl_seconds=TEST_SETTINGS.jwt_ttl_seconds,
        issuer=TEST_SETTINGS.jwt_issuer,
    )


@pytest.fixture
def service(repository, hasher, tokens) -> AccountService:
    return AccountService(repository, hasher, tokens)


@pytest.fixture
def api_client(repository):
    """Provide a FastAPI test client with isolated state."""
    app = FastAPI()
    for router in routers:
        app.include_router(router)
    install_error_handlers(app)
    service = wire_services(app, repository, TEST_SETTINGS)

    with TestClient(app) as client:
        yield client, service


@pytest.fixture
def admin(service) -> Account:
    return service.provision_account(
        ProvisionAccountInput(
            full_name="Admin User",
            email="admin@example.com",
            password=ADMIN_PASSWORD,
            role=Role.admin,
        )
    )


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}
