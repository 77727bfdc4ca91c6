"""Seed the accounts database with an admin and/or sample users.

Usage:
  python scripts/seed.py admin   # create admin@example.com
  python scripts/seed.py users   # create five sample users (one inactive)
  python scripts/seed.py all

NOTE: This is intended for local/dev. Existing emails are left untouched.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from psycopg_pool import ConnectionPool

from app.config import get_settings
from app.domain.account import AccountStatus, Role
from app.domain.contracts import ProvisionAccountInput
from app.domain.errors import Conflict
from app.domain.service import AccountService
from app.repository import AccountRepository
from app.security.passwords import PasswordHasher
from app.security.tokens import TokenService

logger = logging.getLogger("seed")

ADMIN = ProvisionAccountInput(
    full_name="Admin User",
    email="admin@example.com",
    password="Admin@123456",
    role=Role.admin,
)

SAMPLE_PASSWORD = "Password123!"
SAMPLE_USERS = [
    ("Alice Johnson", "alice@example.com", AccountStatus.active),
    ("Bob Smith", "bob@example.com", AccountStatus.active),
    ("Charlie Brown", "charlie@example.com", AccountStatus.inactive),
    ("Diana Prince", "diana@example.com", AccountStatus.active),
    ("Eve Wilson", "eve@example.com", AccountStatus.active),
]


def seed_accounts(service: AccountService, payloads: list[ProvisionAccountInput]) -> int:
    """Provision each payload, skipping emails that already exist; return how many were created."""
    created = 0
    for payload in payloads:
        try:
            service.provision_account(payload)
        except Conflict:
            logger.info("account already exists: %s", payload.email)
            continue
        logger.info("created %s account: %s", payload.role.value, payload.email)
        created += 1
    return created


def payloads_for(command: str) -> list[ProvisionAccountInput]:
    payloads: list[ProvisionAccountInput] = []
    if command in ("admin", "all"):
        payloads.append(ADMIN)
    if command in ("users", "all"):
        payloads.extend(
            ProvisionAccountInput(full_name=name, email=email, password=SAMPLE_PASSWORD, status=status)
            for name, email, status in SAMPLE_USERS
        )
    return payloads


def main() -> None:
    ap = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    ap.add_argument("command", choices=["admin", "users", "all"])
    args = ap.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    settings = get_settings()

    with ConnectionPool(settings.database_url) as pool:
        repository = AccountRepository(pool)
        repository.ensure_schema()
        service = AccountService(
            repository,
            PasswordHasher(settings.password_hash_rounds),
            TokenService(
                secret=settings.jwt_secret,
                ttl_seconds=settings.jwt_ttl_seconds,
                issuer=settings.jwt_issuer,
            ),
        )
        created = seed_accounts(service, payloads_for(args.command))

    print(f"Created {created} account(s).")
    if args.command in ("admin", "all"):
        print(f"Admin login: {ADMIN.email} / {ADMIN.password} (change it after first login)")


if __name__ == "__main__":
    main()
