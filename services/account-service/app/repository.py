"""Database repository for account data."""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Tuple

from psycopg import errors
from psycopg.rows import tuple_row
from psycopg_pool import ConnectionPool

from .domain.account import Account, AccountStatus, Role
from .domain.contracts import NewAccountRecord
from .domain.errors import Conflict

logger = logging.getLogger(__name__)

EMAIL_TAKEN = "Email is already registered"

_COLUMNS = """
    account_id, full_name, email, password_hash, role, status,
    last_login_at, created_at, updated_at
"""

_SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS accounts (
        account_id    TEXT PRIMARY KEY,
        full_name     TEXT NOT NULL,
        email         TEXT NOT NULL,
        password_hash TEXT NOT NULL,
        role          TEXT NOT NULL DEFAULT 'user' CHECK (role IN ('user', 'admin')),
        status        TEXT NOT NULL DEFAULT 'active' CHECK (status IN ('active', 'inactive')),
        last_login_at TIMESTAMPTZ,
        created_at    TIMESTAMPTZ NOT NULL,
        updated_at    TIMESTAMPTZ NOT NULL
    )
    """,
    "CREATE UNIQUE INDEX IF NOT EXISTS accounts_email_key ON accounts (lower(email))",
    "CREATE INDEX IF NOT EXISTS accounts_created_at_idx ON accounts (created_at DESC)",
)


class AccountRepository:
    """Postgres-backed account persistence."""

    def __init__(self, pool: ConnectionPool) -> None:
        """Store the connection pool used for all database interactions."""
        self._pool = pool

    def ensure_schema(self) -> None:
        """Create the accounts table and its indexes when missing."""
        with self._pool.connection() as conn:
            with conn.cursor() as cur:
                for statement in _SCHEMA:
                    cur.execute(statement)
            conn.commit()
        logger.info("accounts schema ensured")

    def create_account(self, record: NewAccountRecord) -> Account:
        """Insert a new account; a duplicate email raises ``Conflict``."""
        account_id = str(uuid.uuid4())
        now = datetime.now(timezone.utc)
        try:
            with self._pool.connection() as conn:
                with conn.cursor(row_factory=tuple_row) as cur:
                    cur.execute(
                        f"""
                        INSERT INTO accounts (account_id, full_name, email, password_hash, role, status, created_at, updated_at)
                        VALUES (%s, %s, %s, %s, %s, %s, %s, %s)
                        RETURNING {_COLUMNS}
                        """,
                        (
                            account_id,
                            record.full_name,
                            record.email,
                            record.password_hash,
                            record.role.value,
                            record.status.value,
                            now,
                            now,
                        ),
                    )
                    row = cur.fetchone()
                conn.commit()
        except errors.UniqueViolation as exc:
            raise Conflict(EMAIL_TAKEN) from exc
        return self._map_record(row)

    def get_account(self, account_id: str) -> Account | None:
        """Fetch an account by id or return ``None``."""
        return self._fetch_one(f"SELECT {_COLUMNS} FROM accounts WHERE account_id = %s", (account_id,))

    def find_by_email(self, email: str) -> Account | None:
        """Fetch an account by its (already normalised) email."""
        return self._fetch_one(
            f"SELECT {_COLUMNS} FROM accounts WHERE lower(email) = lower(%s)",
            (email,),
        )

    def update_profile(
        self,
        account_id: str,
        *,
        full_name: str | None = None,
        email: str | None = None,
    ) -> Account | None:
        """Update only the provided profile fields."""
        fields: list[tuple[str, Any]] = []
        if full_name is not None:
            fields.append(("full_name", full_name))
        if email is not None:
            fields.append(("email", email))
        if not fields:
            return self.get_account(account_id)
        try:
            return self._update(account_id, fields)
        except errors.UniqueViolation as exc:
            raise Conflict(EMAIL_TAKEN) from exc

    def update_password_hash(self, account_id: str, password_hash: str) -> Account | None:
        return self._update(account_id, [("password_hash", password_hash)])

    def touch_last_login(self, account_id: str, at: datetime | None = None) -> Account | None:
        return self._update(account_id, [("last_login_at", at or datetime.now(timezone.utc))])

    def set_status(self, account_id: str, status: AccountStatus) -> Account | None:
        """Move an account to ``status``.

        The write only happens when the stored status differs, so ``None`` means
        either the account is missing or it already held ``status``.
        """
        now = datetime.now(timezone.utc)
        with self._pool.connection() as conn:
            with conn.cursor(row_factory=tuple_row) as cur:
                cur.execute(
                    f"""
                    UPDATE accounts
                    SET status = %s, updated_at = %s
                    WHERE account_id = %s AND status <> %s
                    RETURNING {_COLUMNS}
                    """,
                    (status.value, now, account_id, status.value),
                )
                row = cur.fetchone()
            conn.commit()
        if not row:
            return None
        return self._map_record(row)

    def list_accounts(self, *, offset: int, limit: int) -> Tuple[list[Account], int]:
        """Return a newest-first slice of accounts and the total count."""
        with self._pool.connection() as conn:
            with conn.cursor(row_factory=tuple_row) as cur:
                cur.execute("SELECT COUNT(*) FROM accounts")
                total = int(cur.fetchone()[0])
                cur.execute(
                    f"""
                    SELECT {_COLUMNS}
                    FROM accounts
                    ORDER BY created_at DESC, account_id DESC
                    OFFSET %s LIMIT %s
                    """,
                    (offset, limit),
                )
                rows = cur.fetchall()
        return [self._map_record(row) for row in rows], total

    def _update(self, account_id: str, fields: list[tuple[str, Any]]) -> Account | None:
        fields = [*fields, ("updated_at", datetime.now(timezone.utc))]
        sets = ", ".join(f"{column} = %s" for column, _ in fields)
        params = [value for _, value in fields] + [account_id]
        with self._pool.connection() as conn:
            with conn.cursor(row_factory=tuple_row) as cur:
                cur.execute(
                    f"UPDATE accounts SET {sets} WHERE account_id = %s RETURNING {_COLUMNS}",
                    params,
                )
                row = cur.fetchone()
            conn.commit()
        if not row:
            return None
        return self._map_record(row)

    def _fetch_one(self, query: str, params: tuple) -> Account | None:
        with self._pool.connection() as conn:
            with conn.cursor(row_factory=tuple_row) as cur:
                cur.execute(query, params)
                row = cur.fetchone()
        if not row:
            return None
        return self._map_record(row)

    def _map_record(self, row: tuple) -> Account:
        """Convert a raw database tuple into the domain ``Account`` dataclass."""
        return Account(
            account_id=row[0],
            full_name=row[1],
            email=row[2],
            password_hash=row[3],
            role=Role(row[4]),
            status=AccountStatus(row[5]),
            last_login_at=row[6],
            created_at=row[7],
            updated_at=row[8],
        )
