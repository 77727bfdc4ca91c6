"""Password hashing backed by passlib."""

from __future__ import annotations

import logging

from passlib.context import CryptContext

logger = logging.getLogger(__name__)

_SCHEME = "pbkdf2_sha256"


class PasswordHasher:
    """Salted, slow one-way hashing with a configurable cost factor."""

    def __init__(self, rounds: int) -> None:
        """Build the passlib context; ``rounds`` is the PBKDF2 iteration count."""
        if rounds < 1:
            raise ValueError("password hash rounds must be positive")
        self._context = CryptContext(
            schemes=[_SCHEME],
            deprecated="auto",
            **{f"{_SCHEME}__default_rounds": rounds},
        )

    def hash(self, password: str) -> str:
        """Return a new hash of ``password`` with a freshly generated salt."""
        if not password:
            raise ValueError("password_blank")
        return self._context.hash(password)

    def verify(self, password: str, password_hash: str | None) -> bool:
        """Return ``True`` only when ``password`` matches ``password_hash``.

        Malformed or unrecognised hashes yield ``False`` rather than an error.
        """
        if not password or not password_hash:
            return False
        try:
            return self._context.verify(password, password_hash)
        except (ValueError, TypeError):
            logger.warning("stored password hash could not be parsed")
            return False
