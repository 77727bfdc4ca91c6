"""Issuing and validating the service's bearer JWTs."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Callable

import jwt

_ALGORITHM = "HS256"


class InvalidToken(Exception):
    """Raised for any token that fails verification.

    Malformed, forged and expired tokens are deliberately indistinguishable.
    """

    def __init__(self) -> None:
        super().__init__("Invalid or expired token")


@dataclass(frozen=True, slots=True)
class IssuedToken:
    token: str
    expires_in: int


class TokenService:
    """Signs and verifies access tokens carrying an account id as ``sub``."""

    def __init__(
        self,
        *,
        secret: str,
        ttl_seconds: int,
        issuer: str,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Capture signing configuration; the secret is fixed for the instance lifetime."""
        if not secret:
            raise ValueError("jwt_secret_blank")
        if ttl_seconds <= 0:
            raise ValueError("jwt_ttl_seconds must be positive")
        self._secret = secret
        self._ttl_seconds = ttl_seconds
        self._issuer = issuer
        self._clock = clock

    @property
    def ttl_seconds(self) -> int:
        return self._ttl_seconds

    def issue(self, account_id: str) -> IssuedToken:
        """Create a signed JWT for ``account_id``.

        Parameters
        ----------
        account_id:
            Account identifier to embed in the token `sub` claim.

        Returns
        -------
        IssuedToken
            The encoded JWT string and its TTL (in seconds).
        """
        if not account_id:
            raise ValueError("account_id_blank")
        now = int(self._clock())
        payload: dict[str, Any] = {
            "iss": self._issuer,
            "sub": account_id,
            "iat": now,
            "exp": now + self._ttl_seconds,
        }
        token = jwt.encode(payload, self._secret, algorithm=_ALGORITHM)
        return IssuedToken(token=token, expires_in=self._ttl_seconds)

    def verify(self, token: str) -> str:
        """Verify ``token`` and return its subject claim.

        Raises
        ------
        InvalidToken
            When the token is not three dot-separated segments, its signature
            or issuer does not match, a required claim is missing, or it has
            expired.
        """
        if not token or token.count(".") != 2:
            raise InvalidToken()
        try:
            claims = jwt.decode(
                token,
                self._secret,
                algorithms=[_ALGORITHM],
                issuer=self._issuer,
                # expiry is checked below against the injected clock
                options={"require": ["sub", "iat", "exp"], "verify_exp": False, "verify_iat": False},
            )
        except jwt.PyJWTError as exc:
            raise InvalidToken() from exc

        try:
            expires_at = int(claims["exp"])
        except (TypeError, ValueError) as exc:
            raise InvalidToken() from exc
        if expires_at <= int(self._clock()):
            raise InvalidToken()
        subject = claims["sub"]
        if not isinstance(subject, str) or not subject:
            raise InvalidToken()
        return subject
