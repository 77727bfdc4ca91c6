"""Tests for bearer token issuance and verification."""

from __future__ import annotations

import base64
import json
import time

import jwt
import pytest

from app.security.tokens import InvalidToken, TokenService

from conftest import TEST_SETTINGS


def _flip_signature_byte(token: str) -> str:
    header, payload, signature = token.split(".")
    raw = bytearray(base64.urlsafe_b64decode(signature + "=" * (-len(signature) % 4)))
    raw[0] ^= 0x01
    flipped = base64.urlsafe_b64encode(bytes(raw)).rstrip(b"=").decode("ascii")
    return f"{header}.{payload}.{flipped}"


def test_issue_then_verify_returns_subject(tokens):
    issued = tokens.issue("account-123")
    assert issued.token.count(".") == 2
    assert issued.expires_in == TEST_SETTINGS.jwt_ttl_seconds
    assert tokens.verify(issued.token) == "account-123"


def test_issued_claims(tokens):
    issued = tokens.issue("account-123")
    claims = jwt.decode(issued.token, options={"verify_signature": False})
    assert claims["sub"] == "account-123"
    assert claims["iss"] == TEST_SETTINGS.jwt_issuer
    assert claims["exp"] - claims["iat"] == TEST_SETTINGS.jwt_ttl_seconds


def test_flipped_signature_fails(tokens):
    token = tokens.issue("account-123").token
    with pytest.raises(InvalidToken):
        tokens.verify(_flip_signature_byte(token))


def test_tampered_payload_fails(tokens):
    header, _, signature = tokens.issue("account-123").token.split(".")
    forged = base64.urlsafe_b64encode(
        json.dumps({"sub": "someone-else", "iat": 0, "exp": 9999999999}).encode()
    ).rstrip(b"=").decode()
    with pytest.raises(InvalidToken):
        tokens.verify(f"{header}.{forged}.{signature}")


def test_token_signed_with_other_secret_fails(tokens):
    other = TokenService(secret="another-secret", ttl_seconds=60, issuer=TEST_SETTINGS.jwt_issuer)
    with pytest.raises(InvalidToken):
        tokens.verify(other.issue("account-123").token)


def test_token_from_other_issuer_fails(tokens):
    other = TokenService(secret=TEST_SETTINGS.jwt_secret, ttl_seconds=60, issuer="someone.else")
    with pytest.raises(InvalidToken):
        tokens.verify(other.issue("account-123").token)


@pytest.mark.parametrize("token", ["", "abc", "a.b", "a.b.c.d", "invalid.token.string"])
def test_malformed_tokens_fail(tokens, token):
    with pytest.raises(InvalidToken):
        tokens.verify(token)


def test_expired_token_fails_even_with_valid_signature():
    issued_at = time.time()
    clock = [issued_at]
    service = TokenService(secret="s3cret", ttl_seconds=60, issuer="accounts.test", clock=lambda: clock[0])
    token = service.issue("account-123").token
    assert service.verify(token) == "account-123"

    clock[0] = issued_at + 61
    with pytest.raises(InvalidToken):
        service.verify(token)


def test_expired_and_forged_tokens_share_one_message(tokens):
    past = TokenService(
        secret=TEST_SETTINGS.jwt_secret,
        ttl_seconds=60,
        issuer=TEST_SETTINGS.jwt_issuer,
        clock=lambda: time.time() - 3600,
    )
    with pytest.raises(InvalidToken) as expired:
        tokens.verify(past.issue("account-123").token)
    with pytest.raises(InvalidToken) as forged:
        tokens.verify(_flip_signature_byte(tokens.issue("account-123").token))
    assert str(expired.value) == str(forged.value)


def test_token_without_subject_fails(tokens):
    now = int(time.time())
    token = jwt.encode(
        {"iss": TEST_SETTINGS.jwt_issuer, "iat": now, "exp": now + 60},
        TEST_SETTINGS.jwt_secret,
        algorithm="HS256",
    )
    with pytest.raises(InvalidToken):
        tokens.verify(token)


def test_constructor_rejects_blank_secret():
    with pytest.raises(ValueError):
        TokenService(secret="", ttl_seconds=60, issuer="x")
