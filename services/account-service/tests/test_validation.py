from __future__ import annotations

import time

import pytest

from app.domain.validation import (
    PASSWORD_MAX_LENGTH,
    email_errors,
    full_name_errors,
    normalize_email,
    normalize_full_name,
    password_errors,
)


def test_email_is_trimmed_and_lowercased():
    assert normalize_email("  Test@Example.COM ") == "test@example.com"


def test_full_name_is_trimmed():
    assert normalize_full_name("  John Doe  ") == "John Doe"


@pytest.mark.parametrize(
    "email",
    ["test@example.com", "user.name@domain.co.uk", "first.last@subdomain.example.com", "a@x.com"],
)
def test_valid_emails(email):
    assert email_errors(email) == []


@pytest.mark.parametrize("email", ["invalid.email", "@example.com", "user@", "user name@example.com", ""])
def test_invalid_emails(email):
    errors = email_errors(email)
    assert len(errors) == 1
    assert errors[0].field == "email"


@pytest.mark.parametrize("name", ["", "A"])
def test_full_name_too_short(name):
    assert full_name_errors(name)


def test_full_name_length_bounds():
    assert full_name_errors("Al") == []
    assert full_name_errors("x" * 100) == []
    assert full_name_errors("x" * 101)[0].message.startswith("Full name cannot exceed")


@pytest.mark.parametrize("email", ["a" * 5000 + "!", "a@" + "b" * 5000 + "!", "a." * 3000 + "@x"])
def test_long_malformed_emails_are_rejected_quickly(email):
    started = time.perf_counter()
    errors = email_errors(email)
    assert time.perf_counter() - started < 1.0
    assert [error.message for error in errors] == ["Please provide a valid email address"]


@pytest.mark.parametrize("password", ["Pass123!", "Test@1234", "MySecure#Pass99&", "Admin$2024Pass"])
def test_strong_passwords(password):
    assert password_errors(password) == []


@pytest.mark.parametrize(
    "password",
    ["password123", "short", "nouppercase123!", "NOLOWERCASE123!", "NoSpecialChar123", "NoNumber!", "Pass12!"],
)
def test_weak_passwords(password):
    assert password_errors(password)


def test_password_errors_list_every_failed_rule():
    messages = [error.message for error in password_errors("password123", field="newPassword")]
    assert {error.field for error in password_errors("password123", field="newPassword")} == {"newPassword"}
    assert any("uppercase" in message for message in messages)
    assert any("special character" in message for message in messages)
    assert not any("lowercase" in message for message in messages)


def test_password_length_is_capped():
    at_limit = "Aa1!" * (PASSWORD_MAX_LENGTH // 4)
    assert len(at_limit) == PASSWORD_MAX_LENGTH
    assert password_errors(at_limit) == []

    errors = password_errors(at_limit + "x", field="newPassword")
    assert [(error.field, error.message) for error in errors] == [
        ("newPassword", f"Password cannot exceed {PASSWORD_MAX_LENGTH} characters")
    ]
    assert len(password_errors("Aa1!" * 1100)) == 1
