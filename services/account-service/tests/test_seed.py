from __future__ import annotations

import importlib.util
from pathlib import Path

import pytest

from app.domain.account import AccountStatus, Role

SEED_PATH = Path(__file__).resolve().parents[1] / "scripts" / "seed.py"


@pytest.fixture(scope="module")
def seed():
    spec = importlib.util.spec_from_file_location("seed_script", SEED_PATH)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def test_payloads_for_commands(seed):
    assert [p.email for p in seed.payloads_for("admin")] == ["admin@example.com"]
    assert len(seed.payloads_for("users")) == 5
    assert len(seed.payloads_for("all")) == 6


def test_seed_accounts_is_idempotent(seed, service, repository):
    assert seed.seed_accounts(service, seed.payloads_for("all")) == 6
    assert seed.seed_accounts(service, seed.payloads_for("all")) == 0

    admin = repository.find_by_email("admin@example.com")
    assert admin.role is Role.admin
    assert repository.find_by_email("charlie@example.com").status is AccountStatus.inactive
