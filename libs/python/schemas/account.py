"""Account-related DTOs shared by the API and its clients."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serialising to the camelCase keys the web client expects."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Account(CamelModel):
    id: str
    full_name: str
    email: str
    role: Literal["user", "admin"]
    status: Literal["active", "inactive"]
    last_login_at: datetime | None = None
    created_at: datetime


class AuthPayload(CamelModel):
    user: Account
    token: str
    expires_in: int


class Pagination(CamelModel):
    current_page: int
    total_pages: int
    total_users: int
    users_per_page: int


class AccountList(CamelModel):
    users: list[Account]
    pagination: Pagination
