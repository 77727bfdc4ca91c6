"""Uniform JSON response envelope."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel


class FieldErrorOut(BaseModel):
    field: str
    message: str


class Envelope(BaseModel):
    success: bool
    message: str | None = None
    data: Any | None = None
    errors: list[FieldErrorOut] | None = None
