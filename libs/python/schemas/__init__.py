"""Shared schema exports."""

from .account import Account, AccountList, AuthPayload, CamelModel, Pagination
from .envelope import Envelope, FieldErrorOut

__all__ = [
    "Account",
    "AccountList",
    "AuthPayload",
    "CamelModel",
    "Envelope",
    "FieldErrorOut",
    "Pagination",
]
