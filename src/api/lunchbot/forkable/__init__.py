"""Forkable API client package."""

from lunchbot.forkable.client import ForkableClient
from lunchbot.forkable.cookies import extract_session_material
from lunchbot.forkable.errors import (
    ForkableError,
    LoginError,
    LoginErrorKind,
    QueryError,
    QueryErrorKind,
)

__all__ = [
    "ForkableClient",
    "extract_session_material",
    "ForkableError",
    "LoginError",
    "LoginErrorKind",
    "QueryError",
    "QueryErrorKind",
]
