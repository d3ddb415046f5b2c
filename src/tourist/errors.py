"""Domain error taxonomy shared by the ranking and badge engines.

Engines raise these; the HTTP layer maps them to status codes in
``tourist.middleware.error_handler``.
"""

from __future__ import annotations

import functools
from collections.abc import Awaitable, Callable
from typing import ParamSpec, TypeVar

import structlog
from sqlalchemy.exc import SQLAlchemyError

logger = structlog.get_logger()

P = ParamSpec("P")
R = TypeVar("R")


class AppError(Exception):
    """Base class for errors that carry a stable code and HTTP status."""

    code = "INTERNAL_ERROR"
    status_code = 500

    def __init__(self, message: str, details: dict | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class NotFoundError(AppError):
    """Unknown user, location, attraction or visit."""

    code = "NOT_FOUND"
    status_code = 404


class InvalidArgumentError(AppError):
    """Argument outside the range an engine accepts (e.g. a non-positive limit)."""

    code = "INVALID_ARGUMENT"
    status_code = 400


class ConflictError(AppError):
    """Write would violate a uniqueness rule (one visit per user per attraction)."""

    code = "CONFLICT"
    status_code = 409


class StoreUnavailableError(AppError):
    """The underlying store failed or timed out."""

    code = "STORE_UNAVAILABLE"
    status_code = 503


def translate_store_errors(func: Callable[P, Awaitable[R]]) -> Callable[P, Awaitable[R]]:
    """Re-raise store failures from an async engine call as StoreUnavailableError.

    No retries happen here; retry policy belongs to the store client.
    """

    @functools.wraps(func)
    async def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        try:
            return await func(*args, **kwargs)
        except (SQLAlchemyError, OSError, TimeoutError) as exc:
            logger.error("store_unavailable", operation=func.__qualname__, error=str(exc))
            msg = "Data store is unavailable"
            raise StoreUnavailableError(msg) from exc

    return wrapper
