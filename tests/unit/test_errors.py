"""Tests for the domain error taxonomy and store error translation."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest
from sqlalchemy.exc import OperationalError

from tourist.errors import (
    AppError,
    ConflictError,
    InvalidArgumentError,
    NotFoundError,
    StoreUnavailableError,
    translate_store_errors,
)
from tourist.leaderboard.service import get_user_rank_stats


class TestErrorCodes:
    @pytest.mark.parametrize(
        ("error", "code", "status"),
        [
            (NotFoundError, "NOT_FOUND", 404),
            (InvalidArgumentError, "INVALID_ARGUMENT", 400),
            (ConflictError, "CONFLICT", 409),
            (StoreUnavailableError, "STORE_UNAVAILABLE", 503),
        ],
    )
    def test_code_and_status(self, error, code, status):
        exc = error("boom")
        assert isinstance(exc, AppError)
        assert exc.code == code
        assert exc.status_code == status
        assert exc.message == "boom"
        assert exc.details == {}


class TestTranslateStoreErrors:
    @pytest.mark.asyncio
    async def test_sqlalchemy_error_becomes_store_unavailable(self):
        @translate_store_errors
        async def failing():
            raise OperationalError("SELECT 1", {}, Exception("connection refused"))

        with pytest.raises(StoreUnavailableError) as exc_info:
            await failing()
        assert isinstance(exc_info.value.__cause__, OperationalError)

    @pytest.mark.asyncio
    async def test_timeout_becomes_store_unavailable(self):
        @translate_store_errors
        async def slow():
            raise TimeoutError

        with pytest.raises(StoreUnavailableError):
            await slow()

    @pytest.mark.asyncio
    async def test_domain_errors_pass_through(self):
        @translate_store_errors
        async def missing():
            raise NotFoundError("nope")

        with pytest.raises(NotFoundError):
            await missing()

    @pytest.mark.asyncio
    async def test_return_value_untouched(self):
        @translate_store_errors
        async def ok(x: int) -> int:
            return x * 2

        assert await ok(21) == 42
        assert ok.__name__ == "ok"

    @pytest.mark.asyncio
    async def test_engine_call_on_broken_session(self):
        db = AsyncMock()
        db.get.side_effect = OperationalError("SELECT", {}, Exception("server closed the connection"))

        with pytest.raises(StoreUnavailableError):
            await get_user_rank_stats(db, "u-1")
