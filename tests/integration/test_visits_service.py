"""Integration tests for recording and removing visits."""

from __future__ import annotations

from datetime import timedelta

import pytest
from sqlalchemy import func, select

from tests.conftest import BASE_DATE, FakeRedis, add_visits, create_location_tree, create_user
from tourist.db.models import Visit
from tourist.errors import ConflictError, NotFoundError
from tourist.leaderboard.cache import set_cached_leaderboard
from tourist.leaderboard.service import get_user_rank_stats
from tourist.visits.service import record_visit, remove_visit

pytestmark = pytest.mark.asyncio


async def _visit_count(db, user_id: str) -> int:
    result = await db.execute(select(func.count(Visit.id)).where(Visit.user_id == user_id))
    return int(result.scalar_one())


class TestRecordVisit:
    async def test_records_and_reports_progress(self, db_session):
        tree = await create_location_tree(db_session)
        user = await create_user(db_session, "u@example.com")
        user_id = user.id
        await db_session.commit()

        result = await record_visit(
            db_session,
            None,
            user_id,
            "eu-city-0-0-attr-000",
            is_verified=True,
            visit_date=BASE_DATE,
        )

        assert result["visit"]["attraction_id"] == "eu-city-0-0-attr-000"
        assert result["visit"]["is_verified"] is True
        city, country, continent = result["progress"]
        assert (city["location_id"], city["visited_count"], city["current_tier"]) == ("eu-city-0-0", 1, "bronze")
        assert (country["location_id"], country["visited_count"]) == ("eu-country-0", 1)
        assert continent["location_id"] == tree["continent"].id
        assert await _visit_count(db_session, user_id) == 1

    async def test_crossing_bronze_reports_new_badge(self, db_session):
        await create_location_tree(db_session)
        user = await create_user(db_session, "u@example.com")
        await db_session.commit()

        result = await record_visit(db_session, None, user.id, "eu-city-0-0-attr-000", visit_date=BASE_DATE)

        assert len(result["new_badges"]) == 1
        badge = result["new_badges"][0]
        assert (badge["location_id"], badge["tier"], badge["is_new"]) == ("eu-city-0-0", "bronze", True)
        assert badge["earned_at"].replace(tzinfo=None) == BASE_DATE.replace(tzinfo=None)

    async def test_below_bronze_reports_nothing(self, db_session):
        await create_location_tree(db_session, attractions_per_city=10)
        user = await create_user(db_session, "u@example.com")
        await db_session.commit()

        result = await record_visit(db_session, None, user.id, "eu-city-0-0-attr-000")

        assert result["new_badges"] == []

    async def test_held_badge_not_new(self, db_session):
        tree = await create_location_tree(db_session, attractions_per_city=10)
        user = await create_user(db_session, "u@example.com")
        user_id = user.id
        await add_visits(db_session, user, tree["attractions"]["eu-city-0-0"][:3])
        await db_session.commit()

        result = await record_visit(db_session, None, user_id, "eu-city-0-0-attr-003")

        assert [(b["location_id"], b["tier"], b["is_new"]) for b in result["new_badges"]] == [
            ("eu-city-0-0", "bronze", False),
        ]

    async def test_tier_upgrade_is_new(self, db_session):
        tree = await create_location_tree(db_session)
        user = await create_user(db_session, "u@example.com")
        user_id = user.id
        await add_visits(db_session, user, tree["attractions"]["eu-city-0-0"][:1])
        await db_session.commit()

        result = await record_visit(
            db_session, None, user_id, "eu-city-0-0-attr-001", visit_date=BASE_DATE + timedelta(days=5)
        )

        badges = {b["location_id"]: b for b in result["new_badges"]}
        assert badges["eu-city-0-0"]["tier"] == "silver"
        assert badges["eu-city-0-0"]["is_new"] is True
        assert badges["eu-country-0"]["tier"] == "bronze"
        assert badges["eu-country-0"]["is_new"] is True

    async def test_verified_visit_moves_rank(self, db_session):
        await create_location_tree(db_session)
        user = await create_user(db_session, "u@example.com")
        user_id = user.id
        await db_session.commit()
        assert (await get_user_rank_stats(db_session, user_id))["rank"] is None

        await record_visit(db_session, None, user_id, "eu-city-0-0-attr-001", is_verified=True)

        assert (await get_user_rank_stats(db_session, user_id))["rank"] == 1

    async def test_duplicate_is_conflict(self, db_session):
        tree = await create_location_tree(db_session)
        user = await create_user(db_session, "u@example.com")
        user_id = user.id
        await add_visits(db_session, user, tree["attractions"]["eu-city-0-0"][:1])
        await db_session.commit()

        with pytest.raises(ConflictError):
            await record_visit(db_session, None, user_id, "eu-city-0-0-attr-000")

        assert await _visit_count(db_session, user_id) == 1

    async def test_unknown_attraction(self, db_session):
        user = await create_user(db_session, "u@example.com")
        await db_session.commit()

        with pytest.raises(NotFoundError):
            await record_visit(db_session, None, user.id, "nowhere")

    async def test_unknown_user(self, db_session):
        await create_location_tree(db_session)
        await db_session.commit()

        with pytest.raises(NotFoundError):
            await record_visit(db_session, None, "ghost", "eu-city-0-0-attr-000")

    async def test_invalidates_leaderboard_cache(self, db_session):
        await create_location_tree(db_session)
        user = await create_user(db_session, "u@example.com")
        await db_session.commit()
        redis = FakeRedis()
        await set_cached_leaderboard(redis, 10, [], 0)
        await set_cached_leaderboard(redis, 50, [], 0)

        await record_visit(db_session, redis, user.id, "eu-city-0-0-attr-000", is_verified=True)

        assert redis.store == {}


class TestRemoveVisit:
    async def test_removes_and_invalidates(self, db_session):
        tree = await create_location_tree(db_session)
        user = await create_user(db_session, "u@example.com")
        user_id = user.id
        await add_visits(db_session, user, tree["attractions"]["eu-city-0-0"][:2], start=BASE_DATE - timedelta(days=2))
        await db_session.commit()
        redis = FakeRedis()
        await set_cached_leaderboard(redis, 10, [], 1)

        await remove_visit(db_session, redis, user_id, "eu-city-0-0-attr-000")

        assert await _visit_count(db_session, user_id) == 1
        assert redis.store == {}

    async def test_missing_visit(self, db_session):
        await create_location_tree(db_session)
        user = await create_user(db_session, "u@example.com")
        await db_session.commit()

        with pytest.raises(NotFoundError):
            await remove_visit(db_session, None, user.id, "eu-city-0-0-attr-000")
