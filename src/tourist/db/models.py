"""ORM models for users, the location hierarchy, and visits.

Primary keys are string UUIDs so the same schema runs on PostgreSQL and on the
SQLite database used by the test suite.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    String,
    Text,
    UniqueConstraint,
    false,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tourist.db.base import Base

SUBSCRIPTION_TIERS = ("free", "premium")
SUBSCRIPTION_STATUSES = ("active", "cancelled", "expired")


def _new_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


class User(Base):
    """Maps to the 'users' table."""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    email: Mapped[str] = mapped_column(String(320), unique=True, nullable=False)
    name: Mapped[str | None] = mapped_column(String(128), nullable=True)
    avatar_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    subscription_tier: Mapped[str] = mapped_column(String(16), nullable=False, default="free", server_default="free")
    subscription_status: Mapped[str] = mapped_column(
        String(16), nullable=False, default="active", server_default="active"
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)

    visits: Mapped[list[Visit]] = relationship("Visit", back_populates="user", cascade="all, delete-orphan")

    @property
    def is_premium_active(self) -> bool:
        return self.subscription_tier == "premium" and self.subscription_status == "active"


# ---------------------------------------------------------------------------
# Location hierarchy: continent > country > city > attraction
# ---------------------------------------------------------------------------


class Continent(Base):
    __tablename__ = "continents"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    image_url: Mapped[str | None] = mapped_column(Text, nullable=True)

    countries: Mapped[list[Country]] = relationship("Country", back_populates="continent")


class Country(Base):
    __tablename__ = "countries"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    continent_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("continents.id", ondelete="CASCADE"), nullable=False, index=True
    )
    flag_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    image_url: Mapped[str | None] = mapped_column(Text, nullable=True)

    continent: Mapped[Continent] = relationship("Continent", back_populates="countries")
    cities: Mapped[list[City]] = relationship("City", back_populates="country")


class City(Base):
    __tablename__ = "cities"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    country_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("countries.id", ondelete="CASCADE"), nullable=False, index=True
    )
    image_url: Mapped[str | None] = mapped_column(Text, nullable=True)

    country: Mapped[Country] = relationship("Country", back_populates="cities")
    attractions: Mapped[list[Attraction]] = relationship("Attraction", back_populates="city")


class Attraction(Base):
    __tablename__ = "attractions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    name: Mapped[str] = mapped_column(String(256), nullable=False)
    city_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("cities.id", ondelete="CASCADE"), nullable=False, index=True
    )

    city: Mapped[City] = relationship("City", back_populates="attractions")


# ---------------------------------------------------------------------------
# Visits
# ---------------------------------------------------------------------------


class Visit(Base):
    """A user's visit to an attraction, UNIQUE(user_id, attraction_id).

    ``is_verified`` marks camera/landmark-verified visits; only those count
    toward the leaderboard. Badge progress counts every visit.
    """

    __tablename__ = "visits"
    __table_args__ = (
        UniqueConstraint("user_id", "attraction_id", name="visits_user_id_attraction_id_key"),
        Index("idx_visits_user_verified", "user_id", "is_verified"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    user_id: Mapped[str] = mapped_column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    attraction_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("attractions.id", ondelete="CASCADE"), nullable=False, index=True
    )
    is_verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default=false())
    visit_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)

    user: Mapped[User] = relationship("User", back_populates="visits")
    attraction: Mapped[Attraction] = relationship("Attraction")
