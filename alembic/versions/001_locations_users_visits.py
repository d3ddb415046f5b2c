"""Initial schema: users, location hierarchy, attractions, visits.

Revision ID: 001_locations_users_visits
Revises: None
Create Date: 2026-10-19
"""

from collections.abc import Sequence

from alembic import op

revision: str = "001_locations_users_visits"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    # --- Users ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS users (
            id VARCHAR(36) PRIMARY KEY,
            email VARCHAR(320) UNIQUE NOT NULL,
            name VARCHAR(128),
            avatar_url TEXT,
            subscription_tier VARCHAR(16) NOT NULL DEFAULT 'free',
            subscription_status VARCHAR(16) NOT NULL DEFAULT 'active',
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CHECK (subscription_tier IN ('free', 'premium')),
            CHECK (subscription_status IN ('active', 'cancelled', 'expired'))
        )
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS idx_users_subscription
        ON users(subscription_tier, subscription_status)
    """)

    # --- Location hierarchy ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS continents (
            id VARCHAR(36) PRIMARY KEY,
            name VARCHAR(128) NOT NULL,
            image_url TEXT
        )
    """)
    op.execute("""
        CREATE TABLE IF NOT EXISTS countries (
            id VARCHAR(36) PRIMARY KEY,
            name VARCHAR(128) NOT NULL,
            continent_id VARCHAR(36) NOT NULL REFERENCES continents(id) ON DELETE CASCADE,
            flag_url TEXT,
            image_url TEXT
        )
    """)
    op.execute("CREATE INDEX IF NOT EXISTS ix_countries_continent_id ON countries(continent_id)")
    op.execute("""
        CREATE TABLE IF NOT EXISTS cities (
            id VARCHAR(36) PRIMARY KEY,
            name VARCHAR(128) NOT NULL,
            country_id VARCHAR(36) NOT NULL REFERENCES countries(id) ON DELETE CASCADE,
            image_url TEXT
        )
    """)
    op.execute("CREATE INDEX IF NOT EXISTS ix_cities_country_id ON cities(country_id)")
    op.execute("""
        CREATE TABLE IF NOT EXISTS attractions (
            id VARCHAR(36) PRIMARY KEY,
            name VARCHAR(256) NOT NULL,
            city_id VARCHAR(36) NOT NULL REFERENCES cities(id) ON DELETE CASCADE
        )
    """)
    op.execute("CREATE INDEX IF NOT EXISTS ix_attractions_city_id ON attractions(city_id)")

    # --- Visits ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS visits (
            id VARCHAR(36) PRIMARY KEY,
            user_id VARCHAR(36) NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            attraction_id VARCHAR(36) NOT NULL REFERENCES attractions(id) ON DELETE CASCADE,
            is_verified BOOLEAN NOT NULL DEFAULT false,
            visit_date TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT visits_user_id_attraction_id_key UNIQUE (user_id, attraction_id)
        )
    """)
    op.execute("CREATE INDEX IF NOT EXISTS ix_visits_attraction_id ON visits(attraction_id)")
    op.execute("""
        CREATE INDEX IF NOT EXISTS idx_visits_user_verified
        ON visits(user_id, is_verified)
    """)


def downgrade() -> None:
    for table in ["visits", "attractions", "cities", "countries", "continents", "users"]:
        op.execute(f"DROP TABLE IF EXISTS {table} CASCADE")  # noqa: S608
