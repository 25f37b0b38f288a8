"""Baseline: users, mission catalog, assignments, progress ledger, badges, referrals.

Revision ID: 001_baseline
Revises: None
Create Date: 2026-10-19
"""

from collections.abc import Sequence

from alembic import op

revision: str = "001_baseline"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    # --- Users ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS users (
            id BIGSERIAL PRIMARY KEY,
            email VARCHAR(320) UNIQUE NOT NULL,
            name VARCHAR(128),
            zip_code VARCHAR(10),
            country VARCHAR(2) NOT NULL DEFAULT 'US',
            timezone VARCHAR(50) NOT NULL DEFAULT 'UTC',
            referral_code VARCHAR(32) UNIQUE NOT NULL,
            referred_by BIGINT REFERENCES users(id) ON DELETE SET NULL,
            is_premium BOOLEAN NOT NULL DEFAULT false,
            notification_email BOOLEAN NOT NULL DEFAULT true,
            notification_push BOOLEAN NOT NULL DEFAULT true,
            notification_time VARCHAR(5) NOT NULL DEFAULT '09:00',
            theme VARCHAR(16) NOT NULL DEFAULT 'system',
            units VARCHAR(16) NOT NULL DEFAULT 'metric',
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at TIMESTAMPTZ
        )
    """)

    # --- Mission catalog ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS missions (
            id SERIAL PRIMARY KEY,
            slug VARCHAR(64) UNIQUE NOT NULL,
            title VARCHAR(128) NOT NULL,
            description TEXT NOT NULL,
            category VARCHAR(32) NOT NULL,
            difficulty VARCHAR(16) NOT NULL DEFAULT 'easy',
            co2_impact DOUBLE PRECISION NOT NULL,
            points INTEGER NOT NULL DEFAULT 10,
            icon VARCHAR(16),
            tips TEXT,
            is_active BOOLEAN NOT NULL DEFAULT true,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)

    # --- Daily assignments ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS user_missions (
            id VARCHAR(36) PRIMARY KEY,
            user_id BIGINT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            mission_id INTEGER NOT NULL REFERENCES missions(id),
            assigned_date DATE NOT NULL,
            status VARCHAR(16) NOT NULL DEFAULT 'pending',
            completed_at TIMESTAMPTZ,
            skipped_at TIMESTAMPTZ,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT user_missions_user_id_assigned_date_key UNIQUE (user_id, assigned_date)
        )
    """)

    # --- Progress ledger ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS user_progress (
            user_id BIGINT PRIMARY KEY REFERENCES users(id) ON DELETE CASCADE,
            total_co2_saved DOUBLE PRECISION NOT NULL DEFAULT 0,
            total_missions_completed INTEGER NOT NULL DEFAULT 0,
            total_missions_skipped INTEGER NOT NULL DEFAULT 0,
            current_streak INTEGER NOT NULL DEFAULT 0,
            longest_streak INTEGER NOT NULL DEFAULT 0,
            streak_last_date DATE,
            total_points BIGINT NOT NULL DEFAULT 0,
            level INTEGER NOT NULL DEFAULT 1,
            trees_planted INTEGER NOT NULL DEFAULT 0,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at TIMESTAMPTZ
        )
    """)
    op.execute("""
        CREATE TABLE IF NOT EXISTS progress_log (
            id BIGSERIAL PRIMARY KEY,
            user_id BIGINT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            date DATE NOT NULL,
            co2_saved DOUBLE PRECISION NOT NULL DEFAULT 0,
            missions_completed INTEGER NOT NULL DEFAULT 0,
            points_earned INTEGER NOT NULL DEFAULT 0,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT progress_log_user_id_date_key UNIQUE (user_id, date)
        )
    """)

    # --- Badges ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS badges (
            id SERIAL PRIMARY KEY,
            slug VARCHAR(64) UNIQUE NOT NULL,
            name VARCHAR(128) NOT NULL,
            description TEXT NOT NULL,
            icon VARCHAR(16) NOT NULL,
            category VARCHAR(32) NOT NULL,
            requirement_type VARCHAR(32) NOT NULL,
            requirement_value INTEGER NOT NULL,
            points INTEGER NOT NULL DEFAULT 0,
            sort_order INTEGER NOT NULL DEFAULT 0,
            is_active BOOLEAN NOT NULL DEFAULT true,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute("""
        CREATE TABLE IF NOT EXISTS user_badges (
            id BIGSERIAL PRIMARY KEY,
            user_id BIGINT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            badge_id INTEGER NOT NULL REFERENCES badges(id),
            earned_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT user_badges_user_id_badge_id_key UNIQUE (user_id, badge_id)
        )
    """)

    # --- Referrals ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS referrals (
            id BIGSERIAL PRIMARY KEY,
            referrer_id BIGINT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            referred_id BIGINT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            status VARCHAR(16) NOT NULL DEFAULT 'pending',
            reward_given BOOLEAN NOT NULL DEFAULT false,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            completed_at TIMESTAMPTZ,
            CONSTRAINT referrals_referred_id_key UNIQUE (referred_id)
        )
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS idx_referrals_referrer
        ON referrals(referrer_id)
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS referrals")
    op.execute("DROP TABLE IF EXISTS user_badges")
    op.execute("DROP TABLE IF EXISTS badges")
    op.execute("DROP TABLE IF EXISTS progress_log")
    op.execute("DROP TABLE IF EXISTS user_progress")
    op.execute("DROP TABLE IF EXISTS user_missions")
    op.execute("DROP TABLE IF EXISTS missions")
    op.execute("DROP TABLE IF EXISTS users")
