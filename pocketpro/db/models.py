"""Database schema and initialization."""
from pocketpro.db.connection import Database
from pocketpro.utils.logger import get_logger

logger = get_logger(__name__)

# SQL schema for all tables (for fresh installs)
SCHEMA = """
-- Accounts
CREATE TABLE IF NOT EXISTS users (
    id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    email VARCHAR(255) UNIQUE NOT NULL,
    password_hash VARCHAR(255) NOT NULL,
    last_sign_in_at TIMESTAMPTZ,
    created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
);

CREATE INDEX IF NOT EXISTS idx_users_email ON users(LOWER(email));

-- Game ledgers (one active per user)
CREATE TABLE IF NOT EXISTS games (
    id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    user_id UUID NOT NULL REFERENCES users(id) ON DELETE CASCADE,
    state JSONB NOT NULL,  -- roster + buy-in/cash-out events
    total_money_in_play NUMERIC(12, 2) NOT NULL DEFAULT 0,
    is_active BOOLEAN NOT NULL DEFAULT TRUE,
    created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
);

CREATE INDEX IF NOT EXISTS idx_games_user ON games(user_id, updated_at DESC);
CREATE UNIQUE INDEX IF NOT EXISTS idx_games_one_active
    ON games(user_id) WHERE is_active;

-- Poker sessions (income tracker)
CREATE TABLE IF NOT EXISTS poker_sessions (
    id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    user_id UUID NOT NULL REFERENCES users(id) ON DELETE CASCADE,
    date DATE NOT NULL,
    hours DOUBLE PRECISION NOT NULL CHECK (hours > 0),
    profit DOUBLE PRECISION NOT NULL,
    notes TEXT,
    position INTEGER NOT NULL DEFAULT 0,  -- list order within the user's sessions, 0 = newest
    created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
);

CREATE INDEX IF NOT EXISTS idx_poker_sessions_user ON poker_sessions(user_id, date DESC, position);

-- Update trigger for updated_at columns
CREATE OR REPLACE FUNCTION update_updated_at()
RETURNS TRIGGER AS $$
BEGIN
    NEW.updated_at = NOW();
    RETURN NEW;
END;
$$ LANGUAGE plpgsql;

DROP TRIGGER IF EXISTS users_updated_at ON users;
CREATE TRIGGER users_updated_at
    BEFORE UPDATE ON users
    FOR EACH ROW
    EXECUTE FUNCTION update_updated_at();

DROP TRIGGER IF EXISTS poker_sessions_updated_at ON poker_sessions;
CREATE TRIGGER poker_sessions_updated_at
    BEFORE UPDATE ON poker_sessions
    FOR EACH ROW
    EXECUTE FUNCTION update_updated_at();
"""

# Migrations for existing databases
MIGRATIONS = [
    # Migration 1: track sign-in time for the profile view
    """
    DO $$
    BEGIN
        IF NOT EXISTS (
            SELECT 1 FROM information_schema.columns 
            WHERE table_name = 'users' AND column_name = 'last_sign_in_at'
        ) THEN
            ALTER TABLE users ADD COLUMN last_sign_in_at TIMESTAMPTZ;
        END IF;
    END $$;
    """,
]


async def init_db(db: Database) -> None:
    """Initialize database schema and run migrations.
    
    Args:
        db: Connected database.
    """
    logger.info("Initializing database schema...")
    await db.execute(SCHEMA)
    
    logger.info("Running migrations...")
    for i, migration in enumerate(MIGRATIONS, 1):
        try:
            await db.execute(migration)
            logger.info(f"Migration {i} completed")
        except Exception as e:
            logger.warning(f"Migration {i} skipped or failed: {e}")
    
    logger.info("Database schema initialized")
