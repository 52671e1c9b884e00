"""Poker session persistence with a Redis snapshot fallback."""
import uuid
from datetime import date
from typing import Optional

from pocketpro.db.connection import Database
from pocketpro.income.session import PokerSession
from pocketpro.state.redis_client import RedisClient
from pocketpro.state.repositories import SessionSnapshot
from pocketpro.utils.logger import get_logger

logger = get_logger(__name__)


class SessionStore:
    """Stores poker sessions in PostgreSQL and snapshots them in Redis."""

    def __init__(self, db: Database, redis_client: RedisClient):
        self.db = db
        self.redis_client = redis_client

    def _cache_key(self, user_id: str) -> str:
        """Get Redis key for a user's session snapshot."""
        return f"sessions:{user_id}"

    async def fetch_sessions(self, user_id: str) -> Optional[list[PokerSession]]:
        """Get all sessions of a user, newest first.

        Args:
            user_id: Owner's user ID.

        Returns:
            List of sessions, or None if the read failed.
        """
        try:
            records = await self.db.fetch(
                """
                SELECT id, date, hours, profit, notes
                FROM poker_sessions
                WHERE user_id = $1
                ORDER BY date DESC, position
                """,
                uuid.UUID(user_id)
            )
        except Exception as e:
            logger.error(f"Error fetching sessions for user {user_id}: {e}")
            return None

        return [
            PokerSession(
                id=str(r["id"]),
                date=r["date"].isoformat(),
                hours=r["hours"],
                profit=r["profit"],
                notes=r["notes"],
            )
            for r in records
        ]

    async def save_sessions(self, user_id: str, sessions: list[PokerSession]) -> bool:
        """Replace all stored sessions of a user.

        The delete and the inserts run in one transaction, so a failure
        leaves the previous sessions in place.

        Args:
            user_id: Owner's user ID.
            sessions: The complete, current session list (newest first).

        Returns:
            True on success.
        """
        owner = uuid.UUID(user_id)
        try:
            async with self.db.transaction() as conn:
                await conn.execute(
                    "DELETE FROM poker_sessions WHERE user_id = $1",
                    owner
                )
                if sessions:
                    await conn.executemany(
                        """
                        INSERT INTO poker_sessions (id, user_id, date, hours, profit, notes, position)
                        VALUES ($1, $2, $3, $4, $5, $6, $7)
                        """,
                        [
                            (
                                uuid.UUID(s.id),
                                owner,
                                date.fromisoformat(s.date),
                                s.hours,
                                s.profit,
                                s.notes,
                                position,
                            )
                            for position, s in enumerate(sessions)
                        ]
                    )
        except Exception as e:
            logger.error(f"Error saving sessions for user {user_id}: {e}")
            return False

        logger.debug(f"Saved {len(sessions)} sessions for user {user_id}")
        return True

    async def cache_sessions(
        self,
        user_id: str,
        sessions: list[PokerSession],
        synced: bool = False,
    ) -> bool:
        """Write the session snapshot to Redis.

        Args:
            user_id: Owner's user ID.
            sessions: Sessions to snapshot.
            synced: Whether the database already holds exactly these sessions.

        Returns:
            True if the snapshot was written.
        """
        try:
            await self.redis_client.set_json(
                self._cache_key(user_id),
                {"synced": synced, "sessions": [s.to_dict() for s in sessions]}
            )
        except Exception as e:
            logger.error(f"Failed to cache sessions for user {user_id}: {e}")
            return False
        return True

    async def get_cached_sessions(self, user_id: str) -> Optional[SessionSnapshot]:
        """Read the session snapshot from Redis.

        Args:
            user_id: Owner's user ID.

        Returns:
            The snapshot, or None if there is none or the read failed.
        """
        try:
            data = await self.redis_client.get_json(self._cache_key(user_id))
        except Exception as e:
            logger.error(f"Failed to read cached sessions for user {user_id}: {e}")
            return None

        if not data:
            return None
        return SessionSnapshot(
            sessions=[PokerSession.from_dict(item) for item in data.get("sessions", [])],
            synced=bool(data.get("synced", False)),
        )
