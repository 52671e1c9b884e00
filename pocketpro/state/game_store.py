"""Game ledger persistence."""
import json
import uuid
from decimal import Decimal
from typing import Optional

from pocketpro.db.connection import Database
from pocketpro.utils.logger import get_logger

logger = get_logger(__name__)


class GameStore:
    """Persists each user's game ledgers to PostgreSQL."""

    def __init__(self, db: Database):
        self.db = db

    async def save_game(self, user_id: str, state: dict, pot_total: float) -> Optional[str]:
        """Update the user's active game, or create one if there is none.

        Args:
            user_id: Owner's user ID.
            state: Serialized ledger (``GameLedger.to_dict``).
            pot_total: Current pot, stored alongside for quick reads.

        Returns:
            The game id, or None if the save failed.
        """
        owner = uuid.UUID(user_id)
        payload = json.dumps(state)
        pot = Decimal(str(round(pot_total, 2)))

        try:
            async with self.db.transaction() as conn:
                game_id = await conn.fetchval(
                    "SELECT id FROM games WHERE user_id = $1 AND is_active = TRUE",
                    owner
                )

                if game_id:
                    await conn.execute(
                        """
                        UPDATE games
                        SET state = $1::jsonb, total_money_in_play = $2, updated_at = NOW()
                        WHERE id = $3
                        """,
                        payload,
                        pot,
                        game_id
                    )
                else:
                    game_id = await conn.fetchval(
                        """
                        INSERT INTO games (user_id, state, total_money_in_play, is_active)
                        VALUES ($1, $2::jsonb, $3, TRUE)
                        RETURNING id
                        """,
                        owner,
                        payload,
                        pot
                    )
                    logger.info(f"Created game {game_id} for user {user_id}")
        except Exception as e:
            logger.error(f"Failed to save game for user {user_id}: {e}")
            return None

        logger.debug(f"Saved game {game_id} for user {user_id} (pot {pot})")
        return str(game_id)

    async def fetch_game(self, user_id: str) -> Optional[dict]:
        """Get the user's active game, falling back to the most recent one.

        Args:
            user_id: Owner's user ID.

        Returns:
            Game dict with ``id``, ``is_active``, ``total_money_in_play`` and
            ``state``, or None if the user has no games or the read failed.
        """
        try:
            row = await self.db.fetchrow(
                """
                SELECT id, state, total_money_in_play, is_active, created_at, updated_at
                FROM games
                WHERE user_id = $1
                ORDER BY is_active DESC, updated_at DESC
                LIMIT 1
                """,
                uuid.UUID(user_id)
            )
        except Exception as e:
            logger.error(f"Failed to fetch game for user {user_id}: {e}")
            return None

        if row is None:
            return None

        state = row["state"]
        if isinstance(state, str):
            state = json.loads(state)

        return {
            "id": str(row["id"]),
            "is_active": row["is_active"],
            "total_money_in_play": float(row["total_money_in_play"]),
            "state": state,
            "created_at": row["created_at"],
            "updated_at": row["updated_at"],
        }

    async def end_game(self, user_id: str, game_id: str) -> bool:
        """Mark a game as finished.

        Args:
            user_id: Owner's user ID.
            game_id: Game to end.

        Returns:
            True if the game was found and ended.
        """
        try:
            result = await self.db.execute(
                "UPDATE games SET is_active = FALSE, updated_at = NOW() WHERE id = $1 AND user_id = $2",
                uuid.UUID(game_id),
                uuid.UUID(user_id)
            )
        except Exception as e:
            logger.error(f"Failed to end game {game_id}: {e}")
            return False

        if result == "UPDATE 0":
            return False

        logger.info(f"Ended game {game_id} for user {user_id}")
        return True
