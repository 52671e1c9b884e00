"""Ledger management for a signed-in user."""
from typing import Any, Optional

from pocketpro.config import config
from pocketpro.ledger.game import GameLedger
from pocketpro.ledger.player import Player, Transaction
from pocketpro.ledger.standings import calculate_standings, PlayerStanding
from pocketpro.state.autosave import SaveScheduler
from pocketpro.state.repositories import GameRepository
from pocketpro.utils.logger import get_logger

logger = get_logger(__name__)


class LedgerManager:
    """Owns one user's game ledger and keeps it persisted.

    Mutations apply to the in-memory ledger at once and schedule a debounced
    save. The stored game is read once by ``load``; after that the local
    ledger is authoritative until it is saved again.
    """

    def __init__(
        self,
        user_id: str,
        store: GameRepository,
        autosave_delay: Optional[float] = None,
    ):
        """Initialize ledger manager.

        Args:
            user_id: Owner's user ID.
            store: Game persistence.
            autosave_delay: Quiet period before a save; defaults to config.
        """
        self.user_id = user_id
        self.store = store
        self.ledger = GameLedger()
        self.loaded = False
        delay = config.autosave_delay_seconds if autosave_delay is None else autosave_delay
        self.saver = SaveScheduler(self._save, delay=delay, name=f"ledger:{user_id}")

    async def load(self) -> None:
        """Restore the user's active (or most recent) game from storage."""
        game = await self.store.fetch_game(self.user_id)
        if game is not None:
            self.ledger = GameLedger.from_dict(game["state"], game_id=game["id"])
            logger.info(
                f"Loaded game {game['id']} for user {self.user_id} "
                f"({len(self.ledger.players)} players, pot {self.ledger.pot_total})"
            )
        self.loaded = True

    async def _save(self) -> bool:
        game_id = await self.store.save_game(
            self.user_id,
            self.ledger.to_dict(),
            self.ledger.pot_total,
        )
        if game_id is None:
            return False
        self.ledger.game_id = game_id
        return True

    def add_player(self, name: str) -> Player:
        player = self.ledger.add_player(name)
        self.saver.mark_dirty()
        return player

    def add_buy_in(self, player_id: str, amount: Any) -> Transaction:
        transaction = self.ledger.add_buy_in(player_id, amount)
        self.saver.mark_dirty()
        return transaction

    def cash_out(self, player_id: str, amount: Any) -> Transaction:
        transaction = self.ledger.cash_out(player_id, amount)
        self.saver.mark_dirty()
        return transaction

    def remove_player(self, player_id: str) -> Optional[Player]:
        player = self.ledger.remove_player(player_id)
        if player is not None:
            self.saver.mark_dirty()
        return player

    def toggle_player_status(self, player_id: str) -> Player:
        player = self.ledger.toggle_player_status(player_id)
        self.saver.mark_dirty()
        return player

    def standings(self) -> list[PlayerStanding]:
        return calculate_standings(self.ledger)

    async def save(self) -> bool:
        """Save pending changes now.

        Returns:
            True if everything is saved.
        """
        return await self.saver.flush(force=True)

    async def end_game(self) -> bool:
        """Finish the current game and start an empty one.

        Pending changes are saved first. If that save fails the game is kept
        so nothing is lost.

        Returns:
            True if the game was ended.
        """
        if not await self.saver.flush():
            return False

        game_id = self.ledger.game_id
        if game_id is not None and not await self.store.end_game(self.user_id, game_id):
            return False

        logger.info(f"User {self.user_id} ended game {game_id}")
        self.ledger = GameLedger()
        return True

    def save_status(self) -> dict:
        """Persistence status for display."""
        return {
            "dirty": self.saver.dirty,
            "save_error": self.saver.last_error,
            "last_saved_at": self.saver.last_saved_at.isoformat() if self.saver.last_saved_at else None,
        }

    async def close(self) -> bool:
        """Stop the autosave timer and save whatever is pending."""
        return await self.saver.close()
