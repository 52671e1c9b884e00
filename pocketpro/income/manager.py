"""Income tracking for a signed-in user."""
from datetime import date
from typing import Any, Optional

from pocketpro.config import config
from pocketpro.income.session import PokerSession
from pocketpro.income.tracker import IncomeTracker, IncomeStats
from pocketpro.state.autosave import SaveScheduler
from pocketpro.state.repositories import SessionRepository
from pocketpro.utils.logger import get_logger

logger = get_logger(__name__)


class IncomeManager:
    """Owns one user's session list and keeps it persisted.

    Every change is written to the local snapshot cache and then saved to the
    database with full-replace semantics.
    """

    def __init__(
        self,
        user_id: str,
        store: SessionRepository,
        save_delay: Optional[float] = None,
    ):
        """Initialize income manager.

        Args:
            user_id: Owner's user ID.
            store: Session persistence.
            save_delay: Quiet period before a save; defaults to config.
        """
        self.user_id = user_id
        self.store = store
        self.tracker = IncomeTracker()
        self.loaded_from: Optional[str] = None
        delay = config.session_save_delay_seconds if save_delay is None else save_delay
        self.saver = SaveScheduler(self._save, delay=delay, name=f"sessions:{user_id}")

    async def load(self) -> None:
        """Load sessions from the database or the local snapshot.

        The snapshot wins when the database cannot be read, or when it holds
        changes that never reached the database. Those changes are then
        scheduled for saving.
        """
        sessions = await self.store.fetch_sessions(self.user_id)
        snapshot = await self.store.get_cached_sessions(self.user_id)

        if snapshot is not None and (sessions is None or not snapshot.synced):
            sessions = snapshot.sessions
            self.loaded_from = "cache"
        else:
            sessions = sessions or []
            self.loaded_from = "database" if sessions else None

        self.tracker = IncomeTracker(sessions)
        logger.info(f"Loaded {len(sessions)} sessions for user {self.user_id} from {self.loaded_from or 'nowhere'}")

        if snapshot is not None and not snapshot.synced:
            self.saver.mark_dirty()

    async def _save(self) -> bool:
        sessions = list(self.tracker.sessions)
        await self.store.cache_sessions(self.user_id, sessions)
        if not await self.store.save_sessions(self.user_id, sessions):
            return False
        await self.store.cache_sessions(self.user_id, sessions, synced=True)
        return True

    @property
    def sessions(self) -> list[PokerSession]:
        return self.tracker.sessions

    def stats(self) -> IncomeStats:
        return self.tracker.stats()

    def add_session(
        self,
        hours: Any,
        profit: Any,
        notes: Optional[str] = None,
        on: Optional[date] = None,
    ) -> PokerSession:
        session = self.tracker.add_session(hours, profit, notes=notes, on=on)
        self.saver.mark_dirty()
        return session

    def update_session(
        self,
        session_id: str,
        hours: Any = None,
        profit: Any = None,
        notes: Optional[str] = None,
        on: Optional[date] = None,
    ) -> PokerSession:
        session = self.tracker.update_session(session_id, hours=hours, profit=profit, notes=notes, on=on)
        self.saver.mark_dirty()
        return session

    def delete_session(self, session_id: str, confirmed: bool = False) -> bool:
        deleted = self.tracker.delete_session(session_id, confirmed=confirmed)
        if deleted:
            self.saver.mark_dirty()
        return deleted

    async def save(self) -> bool:
        """Save pending changes now.

        Returns:
            True if everything is saved.
        """
        return await self.saver.flush(force=True)

    def save_status(self) -> dict:
        """Persistence status for display."""
        return {
            "dirty": self.saver.dirty,
            "save_error": self.saver.last_error,
            "last_saved_at": self.saver.last_saved_at.isoformat() if self.saver.last_saved_at else None,
        }

    async def close(self) -> bool:
        """Stop the save timer and save whatever is pending."""
        return await self.saver.close()
