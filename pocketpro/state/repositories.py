from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Protocol

from pocketpro.income.session import PokerSession


@dataclass
class SessionSnapshot:
    """
    Locally cached copy of a user's session list.

    `synced` is True once the same list has been saved to the database, so an
    unsynced snapshot holds changes the database does not have yet.
    """

    sessions: List[PokerSession] = field(default_factory=list)
    synced: bool = False


class GameRepository(Protocol):
    """
    Persistence for a user's game ledgers.

    Implementations report failure through their return values (None/False)
    instead of raising, so callers can keep working from memory.
    """

    async def fetch_game(self, user_id: str) -> Optional[dict]:
        """
        Return the user's active game, or the most recently updated one.

        The dict carries `id`, `is_active`, `total_money_in_play` and `state`
        (the output of `GameLedger.to_dict`).
        """

        ...

    async def save_game(
        self,
        user_id: str,
        state: dict,
        pot_total: float,
    ) -> Optional[str]:
        """Upsert the user's single active game. Return its id, or None on failure."""

        ...

    async def end_game(self, user_id: str, game_id: str) -> bool:
        """Mark a game as no longer active."""

        ...


class SessionRepository(Protocol):
    """
    Persistence for a user's poker sessions.
    """

    async def fetch_sessions(self, user_id: str) -> Optional[List[PokerSession]]:
        """Return the user's sessions newest first, or None if the read failed."""

        ...

    async def save_sessions(self, user_id: str, sessions: List[PokerSession]) -> bool:
        """
        Replace every stored session of the user with `sessions`.

        Implementations should apply the delete and insert atomically.
        """

        ...

    async def cache_sessions(
        self,
        user_id: str,
        sessions: List[PokerSession],
        synced: bool = False,
    ) -> bool:
        """Keep a local snapshot of `sessions`. Return False if it was not written."""

        ...

    async def get_cached_sessions(self, user_id: str) -> Optional[SessionSnapshot]:
        """Return the snapshot, or None if there is none."""

        ...
