"""Shared fixtures: in-memory stand-ins for the PostgreSQL and Redis stores."""
import uuid
from typing import Optional

import pytest

from pocketpro.income.session import PokerSession
from pocketpro.state.repositories import SessionSnapshot


class InMemoryGameStore:
    """GameRepository kept in a dict."""

    def __init__(self):
        self.games: dict[str, dict] = {}
        self.fail_saves = False
        self.save_calls = 0

    async def fetch_game(self, user_id: str) -> Optional[dict]:
        games = [g for g in self.games.values() if g["user_id"] == user_id]
        if not games:
            return None
        games.sort(key=lambda g: (g["is_active"], g["seq"]), reverse=True)
        game = games[0]
        return {
            "id": game["id"],
            "is_active": game["is_active"],
            "total_money_in_play": game["total_money_in_play"],
            "state": game["state"],
        }

    async def save_game(self, user_id: str, state: dict, pot_total: float) -> Optional[str]:
        self.save_calls += 1
        if self.fail_saves:
            return None
        active = [g for g in self.games.values() if g["user_id"] == user_id and g["is_active"]]
        if active:
            game = active[0]
        else:
            game = {"id": str(uuid.uuid4()), "user_id": user_id, "is_active": True}
            self.games[game["id"]] = game
        game.update(state=state, total_money_in_play=pot_total, seq=self.save_calls)
        return game["id"]

    async def end_game(self, user_id: str, game_id: str) -> bool:
        game = self.games.get(game_id)
        if game is None or game["user_id"] != user_id:
            return False
        game["is_active"] = False
        return True


class InMemorySessionStore:
    """SessionRepository kept in dicts, with a separate snapshot cache."""

    def __init__(self):
        self.sessions: dict[str, list[PokerSession]] = {}
        self.cache: dict[str, SessionSnapshot] = {}
        self.fail_saves = False
        self.fail_reads = False
        self.fail_cache_writes = False

    async def fetch_sessions(self, user_id: str) -> Optional[list[PokerSession]]:
        if self.fail_reads:
            return None
        return [PokerSession.from_dict(s.to_dict()) for s in self.sessions.get(user_id, [])]

    async def save_sessions(self, user_id: str, sessions: list[PokerSession]) -> bool:
        if self.fail_saves:
            return False
        self.sessions[user_id] = [PokerSession.from_dict(s.to_dict()) for s in sessions]
        return True

    async def cache_sessions(
        self,
        user_id: str,
        sessions: list[PokerSession],
        synced: bool = False,
    ) -> bool:
        if self.fail_cache_writes:
            return False
        self.cache[user_id] = SessionSnapshot(
            sessions=[PokerSession.from_dict(s.to_dict()) for s in sessions],
            synced=synced,
        )
        return True

    async def get_cached_sessions(self, user_id: str) -> Optional[SessionSnapshot]:
        return self.cache.get(user_id)


@pytest.fixture
def game_store():
    """Empty in-memory game store."""
    return InMemoryGameStore()


@pytest.fixture
def session_store():
    """Empty in-memory session store."""
    return InMemorySessionStore()
