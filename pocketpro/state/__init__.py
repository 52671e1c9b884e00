"""State management module."""
from .redis_client import RedisClient
from .autosave import SaveScheduler
from .repositories import GameRepository, SessionRepository
from .game_store import GameStore
from .session_store import SessionStore
from .user_store import UserStore

__all__ = [
    "RedisClient",
    "SaveScheduler",
    "GameRepository",
    "SessionRepository",
    "GameStore",
    "SessionStore",
    "UserStore",
]
