"""Income module for personal poker session tracking."""
from .session import PokerSession
from .tracker import IncomeTracker, IncomeStats, SessionError, ConfirmationRequiredError

__all__ = [
    "PokerSession",
    "IncomeTracker",
    "IncomeStats",
    "SessionError",
    "ConfirmationRequiredError",
]
