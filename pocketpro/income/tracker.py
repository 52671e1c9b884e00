"""Personal poker income tracker."""
import math
from dataclasses import dataclass
from datetime import date
from typing import Any, Iterable, Optional

from pocketpro.income.session import PokerSession
from pocketpro.utils.logger import get_logger
from pocketpro.utils.numbers import parse_number

logger = get_logger(__name__)


class SessionError(ValueError):
    """A session operation was rejected. The session list is unchanged."""


class ConfirmationRequiredError(SessionError):
    """A destructive action was attempted without explicit confirmation."""


@dataclass
class IncomeStats:
    """Aggregate statistics over all recorded sessions."""
    total_sessions: int
    total_hours: float
    total_profit: float
    hourly_rate: float

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "total_sessions": self.total_sessions,
            "total_hours": self.total_hours,
            "total_profit": self.total_profit,
            "hourly_rate": self.hourly_rate,
        }


def _clean_notes(notes: Optional[str]) -> Optional[str]:
    if notes is None:
        return None
    notes = notes.strip()
    return notes or None


def _validate_hours(hours: Any) -> float:
    value = parse_number(hours)
    if value is None or value <= 0:
        raise SessionError("Hours must be a positive number")
    return value


def _validate_profit(profit: Any) -> float:
    value = parse_number(profit)
    if value is None:
        raise SessionError("Profit/loss must be a number")
    return value


class IncomeTracker:
    """Holds a user's poker sessions.

    Sessions are ordered by date, newest first. Sessions on the same date keep
    the order they were added in, most recent first.
    """

    def __init__(self, sessions: Optional[Iterable[PokerSession]] = None):
        self.sessions: list[PokerSession] = list(sessions or [])
        self._sort()

    def _sort(self) -> None:
        # ISO dates sort chronologically as strings; sort is stable
        self.sessions.sort(key=lambda s: s.date, reverse=True)

    def get_session(self, session_id: str) -> Optional[PokerSession]:
        for session in self.sessions:
            if session.id == session_id:
                return session
        return None

    def add_session(
        self,
        hours: Any,
        profit: Any,
        notes: Optional[str] = None,
        on: Optional[date] = None,
    ) -> PokerSession:
        """Record a new session in date order.

        Args:
            hours: Hours played; must be a positive number.
            profit: Profit (positive) or loss (negative).
            notes: Optional free text.
            on: Session date; defaults to today's local date.

        Returns:
            The new session.

        Raises:
            SessionError: If hours or profit are not valid numbers.
        """
        session = PokerSession.new(
            hours=_validate_hours(hours),
            profit=_validate_profit(profit),
            notes=_clean_notes(notes),
            on=on,
        )
        self.sessions.insert(0, session)
        self._sort()
        logger.info(f"Added session {session.id}: {session.hours}h, {session.profit:+}")
        return session

    def update_session(
        self,
        session_id: str,
        hours: Any = None,
        profit: Any = None,
        notes: Optional[str] = None,
        on: Optional[date] = None,
    ) -> PokerSession:
        """Edit fields of an existing session. Omitted fields are kept.

        Raises:
            SessionError: If the session is unknown or a value is invalid.
        """
        session = self.get_session(session_id)
        if session is None:
            raise SessionError(f"Session '{session_id}' not found")

        # Validate everything before touching the record
        new_hours = _validate_hours(hours) if hours is not None else session.hours
        new_profit = _validate_profit(profit) if profit is not None else session.profit

        session.hours = new_hours
        session.profit = new_profit
        if notes is not None:
            session.notes = _clean_notes(notes)
        if on is not None:
            session.date = on.isoformat()
            self._sort()

        logger.info(f"Updated session {session.id}")
        return session

    def delete_session(self, session_id: str, confirmed: bool = False) -> bool:
        """Delete a session.

        Args:
            session_id: Id of the session to delete.
            confirmed: Must be True; deletion cannot be undone.

        Returns:
            True if a session was removed, False if there was none with that id.

        Raises:
            ConfirmationRequiredError: If ``confirmed`` is not True.
        """
        if not confirmed:
            raise ConfirmationRequiredError("Deleting a session must be confirmed")

        remaining = [s for s in self.sessions if s.id != session_id]
        if len(remaining) == len(self.sessions):
            return False

        self.sessions = remaining
        logger.info(f"Deleted session {session_id}")
        return True

    def stats(self) -> IncomeStats:
        """Compute aggregate statistics over the current sessions."""
        total_hours = math.fsum(s.hours for s in self.sessions)
        total_profit = math.fsum(s.profit for s in self.sessions)
        return IncomeStats(
            total_sessions=len(self.sessions),
            total_hours=total_hours,
            total_profit=total_profit,
            hourly_rate=total_profit / total_hours if total_hours > 0 else 0.0,
        )
