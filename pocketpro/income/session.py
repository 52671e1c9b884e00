"""Poker session record."""
import uuid
from dataclasses import dataclass
from datetime import date
from typing import Optional


@dataclass
class PokerSession:
    """One recorded playing period."""
    id: str
    date: str  # ISO date, YYYY-MM-DD
    hours: float
    profit: float
    notes: Optional[str] = None
    
    @classmethod
    def new(
        cls,
        hours: float,
        profit: float,
        notes: Optional[str] = None,
        on: Optional[date] = None,
    ) -> "PokerSession":
        """Create a session with a fresh id, dated ``on`` or today."""
        return cls(
            id=str(uuid.uuid4()),
            date=(on or date.today()).isoformat(),
            hours=hours,
            profit=profit,
            notes=notes,
        )
    
    @property
    def hourly_rate(self) -> Optional[float]:
        """Profit per hour, or None when no time was recorded."""
        if self.hours <= 0:
            return None
        return self.profit / self.hours
    
    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "date": self.date,
            "hours": self.hours,
            "profit": self.profit,
            "notes": self.notes,
        }
    
    @classmethod
    def from_dict(cls, data: dict) -> "PokerSession":
        """Create from dictionary."""
        return cls(
            id=str(data["id"]),
            date=str(data["date"]),
            hours=float(data["hours"]),
            profit=float(data["profit"]),
            notes=data.get("notes"),
        )
