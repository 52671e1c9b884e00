"""Ledger player and transaction models."""
import math
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional


class TransactionType(str, Enum):
    """Types of money movements in a game."""
    BUY_IN = "buy_in"
    CASH_OUT = "cash_out"


@dataclass
class Transaction:
    """A single buy-in or cash-out event."""
    id: str
    player_id: str
    type: TransactionType
    amount: float
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    
    @classmethod
    def new(cls, player_id: str, transaction_type: TransactionType, amount: float) -> "Transaction":
        """Create a transaction with a fresh id and the current UTC time."""
        return cls(
            id=str(uuid.uuid4()),
            player_id=player_id,
            type=transaction_type,
            amount=amount,
        )
    
    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "player_id": self.player_id,
            "type": self.type.value,
            "amount": self.amount,
            "created_at": self.created_at.isoformat(),
        }
    
    @classmethod
    def from_dict(cls, data: dict) -> "Transaction":
        """Restore from dictionary."""
        return cls(
            id=data["id"],
            player_id=data["player_id"],
            type=TransactionType(data["type"]),
            amount=float(data["amount"]),
            created_at=datetime.fromisoformat(data["created_at"]),
        )


@dataclass
class Player:
    """A player in a home game.
    
    The player only records who they are and whether they are still in play.
    Money totals are derived from the transactions the ledger attaches to
    ``transactions``, so they can never drift from the event log.
    """
    
    id: str
    name: str
    is_active: bool = True
    transactions: list[Transaction] = field(default_factory=list, repr=False)
    
    @classmethod
    def new(cls, name: str) -> "Player":
        """Create an active player with a fresh id and no buy-ins."""
        return cls(id=str(uuid.uuid4()), name=name)
    
    @property
    def buy_ins(self) -> list[float]:
        """Buy-in amounts in the order they were made."""
        return [t.amount for t in self.transactions if t.type == TransactionType.BUY_IN]
    
    @property
    def total_buy_in(self) -> float:
        return math.fsum(self.buy_ins)
    
    @property
    def cashout(self) -> Optional[float]:
        """Total cashed out, or None if the player never cashed out."""
        amounts = [t.amount for t in self.transactions if t.type == TransactionType.CASH_OUT]
        if not amounts:
            return None
        return math.fsum(amounts)
    
    @property
    def net(self) -> Optional[float]:
        """Cash-out minus buy-ins for a player who has finished."""
        cashout = self.cashout
        if self.is_active or cashout is None:
            return None
        return cashout - self.total_buy_in
    
    def to_dict(self) -> dict:
        """Convert to dictionary, including derived totals for readers."""
        return {
            "id": self.id,
            "name": self.name,
            "is_active": self.is_active,
            "buy_ins": self.buy_ins,
            "total_buy_in": self.total_buy_in,
            "cashout": self.cashout,
        }
    
    @classmethod
    def from_dict(cls, data: dict) -> "Player":
        """Restore the roster entry; transactions are re-attached by the ledger."""
        return cls(
            id=data["id"],
            name=data["name"],
            is_active=data.get("is_active", True),
        )
