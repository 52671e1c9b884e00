"""Home game ledger: players, buy-ins, the shared pot and cash-outs."""
import math
from typing import Any, Optional

from pocketpro.ledger.player import Player, Transaction, TransactionType
from pocketpro.utils.logger import get_logger
from pocketpro.utils.numbers import parse_number

logger = get_logger(__name__)

# Tolerance for comparing float money amounts against the pot
_EPSILON = 1e-9


class LedgerError(ValueError):
    """A ledger operation was rejected. Ledger state is unchanged."""


class InsufficientPotError(LedgerError):
    """A cash-out asked for more money than the pot holds."""


class GameLedger:
    """Cash ledger for one in-person game.

    The ledger keeps the roster and an ordered log of buy-in and cash-out
    transactions. The pot and every per-player total are computed from that
    log on each read.

    Cash-outs are settled with the simple policy: the cashing-out player
    leaves play and the amount comes out of the pot. Other players' buy-ins
    are never rescaled.
    """

    def __init__(self, game_id: Optional[str] = None):
        """Initialize an empty ledger.

        Args:
            game_id: Storage id of the game, once it has been saved.
        """
        self.game_id = game_id
        self.players: dict[str, Player] = {}
        self.transactions: list[Transaction] = []

    # Derived views

    @property
    def pot_total(self) -> float:
        """Money currently in play: all buy-ins minus all cash-outs."""
        buy_ins = math.fsum(t.amount for t in self.transactions if t.type == TransactionType.BUY_IN)
        cash_outs = math.fsum(t.amount for t in self.transactions if t.type == TransactionType.CASH_OUT)
        total = buy_ins - cash_outs
        return total if total > 0 else 0.0

    @property
    def active_players(self) -> list[Player]:
        return [p for p in self.players.values() if p.is_active]

    @property
    def inactive_players(self) -> list[Player]:
        return [p for p in self.players.values() if not p.is_active]

    def get_player(self, player_id: str) -> Optional[Player]:
        """Get a player by id.

        Args:
            player_id: Player's id.

        Returns:
            The player if present, None otherwise.
        """
        return self.players.get(player_id)

    def find_player_by_name(self, name: str) -> Optional[Player]:
        """Case-insensitive lookup over every player, active or not."""
        wanted = name.strip().casefold()
        for player in self.players.values():
            if player.name.casefold() == wanted:
                return player
        return None

    def _require_player(self, player_id: str) -> Player:
        player = self.players.get(player_id)
        if player is None:
            raise LedgerError(f"Player '{player_id}' not found")
        return player

    @staticmethod
    def _require_amount(amount: Any) -> float:
        value = parse_number(amount)
        if value is None or value <= 0:
            raise LedgerError("Amount must be positive")
        return value

    # Operations

    def add_player(self, name: str) -> Player:
        """Add a player to the game.

        Args:
            name: Display name; surrounding whitespace is dropped.

        Returns:
            The new, active player with no buy-ins.

        Raises:
            LedgerError: If the name is empty or already taken (case-insensitive).
        """
        clean_name = (name or "").strip()
        if not clean_name:
            raise LedgerError("Player name cannot be empty")
        if self.find_player_by_name(clean_name) is not None:
            raise LedgerError(f"Player '{clean_name}' already exists")

        player = Player.new(clean_name)
        self.players[player.id] = player
        logger.info(f"Added player {clean_name} ({player.id})")
        return player

    def add_buy_in(self, player_id: str, amount: Any) -> Transaction:
        """Record a buy-in for a player.

        Args:
            player_id: Player's id.
            amount: Positive amount added to the pot.

        Returns:
            The recorded transaction.

        Raises:
            LedgerError: If the player is unknown or the amount is not positive.
        """
        player = self._require_player(player_id)
        value = self._require_amount(amount)

        transaction = Transaction.new(player.id, TransactionType.BUY_IN, value)
        self.transactions.append(transaction)
        player.transactions.append(transaction)

        logger.info(
            f"Recorded buy-in: {player.name} +{value} "
            f"(total {player.total_buy_in}, pot {self.pot_total})"
        )
        return transaction

    def cash_out(self, player_id: str, amount: Any) -> Transaction:
        """Cash a player out of the game.

        The player becomes inactive and ``amount`` leaves the pot. Other
        players' buy-ins are not touched.

        Args:
            player_id: Player's id.
            amount: Amount the player takes from the pot.

        Returns:
            The recorded transaction.

        Raises:
            LedgerError: If the player is unknown or already out, or the amount
                is not positive.
            InsufficientPotError: If the amount exceeds the pot.
        """
        player = self._require_player(player_id)
        if not player.is_active:
            raise LedgerError(f"Player {player.name} is not in play")
        value = self._require_amount(amount)

        pot = self.pot_total
        if value > pot + _EPSILON:
            raise InsufficientPotError(
                f"Not enough money in the pot! Available: {pot:.2f}"
            )

        transaction = Transaction.new(player.id, TransactionType.CASH_OUT, value)
        self.transactions.append(transaction)
        player.transactions.append(transaction)
        player.is_active = False

        logger.info(f"Recorded cash-out: {player.name} -{value} (pot {self.pot_total})")
        return transaction

    def remove_player(self, player_id: str) -> Optional[Player]:
        """Delete a player from the roster.

        The player's transactions stay in the log, so the pot is unchanged.

        Args:
            player_id: Player's id.

        Returns:
            The removed player, or None if there was no such player.
        """
        player = self.players.pop(player_id, None)
        if player is not None:
            logger.info(f"Removed player {player.name} ({player.id})")
        return player

    def toggle_player_status(self, player_id: str) -> Player:
        """Flip a player between in play and out.

        Lets a cashed-out player rejoin. Recorded buy-ins and cash-outs are
        kept as they are.

        Raises:
            LedgerError: If the player is unknown.
        """
        player = self._require_player(player_id)
        player.is_active = not player.is_active
        logger.info(f"{player.name} is now {'in play' if player.is_active else 'out'}")
        return player

    # Serialization

    def to_dict(self) -> dict:
        """Convert to dictionary for storage."""
        return {
            "game_id": self.game_id,
            "players": [p.to_dict() for p in self.players.values()],
            "transactions": [t.to_dict() for t in self.transactions],
            "total_money_in_play": self.pot_total,
        }

    @classmethod
    def from_dict(cls, data: dict, game_id: Optional[str] = None) -> "GameLedger":
        """Restore a ledger from its stored form.

        Args:
            data: Output of ``to_dict``.
            game_id: Overrides the id found in ``data``.
        """
        ledger = cls(game_id=game_id or data.get("game_id"))
        for player_data in data.get("players", []):
            player = Player.from_dict(player_data)
            ledger.players[player.id] = player
        for transaction_data in data.get("transactions", []):
            transaction = Transaction.from_dict(transaction_data)
            ledger.transactions.append(transaction)
            player = ledger.players.get(transaction.player_id)
            if player is not None:
                player.transactions.append(transaction)
        return ledger
