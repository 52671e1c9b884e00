"""Calculate player standings (+/-)."""
from dataclasses import dataclass
from typing import Optional

from pocketpro.ledger.game import GameLedger
from pocketpro.utils.formatting import format_currency, format_signed


@dataclass
class PlayerStanding:
    """A player's standing in the game."""
    player_id: str
    player: str
    is_active: bool
    buy_ins: float
    cash_out: Optional[float]
    net: Optional[float]

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "player_id": self.player_id,
            "player": self.player,
            "is_active": self.is_active,
            "buy_ins": self.buy_ins,
            "cash_out": self.cash_out,
            "net": self.net,
        }


def calculate_standings(ledger: GameLedger) -> list[PlayerStanding]:
    """Calculate standings for all players in a game.

    Players still in play have no net yet and are listed after the
    finished ones.

    Args:
        ledger: The game ledger.

    Returns:
        List of player standings sorted by net (descending).
    """
    standings = [
        PlayerStanding(
            player_id=p.id,
            player=p.name,
            is_active=p.is_active,
            buy_ins=p.total_buy_in,
            cash_out=p.cashout,
            net=p.net,
        )
        for p in ledger.players.values()
    ]
    standings.sort(key=lambda s: (s.net is None, -(s.net or 0.0)))
    return standings


def format_standings_table(standings: list[PlayerStanding]) -> str:
    """Format standings as a text table.

    Args:
        standings: List of player standings.

    Returns:
        Formatted table string.
    """
    if not standings:
        return "No players in this game."

    lines = [
        "| Player     |    Buy-ins |  Cash-out |  Net (+/-) |",
        "|------------|------------|-----------|------------|",
    ]

    for s in standings:
        cash_out_str = format_currency(s.cash_out) if s.cash_out is not None else "-"
        if s.net is not None:
            net_str = format_signed(s.net)
        else:
            net_str = "in play"
        lines.append(
            f"| {s.player:<10} | {format_currency(s.buy_ins):>10} | {cash_out_str:>9} | {net_str:>10} |"
        )

    return "\n".join(lines)
