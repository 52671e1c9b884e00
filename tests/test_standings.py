"""Tests for standings and display formatting."""
from pocketpro.ledger.game import GameLedger
from pocketpro.ledger.standings import calculate_standings, format_standings_table
from pocketpro.utils.formatting import format_currency, format_hours, format_signed


def _game() -> GameLedger:
    ledger = GameLedger()
    alice = ledger.add_player("Alice")
    bob = ledger.add_player("Bob")
    carol = ledger.add_player("Carol")
    ledger.add_buy_in(alice.id, 100)
    ledger.add_buy_in(bob.id, 50)
    ledger.add_buy_in(carol.id, 80)
    ledger.cash_out(alice.id, 60)
    ledger.cash_out(bob.id, 120)
    return ledger


class TestCalculateStandings:
    """Test standings calculation."""

    def test_sorted_by_net_with_active_last(self):
        """Test finished players sort by net and players in play come last."""
        standings = calculate_standings(_game())

        assert [s.player for s in standings] == ["Bob", "Alice", "Carol"]
        assert standings[0].net == 70
        assert standings[1].net == -40
        assert standings[2].net is None
        assert standings[2].is_active is True

    def test_standing_totals(self):
        """Test buy-ins and cash-outs per player."""
        standings = {s.player: s for s in calculate_standings(_game())}

        assert standings["Alice"].buy_ins == 100
        assert standings["Alice"].cash_out == 60
        assert standings["Carol"].cash_out is None

    def test_empty_game(self):
        """Test a game with no players has no standings."""
        assert calculate_standings(GameLedger()) == []


class TestFormatting:
    """Test text output."""

    def test_table_lists_every_player(self):
        """Test the table has a row per player."""
        table = format_standings_table(calculate_standings(_game()))
        lines = table.splitlines()

        assert len(lines) == 5
        assert "Bob" in lines[2]
        assert "+$70.00" in lines[2]
        assert "-$40.00" in lines[3]
        assert "in play" in lines[4]

    def test_empty_table(self):
        """Test the message for an empty game."""
        assert format_standings_table([]) == "No players in this game."

    def test_format_currency(self):
        """Test dollar formatting."""
        assert format_currency(1234.5) == "$1,234.50"
        assert format_currency(-40) == "-$40.00"
        assert format_currency(0) == "$0.00"
        assert format_currency(None) == "-"

    def test_format_signed(self):
        """Test explicit sign on results."""
        assert format_signed(20) == "+$20.00"
        assert format_signed(-5.5) == "-$5.50"

    def test_format_hours(self):
        """Test hours formatting."""
        assert format_hours(2.5) == "2.5h"
        assert format_hours(3) == "3.0h"
