"""Tests for the game ledger."""
import pytest

from pocketpro.ledger.game import GameLedger, LedgerError, InsufficientPotError
from pocketpro.ledger.player import Player, Transaction, TransactionType


@pytest.fixture
def ledger():
    """Ledger with Alice and Bob bought in for 100 and 50."""
    ledger = GameLedger()
    alice = ledger.add_player("Alice")
    bob = ledger.add_player("Bob")
    ledger.add_buy_in(alice.id, 100)
    ledger.add_buy_in(bob.id, 50)
    return ledger


def _player(ledger: GameLedger, name: str) -> Player:
    return ledger.find_player_by_name(name)


class TestAddPlayer:
    """Test adding players."""

    def test_new_player_is_active_with_no_buy_ins(self):
        """Test a new player starts in play with nothing bought in."""
        ledger = GameLedger()
        player = ledger.add_player("  Alice ")

        assert player.name == "Alice"
        assert player.is_active is True
        assert player.buy_ins == []
        assert player.total_buy_in == 0
        assert player.cashout is None
        assert ledger.active_players == [player]

    def test_empty_name_rejected(self):
        """Test blank names are rejected."""
        ledger = GameLedger()

        with pytest.raises(LedgerError):
            ledger.add_player("   ")
        assert ledger.players == {}

    def test_duplicate_name_rejected_case_insensitive(self, ledger):
        """Test names are unique regardless of case."""
        with pytest.raises(LedgerError) as exc_info:
            ledger.add_player("alice")

        assert "already exists" in str(exc_info.value)
        assert len(ledger.players) == 2

    def test_duplicate_of_inactive_player_rejected(self, ledger):
        """Test a cashed-out player's name stays taken."""
        alice = _player(ledger, "Alice")
        ledger.cash_out(alice.id, 10)

        with pytest.raises(LedgerError):
            ledger.add_player("ALICE")


class TestBuyIns:
    """Test recording buy-ins."""

    def test_total_buy_in_is_sum_of_amounts(self):
        """Test total buy-in adds up every buy-in."""
        ledger = GameLedger()
        player = ledger.add_player("Alice")
        for amount in (20, 30.5, "49.5"):
            ledger.add_buy_in(player.id, amount)

        assert player.buy_ins == [20.0, 30.5, 49.5]
        assert player.total_buy_in == 100.0
        assert ledger.pot_total == 100.0

    @pytest.mark.parametrize("amount", [0, -5, "abc", None, float("nan"), True])
    def test_invalid_amount_rejected(self, ledger, amount):
        """Test non-positive or non-numeric amounts leave the ledger unchanged."""
        alice = _player(ledger, "Alice")

        with pytest.raises(LedgerError):
            ledger.add_buy_in(alice.id, amount)

        assert alice.total_buy_in == 100
        assert ledger.pot_total == 150

    def test_unknown_player_rejected(self, ledger):
        """Test buy-in for a missing player is rejected."""
        with pytest.raises(LedgerError):
            ledger.add_buy_in("missing", 10)
        assert ledger.pot_total == 150

    def test_inactive_player_can_buy_in(self, ledger):
        """Test buy-ins are not limited to players in play."""
        alice = _player(ledger, "Alice")
        ledger.cash_out(alice.id, 20)
        ledger.add_buy_in(alice.id, 40)

        assert alice.total_buy_in == 140
        assert ledger.pot_total == 170


class TestCashOut:
    """Test cash-outs under the simple policy."""

    def test_cash_out_example(self, ledger):
        """Test Alice cashing out 120 from a 150 pot."""
        alice = _player(ledger, "Alice")
        bob = _player(ledger, "Bob")

        assert ledger.pot_total == 150

        ledger.cash_out(alice.id, 120)

        assert ledger.pot_total == 30
        assert alice.is_active is False
        assert alice.cashout == 120
        assert alice.net == 20
        assert bob.total_buy_in == 50
        assert bob.is_active is True

    def test_cash_out_more_than_pot_rejected(self, ledger):
        """Test cash-out larger than the pot fails and changes nothing."""
        alice = _player(ledger, "Alice")

        with pytest.raises(InsufficientPotError) as exc_info:
            ledger.cash_out(alice.id, 150.01)

        assert "Available: 150.00" in str(exc_info.value)
        assert alice.is_active is True
        assert alice.cashout is None
        assert ledger.pot_total == 150

    def test_cash_out_entire_pot(self, ledger):
        """Test the pot can be emptied exactly."""
        ledger.cash_out(_player(ledger, "Alice").id, 150)

        assert ledger.pot_total == 0

    def test_float_amounts_empty_pot_exactly(self):
        """Test pot arithmetic does not leave float dust."""
        ledger = GameLedger()
        player = ledger.add_player("Alice")
        for _ in range(10):
            ledger.add_buy_in(player.id, 0.1)

        ledger.cash_out(player.id, 1.0)

        assert ledger.pot_total == 0

    def test_exactly_one_more_inactive(self, ledger):
        """Test a cash-out deactivates only the cashing-out player."""
        before = {p.id: p.total_buy_in for p in ledger.players.values()}
        inactive_before = len(ledger.inactive_players)

        ledger.cash_out(_player(ledger, "Bob").id, 60)

        assert len(ledger.inactive_players) == inactive_before + 1
        assert {p.id: p.total_buy_in for p in ledger.players.values()} == before

    def test_inactive_player_cannot_cash_out_again(self, ledger):
        """Test cashing out twice without rejoining is rejected."""
        alice = _player(ledger, "Alice")
        ledger.cash_out(alice.id, 50)

        with pytest.raises(LedgerError) as exc_info:
            ledger.cash_out(alice.id, 10)

        assert "not in play" in str(exc_info.value)
        assert alice.cashout == 50

    def test_rejoined_player_cash_outs_accumulate(self, ledger):
        """Test a rejoined player's second cash-out adds to the first."""
        alice = _player(ledger, "Alice")
        ledger.cash_out(alice.id, 50)
        ledger.toggle_player_status(alice.id)
        ledger.cash_out(alice.id, 30)

        assert alice.cashout == 80
        assert ledger.pot_total == 70

    def test_unknown_player_rejected(self, ledger):
        """Test cash-out for a missing player is rejected."""
        with pytest.raises(LedgerError):
            ledger.cash_out("missing", 10)

    def test_pot_never_negative(self, ledger):
        """Test repeated cash-outs can never drive the pot below zero."""
        alice = _player(ledger, "Alice")
        bob = _player(ledger, "Bob")
        ledger.cash_out(alice.id, 140)

        with pytest.raises(InsufficientPotError):
            ledger.cash_out(bob.id, 11)

        assert ledger.pot_total == 10


class TestRemoveAndToggle:
    """Test removing and toggling players."""

    def test_remove_player_keeps_pot(self, ledger):
        """Test removing a player does not change the money in play."""
        bob = _player(ledger, "Bob")

        removed = ledger.remove_player(bob.id)

        assert removed is bob
        assert ledger.get_player(bob.id) is None
        assert ledger.pot_total == 150

    def test_remove_unknown_player_is_noop(self, ledger):
        """Test removing a missing player does nothing."""
        assert ledger.remove_player("missing") is None
        assert len(ledger.players) == 2

    def test_removed_name_can_be_reused(self, ledger):
        """Test a removed player's name is free again."""
        ledger.remove_player(_player(ledger, "Bob").id)

        player = ledger.add_player("Bob")
        assert player.total_buy_in == 0

    def test_toggle_flips_status(self, ledger):
        """Test toggling moves a player out and back in."""
        alice = _player(ledger, "Alice")

        ledger.toggle_player_status(alice.id)
        assert alice.is_active is False
        assert alice in ledger.inactive_players

        ledger.toggle_player_status(alice.id)
        assert alice.is_active is True
        assert alice.total_buy_in == 100

    def test_toggle_unknown_player_rejected(self, ledger):
        """Test toggling a missing player raises."""
        with pytest.raises(LedgerError):
            ledger.toggle_player_status("missing")

    def test_net_only_for_finished_players(self, ledger):
        """Test net is undefined until the player has cashed out."""
        alice = _player(ledger, "Alice")
        assert alice.net is None

        ledger.toggle_player_status(alice.id)
        assert alice.net is None

        ledger.toggle_player_status(alice.id)
        ledger.cash_out(alice.id, 70)
        assert alice.net == -30


class TestSerialization:
    """Test ledger storage format."""

    def test_restore_keeps_players_and_pot(self, ledger):
        """Test a restored ledger derives the same totals."""
        alice = _player(ledger, "Alice")
        ledger.cash_out(alice.id, 120)
        ledger.game_id = "game-1"

        restored = GameLedger.from_dict(ledger.to_dict())

        assert restored.game_id == "game-1"
        assert restored.pot_total == 30
        restored_alice = restored.get_player(alice.id)
        assert restored_alice.is_active is False
        assert restored_alice.cashout == 120
        assert restored_alice.total_buy_in == 100
        assert restored.find_player_by_name("bob").total_buy_in == 50

    def test_restore_keeps_events_of_removed_players(self, ledger):
        """Test transactions of removed players still count toward the pot."""
        ledger.remove_player(_player(ledger, "Bob").id)

        restored = GameLedger.from_dict(ledger.to_dict(), game_id="game-2")

        assert restored.game_id == "game-2"
        assert len(restored.players) == 1
        assert restored.pot_total == 150

    def test_stored_form_includes_pot(self, ledger):
        """Test the stored form carries the pot for quick reads."""
        data = ledger.to_dict()

        assert data["total_money_in_play"] == 150
        assert len(data["transactions"]) == 2
        assert {p["name"] for p in data["players"]} == {"Alice", "Bob"}

    def test_transaction_round_trip(self):
        """Test a transaction survives serialization."""
        transaction = Transaction.new("p1", TransactionType.CASH_OUT, 25.0)

        restored = Transaction.from_dict(transaction.to_dict())

        assert restored == transaction
