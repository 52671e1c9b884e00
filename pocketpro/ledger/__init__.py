"""Ledger module for home game buy-ins, cash-outs and standings."""
from .player import Player, Transaction, TransactionType
from .game import GameLedger, LedgerError, InsufficientPotError
from .standings import calculate_standings, format_standings_table, PlayerStanding

__all__ = [
    "Player",
    "Transaction",
    "TransactionType",
    "GameLedger",
    "LedgerError",
    "InsufficientPotError",
    "calculate_standings",
    "format_standings_table",
    "PlayerStanding",
]
