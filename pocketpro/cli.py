#!/usr/bin/env python3
"""CLI tool for PocketPro administration."""
import asyncio
import sys

from pocketpro.config import config
from pocketpro.db.connection import Database
from pocketpro.db.models import init_db
from pocketpro.state.game_store import GameStore
from pocketpro.state.redis_client import RedisClient
from pocketpro.state.session_store import SessionStore
from pocketpro.state.user_store import UserStore, User
from pocketpro.ledger.game import GameLedger
from pocketpro.ledger.standings import calculate_standings, format_standings_table
from pocketpro.income.tracker import IncomeTracker
from pocketpro.utils.formatting import format_currency, format_hours


async def _find_user(db: Database, email: str) -> User:
    user = await UserStore(db).get_user_by_email(email)
    if user is None:
        print(f"Error: User '{email}' not found.")
        sys.exit(1)
    return user


async def list_users():
    """List all users."""
    db = Database(config.database_url)
    await db.connect()
    try:
        users = await UserStore(db).list_users()

        if not users:
            print("No users found.")
            return

        print(f"\n{'Email':<32} {'ID':<36} {'Last sign-in'}")
        print("-" * 90)
        for u in users:
            signed_in = u.last_sign_in_at.strftime('%Y-%m-%d %H:%M') if u.last_sign_in_at else 'never'
            print(f"{u.email:<32} {u.id:<36} {signed_in}")
        print(f"\nTotal: {len(users)} users")
    finally:
        await db.disconnect()


async def get_user(email: str):
    """Get user details."""
    db = Database(config.database_url)
    await db.connect()
    try:
        user = await _find_user(db, email)

        print(f"\nUser: {user.email}")
        print(f"  ID:           {user.id}")
        print(f"  Created:      {user.created_at}")
        print(f"  Last sign-in: {user.last_sign_in_at or 'never'}")
    finally:
        await db.disconnect()


async def delete_user(email: str):
    """Delete a user and everything they recorded."""
    db = Database(config.database_url)
    await db.connect()
    try:
        if not await UserStore(db).delete_user(email):
            print(f"Error: User '{email}' not found.")
            sys.exit(1)
        print(f"Success: User '{email}' deleted.")
    finally:
        await db.disconnect()


async def show_ledger(email: str):
    """Print a user's current game standings."""
    db = Database(config.database_url)
    await db.connect()
    try:
        user = await _find_user(db, email)
        game = await GameStore(db).fetch_game(user.id)
        if game is None:
            print(f"{user.email} has no recorded games.")
            return

        ledger = GameLedger.from_dict(game["state"], game_id=game["id"])
        state = "active" if game["is_active"] else "ended"
        print(f"\nGame {game['id']} ({state})")
        print(f"Total money in play: {format_currency(ledger.pot_total)}\n")
        print(format_standings_table(calculate_standings(ledger)))
    finally:
        await db.disconnect()


async def show_income(email: str):
    """Print a user's sessions and income statistics."""
    db = Database(config.database_url)
    redis_client = RedisClient(config.redis_url)
    await db.connect()
    await redis_client.connect()
    try:
        user = await _find_user(db, email)
        sessions = await SessionStore(db, redis_client).fetch_sessions(user.id)
        if sessions is None:
            print(f"Error: Could not read sessions for {user.email}.")
            sys.exit(1)
        tracker = IncomeTracker(sessions)

        if not sessions:
            print(f"{user.email} has no recorded sessions.")
            return

        print(f"\n{'Date':<12} {'Hours':>7} {'Profit':>12} {'Per hour':>12}  Notes")
        print("-" * 70)
        for s in tracker.sessions:
            print(
                f"{s.date:<12} {format_hours(s.hours):>7} {format_currency(s.profit):>12} "
                f"{format_currency(s.hourly_rate):>12}  {s.notes or ''}"
            )

        stats = tracker.stats()
        print(
            f"\n{stats.total_sessions} sessions, {format_hours(stats.total_hours)}, "
            f"profit {format_currency(stats.total_profit)}, "
            f"{format_currency(stats.hourly_rate)}/h"
        )
    finally:
        await redis_client.disconnect()
        await db.disconnect()


async def end_game(email: str):
    """Mark a user's active game as ended."""
    db = Database(config.database_url)
    await db.connect()
    try:
        user = await _find_user(db, email)
        store = GameStore(db)
        game = await store.fetch_game(user.id)
        if game is None or not game["is_active"]:
            print(f"Error: {user.email} has no active game.")
            sys.exit(1)

        await store.end_game(user.id, game["id"])
        print(f"Success: Game {game['id']} ended.")
    finally:
        await db.disconnect()


async def migrate():
    """Create or upgrade the database schema."""
    db = Database(config.database_url)
    await db.connect()
    try:
        await init_db(db)
        print("Success: Database schema is up to date.")
    finally:
        await db.disconnect()


def print_usage():
    """Print usage information."""
    print("""
PocketPro CLI

Usage:
  python -m pocketpro.cli <command> [args]

Commands:
  migrate               Create or upgrade the database schema
  list                  List all users
  get <email>           Get user details
  delete <email>        Delete a user with their games and sessions
  ledger <email>        Show the user's current game standings
  income <email>        Show the user's sessions and statistics
  end-game <email>      End the user's active game

Examples:
  python -m pocketpro.cli list
  python -m pocketpro.cli ledger alice@example.com
  python -m pocketpro.cli income bob@example.com
""")


COMMANDS_WITH_EMAIL = {
    "get": get_user,
    "delete": delete_user,
    "ledger": show_ledger,
    "income": show_income,
    "end-game": end_game,
}


def main():
    """Main CLI entry point."""
    if len(sys.argv) < 2:
        print_usage()
        sys.exit(1)

    command = sys.argv[1].lower()

    if command == "list":
        asyncio.run(list_users())

    elif command == "migrate":
        asyncio.run(migrate())

    elif command in COMMANDS_WITH_EMAIL:
        if len(sys.argv) < 3:
            print("Error: Email required.")
            print(f"Usage: python -m pocketpro.cli {command} <email>")
            sys.exit(1)
        asyncio.run(COMMANDS_WITH_EMAIL[command](sys.argv[2]))

    elif command in ("help", "-h", "--help"):
        print_usage()

    else:
        print(f"Unknown command: {command}")
        print_usage()
        sys.exit(1)


if __name__ == "__main__":
    main()
