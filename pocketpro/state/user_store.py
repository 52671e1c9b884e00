"""User persistence store using PostgreSQL."""
import uuid
from typing import Optional
from dataclasses import dataclass
from datetime import datetime

from pocketpro.db.connection import Database
from pocketpro.auth.password import hash_password, verify_password
from pocketpro.auth.jwt_handler import create_access_token, create_refresh_token
from pocketpro.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class User:
    """User model."""
    id: str
    email: str
    password_hash: str
    created_at: datetime
    last_sign_in_at: Optional[datetime] = None

    @classmethod
    def from_record(cls, record) -> "User":
        """Create from database record."""
        return cls(
            id=str(record["id"]),
            email=record["email"],
            password_hash=record["password_hash"],
            created_at=record["created_at"],
            last_sign_in_at=record["last_sign_in_at"],
        )

    def to_profile(self) -> dict:
        """Public profile fields (no password hash)."""
        return {
            "id": self.id,
            "email": self.email,
            "created_at": self.created_at.isoformat(),
            "last_sign_in_at": self.last_sign_in_at.isoformat() if self.last_sign_in_at else None,
        }


@dataclass
class AuthTokens:
    """Authentication tokens."""
    user_id: str
    email: str
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class UserStore:
    """User persistence and authentication using PostgreSQL."""

    def __init__(self, db: Database):
        self.db = db

    @staticmethod
    def _issue_tokens(user_id: str, email: str) -> AuthTokens:
        return AuthTokens(
            user_id=user_id,
            email=email,
            access_token=create_access_token(user_id, email),
            refresh_token=create_refresh_token(user_id, email),
        )

    async def register(self, email: str, password: str) -> AuthTokens:
        """Create an account and sign it in.

        Args:
            email: Unique email address (used for login).
            password: Plain text password.

        Returns:
            Authentication tokens.

        Raises:
            ValueError: If the email is malformed, taken, or the password is empty.
        """
        email = email.strip().lower()
        if "@" not in email:
            raise ValueError("A valid email address is required")
        if not password:
            raise ValueError("Password cannot be empty")

        existing = await self.db.fetchrow(
            "SELECT id FROM users WHERE LOWER(email) = LOWER($1)",
            email
        )
        if existing:
            raise ValueError(f"Email '{email}' is already registered")

        user_id = uuid.uuid4()
        pw_hash = hash_password(password)

        await self.db.execute(
            """
            INSERT INTO users (id, email, password_hash, last_sign_in_at)
            VALUES ($1, $2, $3, NOW())
            """,
            user_id, email, pw_hash
        )

        logger.info(f"Registered new user: {email}")

        return self._issue_tokens(str(user_id), email)

    async def login(self, email: str, password: str) -> AuthTokens:
        """Authenticate a user and return tokens.

        Args:
            email: User's email address.
            password: Plain text password.

        Returns:
            Authentication tokens.

        Raises:
            ValueError: If credentials are invalid.
        """
        user = await self.get_user_by_email(email)
        if user is None:
            raise ValueError("Invalid email or password")

        if not verify_password(password, user.password_hash):
            raise ValueError("Invalid email or password")

        await self.db.execute(
            "UPDATE users SET last_sign_in_at = NOW() WHERE id = $1",
            uuid.UUID(user.id)
        )

        logger.info(f"User signed in: {user.email}")

        return self._issue_tokens(user.id, user.email)

    async def get_user_by_id(self, user_id: str) -> Optional[User]:
        """Get user by ID.

        Args:
            user_id: User's ID.

        Returns:
            User if found, None otherwise.
        """
        try:
            record = await self.db.fetchrow(
                "SELECT * FROM users WHERE id = $1",
                uuid.UUID(user_id)
            )
            if record is None:
                return None
            return User.from_record(record)
        except ValueError:
            return None

    async def get_user_by_email(self, email: str) -> Optional[User]:
        """Get user by email.

        Args:
            email: User's email address.

        Returns:
            User if found, None otherwise.
        """
        record = await self.db.fetchrow(
            "SELECT * FROM users WHERE LOWER(email) = LOWER($1)",
            email.strip()
        )
        if record is None:
            return None
        return User.from_record(record)

    async def list_users(self) -> list[User]:
        """List all users.

        Returns:
            List of all users.
        """
        records = await self.db.fetch("SELECT * FROM users ORDER BY created_at")
        return [User.from_record(r) for r in records]

    async def delete_user(self, email: str) -> bool:
        """Delete a user together with their games and sessions.

        Args:
            email: User's email address.

        Returns:
            True if a user was deleted.
        """
        result = await self.db.execute(
            "DELETE FROM users WHERE LOWER(email) = LOWER($1)",
            email.strip()
        )
        if result == "DELETE 0":
            return False
        logger.info(f"Deleted user {email}")
        return True
