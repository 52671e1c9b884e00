"""Password hashing for email sign-in."""
from typing import Optional

import bcrypt

from pocketpro.config import config


def hash_password(password: str, rounds: Optional[int] = None) -> str:
    """Hash a password using bcrypt.
    
    Args:
        password: Plain text password.
        rounds: bcrypt cost factor; defaults to ``config.bcrypt_rounds``.
        
    Returns:
        Hashed password string.
    """
    salt = bcrypt.gensalt(rounds=rounds or config.bcrypt_rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    """Check a sign-in attempt against a stored hash.
    
    A malformed stored hash counts as a mismatch.
    """
    if not password or not hashed:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        return False
