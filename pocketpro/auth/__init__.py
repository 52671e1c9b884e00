"""Authentication module."""
from .jwt_handler import (
    TokenError,
    TokenPayload,
    create_access_token,
    create_refresh_token,
    refresh_access_token,
    verify_token,
)
from .middleware import AuthMiddleware, AuthenticatedUser
from .password import hash_password, verify_password

__all__ = [
    "TokenError",
    "TokenPayload",
    "create_access_token",
    "create_refresh_token",
    "refresh_access_token",
    "verify_token",
    "AuthMiddleware",
    "AuthenticatedUser",
    "hash_password",
    "verify_password",
]
