"""Request authentication: resolves the signed-in user from a bearer token."""
import hashlib
from typing import Optional
from dataclasses import dataclass

from pocketpro.auth.jwt_handler import refresh_access_token, verify_token, TokenError
from pocketpro.state.redis_client import RedisClient
from pocketpro.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class AuthenticatedUser:
    """Authenticated user context."""
    user_id: str
    email: str
    token: str


class AuthMiddleware:
    """Token authentication backed by a Redis revocation list."""
    
    def __init__(self, redis_client: RedisClient):
        self.redis_client = redis_client
    
    @staticmethod
    def _revoked_key(token: str) -> str:
        return f"revoked:{hashlib.sha256(token.encode()).hexdigest()}"
    
    async def authenticate(self, token: Optional[str]) -> AuthenticatedUser:
        """Return the current user for an access token.
        
        Args:
            token: JWT access token from the client.
            
        Returns:
            Authenticated user context.
            
        Raises:
            TokenError: If the token is missing, invalid or revoked.
        """
        if not token:
            raise TokenError("Not signed in")
        
        payload = verify_token(token, expected_type="access")
        
        if await self.redis_client.exists(self._revoked_key(token)):
            raise TokenError("Token has been revoked")
        
        logger.debug(f"User {payload.email} authenticated")
        
        return AuthenticatedUser(
            user_id=payload.user_id,
            email=payload.email,
            token=token,
        )
    
    async def revoke_token(self, token: str) -> None:
        """Revoke a token (sign out).
        
        Args:
            token: Token to revoke.
        """
        # Store revocation with TTL matching token expiry
        try:
            payload = verify_token(token)
            ttl = int((payload.exp - payload.iat).total_seconds())
            await self.redis_client.set(self._revoked_key(token), "1", ex=ttl)
            logger.info(f"Token revoked for user {payload.email}")
        except TokenError:
            # Token already expired, no need to revoke
            pass
    
    async def refresh(self, refresh_token: str) -> str:
        """Issue a new access token unless the refresh token was revoked.
        
        Raises:
            TokenError: If the refresh token is invalid or revoked.
        """
        access_token = refresh_access_token(refresh_token)
        
        if await self.redis_client.exists(self._revoked_key(refresh_token)):
            raise TokenError("Token has been revoked")
        
        return access_token
