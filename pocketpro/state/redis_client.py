"""Async Redis client wrapper."""
from __future__ import annotations
import json
from typing import Any, Optional
from redis.asyncio import Redis, from_url

from pocketpro.utils.logger import get_logger

logger = get_logger(__name__)


class RedisClient:
    """Async Redis client wrapper with JSON serialization."""
    
    def __init__(self, url: str):
        self.url = url
        self._redis: Optional[Redis] = None
    
    async def connect(self) -> None:
        """Connect to Redis."""
        if self._redis is None:
            self._redis = from_url(
                self.url,
                encoding="utf-8",
                decode_responses=True
            )
            logger.info(f"Connected to Redis at {self.url}")
    
    async def disconnect(self) -> None:
        """Disconnect from Redis."""
        if self._redis:
            await self._redis.aclose()
            self._redis = None
            logger.info("Disconnected from Redis")
    
    @property
    def redis(self) -> Redis:
        """Get Redis connection, raise if not connected."""
        if self._redis is None:
            raise RuntimeError("Redis not connected. Call connect() first.")
        return self._redis
    
    # Basic operations
    async def get(self, key: str) -> Optional[str]:
        """Get a string value."""
        return await self.redis.get(key)
    
    async def set(self, key: str, value: str, ex: Optional[int] = None) -> None:
        """Set a string value with optional expiry in seconds."""
        await self.redis.set(key, value, ex=ex)
    
    async def exists(self, key: str) -> bool:
        """Check if a key exists."""
        return await self.redis.exists(key) > 0
    
    # JSON operations
    async def get_json(self, key: str) -> Optional[Any]:
        """Get and deserialize JSON value."""
        value = await self.get(key)
        if value is None:
            return None
        return json.loads(value)
    
    async def set_json(self, key: str, value: Any, ex: Optional[int] = None) -> None:
        """Serialize and set JSON value."""
        await self.set(key, json.dumps(value), ex=ex)
