"""PostgreSQL database connection pool."""
from contextlib import asynccontextmanager
from typing import Optional, Any, AsyncIterator
import asyncpg

from pocketpro.utils.logger import get_logger

logger = get_logger(__name__)


class Database:
    """Async PostgreSQL connection pool manager.
    
    One instance is created per process (by the application lifespan or the
    CLI) and handed to the stores that need it.
    """
    
    def __init__(self, dsn: str, min_size: int = 2, max_size: int = 10):
        self.dsn = dsn
        self.min_size = min_size
        self.max_size = max_size
        self._pool: Optional[asyncpg.Pool] = None
    
    async def connect(self) -> None:
        """Create connection pool."""
        if self._pool is None:
            self._pool = await asyncpg.create_pool(
                self.dsn,
                min_size=self.min_size,
                max_size=self.max_size,
            )
            logger.info("Connected to PostgreSQL")
    
    async def disconnect(self) -> None:
        """Close connection pool."""
        if self._pool:
            await self._pool.close()
            self._pool = None
            logger.info("Disconnected from PostgreSQL")
    
    @property
    def pool(self) -> asyncpg.Pool:
        """Get connection pool, raise if not connected."""
        if self._pool is None:
            raise RuntimeError("Database not connected. Call connect() first.")
        return self._pool
    
    async def execute(self, query: str, *args: Any) -> str:
        """Execute a query without returning results."""
        async with self.pool.acquire() as conn:
            return await conn.execute(query, *args)
    
    async def fetch(self, query: str, *args: Any) -> list[asyncpg.Record]:
        """Execute a query and return all results."""
        async with self.pool.acquire() as conn:
            return await conn.fetch(query, *args)
    
    async def fetchrow(self, query: str, *args: Any) -> Optional[asyncpg.Record]:
        """Execute a query and return first result."""
        async with self.pool.acquire() as conn:
            return await conn.fetchrow(query, *args)
    
    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[asyncpg.Connection]:
        """Acquire a connection and run the block inside a transaction."""
        async with self.pool.acquire() as conn:
            async with conn.transaction():
                yield conn
