"""Database connection utilities for the Chat Feed API."""

from typing import Optional
import asyncpg
from asyncpg import Pool

from ..config import Settings, get_settings


def get_database_url() -> str:
    """Get database URL from settings."""
    return get_settings().database_url


class DatabaseManager:
    """Manages database connections and pool."""

    def __init__(self):
        self.pool: Optional[Pool] = None

    async def initialize(self, settings: Optional[Settings] = None) -> None:
        """Initialize the database connection pool."""
        if self.pool is None:
            settings = settings or get_settings()
            self.pool = await asyncpg.create_pool(
                settings.database_url,
                min_size=settings.db_pool_min_size,
                max_size=settings.db_pool_max_size,
                command_timeout=settings.db_command_timeout
            )

    async def close(self) -> None:
        """Close the database connection pool."""
        if self.pool:
            await self.pool.close()
            self.pool = None


# Global database manager instance
db_manager = DatabaseManager()


async def get_db_pool() -> Pool:
    """Get the database connection pool."""
    if not db_manager.pool:
        await db_manager.initialize()
    return db_manager.pool
