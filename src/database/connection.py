"""
Database connection and pool management
"""

import asyncpg
import logging

from config.settings import (
    DATABASE_URL,
    DB_POOL_MIN_SIZE,
    DB_POOL_MAX_SIZE,
    DB_COMMAND_TIMEOUT,
    DB_AUTO_INIT,
)
from database.init_db import create_schema

logger = logging.getLogger(__name__)


async def init_database(dsn: str = DATABASE_URL) -> asyncpg.Pool:
    """
    Open the connection pool and make sure the schema exists.

    The pool is bounded by DB_POOL_MAX_SIZE; callers beyond that
    wait in the pool's acquire queue.
    """
    db_pool = await asyncpg.create_pool(
        dsn,
        min_size=DB_POOL_MIN_SIZE,
        max_size=DB_POOL_MAX_SIZE,
        command_timeout=DB_COMMAND_TIMEOUT,
        statement_cache_size=0  # pgbouncer compatibility
    )

    # Test connection
    async with db_pool.acquire() as conn:
        await conn.fetchval("SELECT 1")
        if DB_AUTO_INIT:
            await create_schema(conn)

    logger.info("Database initialized successfully")
    return db_pool


async def close_database(db_pool: asyncpg.Pool) -> None:
    """Close database connection pool"""
    if db_pool:
        await db_pool.close()
    logger.info("Database connections closed")
