"""
PostgreSQL database layer for the Jobly API.

Handles the connection pool lifecycle and bootstraps the companies and jobs
tables. Statements use positional $n placeholders, which asyncpg binds
natively.
"""

import asyncpg
from typing import Optional
from contextlib import asynccontextmanager
from config.settings import DATABASE_URL, DB_POOL_CONFIG
from logging_config.logger import get_logger

logger = get_logger(__name__)

SCHEMA_STATEMENTS = (
    """
    CREATE TABLE IF NOT EXISTS companies (
        handle VARCHAR(25) PRIMARY KEY CHECK (handle = lower(handle)),
        name TEXT UNIQUE NOT NULL,
        num_employees INTEGER CHECK (num_employees >= 0),
        description TEXT NOT NULL,
        logo_url TEXT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS jobs (
        id SERIAL PRIMARY KEY,
        title TEXT NOT NULL,
        salary INTEGER CHECK (salary >= 0),
        equity NUMERIC CHECK (equity <= 1.0),
        company_handle VARCHAR(25) NOT NULL
            REFERENCES companies ON DELETE CASCADE
    )
    """,
    """
    CREATE INDEX IF NOT EXISTS idx_jobs_company_handle ON jobs(company_handle)
    """,
)


# Module-level connection pool
_db_pool: Optional[asyncpg.Pool] = None


async def init_db(dsn: str = DATABASE_URL) -> asyncpg.Pool:
    """
    Create the connection pool and make sure the tables exist.

    Raises:
        asyncpg.PostgresError: If schema creation fails
        OSError: If the server cannot be reached
    """
    global _db_pool

    try:
        _db_pool = await asyncpg.create_pool(
            dsn,
            min_size=DB_POOL_CONFIG["min_size"],
            max_size=DB_POOL_CONFIG["max_size"],
        )

        async with _db_pool.acquire() as conn:
            for statement in SCHEMA_STATEMENTS:
                await conn.execute(statement)

        logger.info("Database initialized successfully with schema and indices")
        return _db_pool

    except (asyncpg.PostgresError, OSError) as e:
        logger.error(f"Failed to initialize database: {e}")
        raise


async def close_db() -> None:
    """
    Close the connection pool.

    Should be called during application shutdown.
    """
    global _db_pool
    if _db_pool:
        try:
            await _db_pool.close()
            logger.info("Database pool closed")
        except asyncpg.PostgresError as e:
            logger.error(f"Error closing database pool: {e}")
        finally:
            _db_pool = None


@asynccontextmanager
async def get_db():
    """
    Acquire a pooled connection for the duration of the block.

    Yields:
        asyncpg.Connection: Active database connection
    """
    if _db_pool is None:
        raise RuntimeError("Database not initialized. Call init_db() first.")
    async with _db_pool.acquire() as conn:
        yield conn


async def ping() -> bool:
    """Run a trivial query; used by the health check."""
    async with get_db() as db:
        return await db.fetchval("SELECT 1") == 1
