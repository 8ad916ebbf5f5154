"""Postgres pool lifecycle and schema migrations.

The pool is created once at startup, handed to each service's constructor,
and closed at shutdown. Migrations are plain SQL files under ``migrations/``,
applied in filename order and recorded in ``schema_migrations`` so each one
runs exactly once.
"""

from pathlib import Path
from typing import Optional

import asyncpg
import structlog

from courier.config import get_settings

logger = structlog.get_logger(__name__)

MIGRATIONS_DIR = Path(__file__).parent.parent / "migrations"

# Arbitrary key; serializes migration runs across processes sharing a database
MIGRATION_LOCK_ID = 0x636F7572

_pool: Optional[asyncpg.Pool] = None


async def get_pool() -> asyncpg.Pool:
    """Return the process-wide pool.

    Raises:
        RuntimeError: If init_database() has not run
    """
    if _pool is None:
        raise RuntimeError("Database pool not initialized. Call init_database() first.")
    return _pool


async def init_database(dsn: Optional[str] = None) -> asyncpg.Pool:
    """Create the pool if it does not exist yet.

    Args:
        dsn: Connection string; defaults to settings.postgres_url
    """
    global _pool

    if _pool is None:
        settings = get_settings()
        _pool = await asyncpg.create_pool(
            dsn or settings.postgres_url,
            min_size=settings.db_pool_min_size,
            max_size=settings.db_pool_max_size,
            command_timeout=60,
        )
        logger.info("database_pool_created", max_size=settings.db_pool_max_size)
    return _pool


async def close_database() -> None:
    global _pool

    if _pool is not None:
        pool, _pool = _pool, None
        await pool.close()
        logger.info("database_pool_closed")


async def run_migrations(migrations_dir: Path = MIGRATIONS_DIR) -> list[str]:
    """Apply pending migrations, each in its own transaction.

    A failing migration rolls back on its own and stops the run; files
    already recorded are never re-applied.

    Returns:
        Names of the migrations applied by this call
    """
    pool = await get_pool()
    files = sorted(migrations_dir.glob("*.sql"))
    applied_now: list[str] = []

    async with pool.acquire() as conn:
        await conn.execute(
            """
            CREATE TABLE IF NOT EXISTS schema_migrations (
                name       TEXT PRIMARY KEY,
                applied_at TIMESTAMPTZ NOT NULL DEFAULT now()
            )
            """
        )
        await conn.execute("SELECT pg_advisory_lock($1)", MIGRATION_LOCK_ID)
        try:
            done = {row["name"] for row in await conn.fetch("SELECT name FROM schema_migrations")}
            for path in files:
                if path.name in done:
                    continue
                async with conn.transaction():
                    await conn.execute(path.read_text())
                    await conn.execute(
                        "INSERT INTO schema_migrations (name) VALUES ($1)", path.name
                    )
                applied_now.append(path.name)
                logger.info("migration_applied", file=path.name)
        finally:
            await conn.execute("SELECT pg_advisory_unlock($1)", MIGRATION_LOCK_ID)

    if not applied_now:
        logger.info("schema_up_to_date", migrations=len(files))
    return applied_now


async def health_check() -> bool:
    """True if a pooled connection can run a query."""
    if _pool is None:
        return False
    try:
        async with _pool.acquire() as conn:
            return await conn.fetchval("SELECT 1") == 1
    except (OSError, asyncpg.PostgresError) as e:
        logger.error("database_health_check_failed", error=str(e))
        return False
