"""
Database configuration module for the uptime monitoring system.

This module provides functionality to create and validate a connection pool
to the PostgreSQL database using the asyncpg library. It ensures that the
database is accessible before returning the connection pool.
"""

import logging

import asyncpg

from uptime_monitor.config.monitoring_context import MonitoringContext

# Module logger
logger = logging.getLogger(__name__)


async def initiate_db_pool(context: MonitoringContext) -> asyncpg.pool.Pool:
    """
    Create and validate a connection pool to the PostgreSQL database.

    The pool is closed again if the validation query fails.

    Args:
        context: Configuration context containing database connection parameters.

    Returns:
        asyncpg.pool.Pool: A connection pool for the result sink.

    Raises:
        Exception: If the database connection cannot be established.
    """
    pool: asyncpg.pool.Pool = await asyncpg.create_pool(
        dsn=context.dsn, max_size=context.db_pool_size
    )

    try:
        async with pool.acquire() as connection:
            await connection.fetchval("SELECT 1")
        logger.info("Database connection pool successfully created.")
        return pool
    except Exception as e:
        logger.error(f"Error: Could not connect to the database. {e}")
        await pool.close()
        raise
