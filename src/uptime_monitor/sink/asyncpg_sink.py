"""
PostgreSQL implementation of the ResultSink interface.

This module persists probe outcomes to the 'probe_outcomes' table in batches
using asyncpg, and computes uptime and latency statistics with aggregate
queries over a trailing time window.
"""

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from asyncpg import Pool, exceptions

from uptime_monitor.contracts import ResultSink
from uptime_monitor.domain import ProbeOutcome, TargetStats
from uptime_monitor.sink.stats import (
    average_response_ms,
    empty_stats,
    to_microseconds,
    uptime_percent,
)

# Module logger
logger = logging.getLogger(__name__)

CREATE_SCHEMA_SQL = """
    CREATE TABLE IF NOT EXISTS probe_outcomes (
        id BIGSERIAL PRIMARY KEY,
        target_name TEXT NOT NULL,
        url TEXT NOT NULL,
        status_code INTEGER NOT NULL,
        response_time_us BIGINT NOT NULL,
        is_up BOOLEAN NOT NULL,
        error TEXT,
        message TEXT NOT NULL,
        checked_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
    );
    CREATE INDEX IF NOT EXISTS idx_probe_outcomes_target_time
        ON probe_outcomes (target_name, checked_at);
    CREATE INDEX IF NOT EXISTS idx_probe_outcomes_time ON probe_outcomes (checked_at);
"""

INSERT_SQL = """
    INSERT INTO probe_outcomes (
        target_name, url, status_code, response_time_us, is_up, error, message, checked_at
    ) VALUES ($1, $2, $3, $4, $5, $6, $7, $8);
"""

STATS_SQL = """
    SELECT COUNT(*)                        AS total_checks,
           COUNT(*) FILTER (WHERE is_up)   AS successful_checks,
           AVG(response_time_us)           AS avg_response_time_us,
           MAX(checked_at)                 AS last_check
    FROM probe_outcomes
    WHERE target_name = $1 AND checked_at >= $2;
"""

LATEST_SQL = """
    SELECT url, is_up
    FROM probe_outcomes
    WHERE target_name = $1 AND checked_at >= $2
    ORDER BY checked_at DESC
    LIMIT 1;
"""

TARGET_NAMES_SQL = """
    SELECT DISTINCT target_name FROM probe_outcomes WHERE checked_at >= $1 ORDER BY target_name;
"""

PURGE_SQL = "DELETE FROM probe_outcomes WHERE checked_at < $1;"


def parse_command_count(status: str) -> int:
    """Extracts the row count from a command tag such as 'DELETE 12'."""
    try:
        return int(status.split()[-1])
    except (AttributeError, IndexError, ValueError):
        return 0


class PostgresResultSink(ResultSink):
    """
    Persists outcomes to PostgreSQL in batches.

    Outcomes are buffered and written when the buffer is full or when flush()
    is called. Database errors during a flush are logged and the batch is
    dropped, so storage problems never stop the probing pipeline.
    """

    def __init__(self, pool: Pool, max_buffer_size: int = 50) -> None:
        """
        Initializes the sink.

        Args:
            pool: The asyncpg connection pool.
            max_buffer_size: The maximum number of outcomes to buffer in memory
                before a flush is automatically triggered.
        """
        self._pool: Pool = pool
        self._max_buffer_size: int = max_buffer_size
        # The buffer stores tuples ready for insertion.
        self._buffer: List[tuple] = []
        self._lock = asyncio.Lock()

    async def initialize(self) -> None:
        """Creates the table and its indexes if they do not exist."""
        async with self._pool.acquire() as conn:
            await conn.execute(CREATE_SCHEMA_SQL)
        logger.info("Result sink schema is ready.")

    @staticmethod
    def _transform_outcome(outcome: ProbeOutcome) -> tuple:
        """
        Transforms a ProbeOutcome into a tuple matching the 'probe_outcomes' table.
        """
        return (
            outcome.target_name,
            outcome.url,
            outcome.status_code,
            to_microseconds(outcome.elapsed),
            outcome.is_up,
            str(outcome.error) if outcome.error is not None else None,
            outcome.message,
            outcome.checked_at,
        )

    async def save(self, outcome: ProbeOutcome) -> None:
        """
        Adds an outcome to the buffer, flushing when the buffer is full.
        """
        record = self._transform_outcome(outcome)

        async with self._lock:
            self._buffer.append(record)
            should_flush = len(self._buffer) >= self._max_buffer_size

        if should_flush:
            logger.debug(f"Outcome buffer limit of {self._max_buffer_size} reached. Flushing.")
            await self.flush()

    async def flush(self) -> None:
        """
        Persists all currently buffered outcomes in a single batch.
        This method is safe to call even if the buffer is empty.
        """
        async with self._lock:
            if not self._buffer:
                return

            # Copy and clear the buffer immediately to minimize lock time.
            records_to_insert = list(self._buffer)
            self._buffer.clear()

        logger.debug(f"Flushing {len(records_to_insert)} outcomes to the database.")

        try:
            async with self._pool.acquire(timeout=10.0) as conn:
                async with conn.transaction():
                    await conn.executemany(INSERT_SQL, records_to_insert)
            logger.debug(f"Successfully flushed {len(records_to_insert)} outcomes.")
        except asyncio.TimeoutError:
            logger.error(f"Timeout during DB flush. {len(records_to_insert)} outcomes may be lost.")
        except exceptions.PostgresError as e:
            logger.error(
                f"Database error during batch flush of outcomes: {e}. "
                f"{len(records_to_insert)} outcomes may be lost."
            )
        except Exception as e:
            logger.error(
                f"An unexpected error occurred during outcome flush: {e}. "
                f"{len(records_to_insert)} outcomes may be lost."
            )

    async def query_stats(self, target_name: str, window: timedelta) -> TargetStats:
        await self.flush()
        since = datetime.now(timezone.utc) - window

        async with self._pool.acquire() as conn:
            row = await conn.fetchrow(STATS_SQL, target_name, since)
            total = row["total_checks"] if row else 0
            if not total:
                return empty_stats(target_name)
            latest = await conn.fetchrow(LATEST_SQL, target_name, since)

        successful: int = row["successful_checks"]
        avg_us: Optional[float] = row["avg_response_time_us"]
        return TargetStats(
            target_name=target_name,
            url=latest["url"] if latest else "",
            total_checks=total,
            successful_checks=successful,
            uptime_percent=uptime_percent(total, successful),
            avg_response_time_ms=average_response_ms(avg_us),
            last_check=row["last_check"],
            last_is_up=latest["is_up"] if latest else None,
        )

    async def query_all_stats(self, window: timedelta) -> List[TargetStats]:
        await self.flush()
        since = datetime.now(timezone.utc) - window

        async with self._pool.acquire() as conn:
            records = await conn.fetch(TARGET_NAMES_SQL, since)

        return [await self.query_stats(record["target_name"], window) for record in records]

    async def purge(self, older_than_days: int) -> int:
        cutoff = datetime.now(timezone.utc) - timedelta(days=older_than_days)
        async with self._pool.acquire() as conn:
            status = await conn.execute(PURGE_SQL, cutoff)

        removed = parse_command_count(status)
        logger.info(f"Purged {removed} outcomes older than {older_than_days} days.")
        return removed

    async def close(self) -> None:
        await self.flush()
