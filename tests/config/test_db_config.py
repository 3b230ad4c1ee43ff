"""
Tests for the db_config module in the uptime_monitor.config package.

This module contains tests for the initiate_db_pool function, which creates
and validates a connection pool to the PostgreSQL database.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from uptime_monitor.config.db_config import initiate_db_pool
from uptime_monitor.config.monitoring_context import MonitoringContext


@pytest.fixture
def mock_connection() -> AsyncMock:
    connection = AsyncMock()
    connection.fetchval.return_value = 1
    return connection


@pytest.fixture
def mock_pool(mock_connection: AsyncMock) -> MagicMock:
    """Fixture that provides a pool whose acquire() yields the mock connection."""
    pool = MagicMock()
    pool.acquire.return_value.__aenter__.return_value = mock_connection
    pool.close = AsyncMock()
    return pool


class TestInitiateDbPool:
    """Tests for the initiate_db_pool function."""

    @pytest.mark.asyncio
    async def test_initiate_db_pool_should_create_and_validate_pool(
        self, mock_context: MonitoringContext, mock_pool: MagicMock, mock_connection: AsyncMock
    ) -> None:
        """
        Test that the pool is created from the context and checked with a query.
        """
        # Arrange
        with patch("asyncpg.create_pool", AsyncMock(return_value=mock_pool)) as mock_create_pool:
            # Act
            result = await initiate_db_pool(mock_context)

        # Assert
        mock_create_pool.assert_awaited_once_with(
            dsn=mock_context.dsn, max_size=mock_context.db_pool_size
        )
        mock_connection.fetchval.assert_awaited_once_with("SELECT 1")
        assert result is mock_pool

    @pytest.mark.asyncio
    async def test_initiate_db_pool_should_close_pool_and_raise_exception_on_error(
        self, mock_context: MonitoringContext, mock_pool: MagicMock, mock_connection: AsyncMock
    ) -> None:
        """
        Test that the pool is closed when the validation query fails.
        """
        # Arrange
        mock_connection.fetchval.side_effect = Exception("Connection error")

        with patch("asyncpg.create_pool", AsyncMock(return_value=mock_pool)):
            # Act & Assert
            with pytest.raises(Exception, match="Connection error"):
                await initiate_db_pool(mock_context)

        mock_pool.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_initiate_db_pool_should_handle_create_pool_error(
        self, mock_context: MonitoringContext
    ) -> None:
        # Arrange
        with patch("asyncpg.create_pool", AsyncMock(side_effect=Exception("Pool creation error"))):
            # Act & Assert
            with pytest.raises(Exception, match="Pool creation error"):
                await initiate_db_pool(mock_context)
