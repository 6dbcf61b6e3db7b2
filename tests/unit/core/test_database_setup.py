"""
Unit tests for database setup: schema creation and connection checks.

The engine and session factory are mocked; no database is touched.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from retail_pos.database import check_db_connection, create_tables, drop_tables, init_db
from retail_pos.models.db import Base


@pytest.fixture
def conn():
    return AsyncMock()


@pytest.fixture
def engine(conn):
    """Engine whose ``begin()`` yields ``conn``."""
    engine = MagicMock()
    engine.begin.return_value.__aenter__.return_value = conn
    engine.begin.return_value.__aexit__.return_value = False
    return engine


@pytest.fixture
def session():
    session = AsyncMock(spec=AsyncSession)
    result = MagicMock()
    result.scalar.return_value = 1
    session.execute.return_value = result
    return session


@pytest.fixture
def session_factory(session):
    """Patched factory: ``get_session_factory()()`` opens ``session``."""
    factory = MagicMock()
    factory.return_value.__aenter__.return_value = session
    factory.return_value.__aexit__.return_value = False
    with patch("retail_pos.database.async_db.get_session_factory", return_value=factory):
        yield factory


# ============================================================================
# Schema
# ============================================================================


@pytest.mark.unit
@pytest.mark.asyncio
async def test_create_tables_runs_metadata_create_all(engine, conn):
    await create_tables(engine)

    engine.begin.assert_called_once()
    conn.run_sync.assert_awaited_once_with(Base.metadata.create_all)


@pytest.mark.unit
@pytest.mark.asyncio
async def test_drop_tables_runs_metadata_drop_all(engine, conn):
    await drop_tables(engine)

    conn.run_sync.assert_awaited_once_with(Base.metadata.drop_all)


@pytest.mark.unit
@pytest.mark.asyncio
async def test_create_tables_propagates_errors(engine, conn):
    conn.run_sync.side_effect = RuntimeError("permission denied")

    with pytest.raises(RuntimeError):
        await create_tables(engine)


@pytest.mark.unit
def test_metadata_holds_sales_tables():
    assert {"orders", "order_items", "products"} <= set(Base.metadata.tables)


# ============================================================================
# Connection checks
# ============================================================================


@pytest.mark.unit
@pytest.mark.asyncio
async def test_check_db_connection_ok(session_factory, session):
    assert await check_db_connection() is True

    session.execute.assert_awaited_once()
    assert str(session.execute.await_args.args[0]) == "SELECT 1"
    session.commit.assert_awaited_once()


@pytest.mark.unit
@pytest.mark.asyncio
async def test_check_db_connection_failure_rolls_back(session_factory, session):
    session.execute.side_effect = OSError("connection refused")

    assert await check_db_connection() is False

    session.rollback.assert_awaited_once()
    session.commit.assert_not_awaited()


@pytest.mark.unit
@pytest.mark.asyncio
async def test_init_db_creates_tables_after_check(session_factory, engine, conn):
    assert await init_db(engine) is True

    conn.run_sync.assert_awaited_once_with(Base.metadata.create_all)


@pytest.mark.unit
@pytest.mark.asyncio
async def test_init_db_unreachable_database(session_factory, session, engine, conn):
    session.execute.side_effect = OSError("connection refused")

    with pytest.raises(ConnectionError):
        await init_db(engine)

    conn.run_sync.assert_not_awaited()
