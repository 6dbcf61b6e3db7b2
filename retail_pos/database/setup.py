"""
Database Setup - schema creation and connection checks.
"""

import logging

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine

from retail_pos.models.db import Base

from . import async_db

logger = logging.getLogger(__name__)


async def create_tables(engine: AsyncEngine | None = None) -> None:
    """Create every order and product table that does not exist yet."""
    engine = engine or async_db.get_async_engine()
    try:
        async with engine.begin() as conn:
            logger.info("Creating tables...")
            await conn.run_sync(Base.metadata.create_all)
            logger.info("Tables created successfully")
    except Exception as e:
        logger.error(f"Error creating tables: {e}")
        raise


async def drop_tables(engine: AsyncEngine | None = None) -> None:
    engine = engine or async_db.get_async_engine()
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
            logger.warning("All database tables dropped")
    except Exception as e:
        logger.error(f"Error dropping tables: {e}")
        raise


async def check_db_connection() -> bool:
    """Run ``SELECT 1`` through a fresh session."""
    try:
        async with async_db.get_async_db_context() as session:
            result = await session.execute(text("SELECT 1"))
            logger.info(f"Database connection check: OK = {result.scalar()}")
            return True
    except Exception as e:
        logger.error(f"Database connection failed: {e}")
        return False


async def init_db(engine: AsyncEngine | None = None) -> bool:
    """
    Check the connection, then create the schema.

    Raises:
        ConnectionError: If the database cannot be reached
    """
    if not await check_db_connection():
        raise ConnectionError("Database is not reachable")
    await create_tables(engine)
    logger.info("Database initialized")
    return True
