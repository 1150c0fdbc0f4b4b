"""
Initialize Database Script
Creates the schema on a fresh database and brings Alembic to head.
Usage: python -m photocatalog.scripts.initialize_db
"""

import asyncio
import logging
import os

from alembic import command
from alembic.config import Config
from sqlalchemy import inspect
from sqlalchemy.ext.asyncio import AsyncEngine

from photocatalog.config import get_settings
from photocatalog.context import AppContext
from photocatalog.database import Base
from photocatalog.logging_config import setup_logging

# Import all models to register them with Base.metadata
from photocatalog.models import User, CatalogEntry  # noqa: F401

logger = logging.getLogger(__name__)

BACKEND_DIR = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


def alembic_config() -> Config:
    return Config(os.path.join(BACKEND_DIR, "alembic.ini"))


async def create_schema_if_missing(engine: AsyncEngine) -> bool:
    """
    Create all tables when the 'users' table is absent.
    Returns True when this was a fresh install.
    """
    async with engine.begin() as conn:
        def check_if_fresh(sync_conn):
            return "users" not in inspect(sync_conn).get_table_names()

        is_fresh_install = await conn.run_sync(check_if_fresh)
        logger.info(f"Is fresh install? {is_fresh_install}")

        if is_fresh_install:
            await conn.run_sync(Base.metadata.create_all)
            logger.info("All tables created successfully.")

    return is_fresh_install


async def initialize_db():
    """
    Initialize the database for production.
    A fresh database gets the full schema and is stamped at head;
    an existing one is migrated to head.
    """
    settings = get_settings()
    setup_logging(log_dir=settings.log_dir, log_level=settings.log_level)
    logger.info("Starting database initialization...")

    context = AppContext.from_settings(settings)
    try:
        is_fresh_install = await create_schema_if_missing(context.engine)
    finally:
        await context.dispose()

    cfg = alembic_config()
    if is_fresh_install:
        logger.info("Stamping database with head revision...")
        await asyncio.to_thread(command.stamp, cfg, "head")
    else:
        logger.info("Running migrations to reach head...")
        await asyncio.to_thread(command.upgrade, cfg, "head")

    logger.info("Database initialization complete!")


if __name__ == "__main__":
    asyncio.run(initialize_db())
