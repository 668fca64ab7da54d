import asyncio
import logging

from .database import Database

logger = logging.getLogger(__name__)


async def database_startup(db: Database, max_retries: int = 3, retry_delay: float = 3):
    """Create the schema, retrying while the database is still coming up."""
    for attempt in range(max_retries):
        try:
            logger.info(f"Initializing database schema (attempt {attempt + 1}/{max_retries})")
            await db.create_all()
            logger.info("Database ready")
            return True
        except Exception as e:
            logger.warning(f'Database startup attempt {attempt + 1} failed: {type(e).__name__}')
            if attempt < max_retries - 1:
                logger.info(f"Retrying database initialization in {retry_delay} seconds...")
                await asyncio.sleep(retry_delay)
            else:
                logger.error("Failed to initialize database after all retries")
    return False


async def shutdown_connections(db: Database):
    """Gracefully shutdown all connections"""
    logger.info("Shutting down connections...")
    try:
        await db.dispose()
        logger.info("Database engine disposed")
    except Exception as e:
        logger.error(f"Error disposing database engine: {e}")
