import asyncio
import logging

from app.config import setup_logging, DATABASE_URL
from app.db.database import engine, init_models

logger = logging.getLogger("init_db")


async def create_database_tables():
    try:
        await init_models()
        logger.info("All tables created")
    finally:
        await engine.dispose()


if __name__ == "__main__":
    setup_logging()
    logger.info(f"Creating tables in {DATABASE_URL.split('@')[-1]}")
    asyncio.run(create_database_tables())
