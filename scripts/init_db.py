"""Initialise the history database schema.

Run once to create all tables:
    python -m scripts.init_db

Reads DATABASE_URL, or POSTGRES_HOST/PORT/DB/USER/PASSWORD.
"""

import asyncio
import sys

import structlog

from src.db.session import Database
from src.errors import PersistenceError

logger = structlog.get_logger()


async def init() -> int:
    database = Database(echo=True)
    if not database.configured:
        logger.error("init_db.not_configured", hint="set DATABASE_URL or POSTGRES_HOST")
        return 1

    logger.info("init_db", url=database.url.split("@")[-1])  # log host only
    try:
        await database.ensure_ready()
    except PersistenceError as e:
        logger.error("init_db.failed", error=str(e))
        return 1
    finally:
        await database.dispose()

    logger.info("init_db.done")
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(init()))
