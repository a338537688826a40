"""
Create the articles, tags and articles_tags tables without Alembic.

`alembic upgrade head` is the normal route; this script is for throwaway
local databases and demos.

Usage:
    python init_db.py            # create missing tables
    python init_db.py --drop     # drop everything first, then create

The target database is settings.DATABASE_URL (see config/.env).
"""

import argparse
import asyncio

from article_tags.core.config import settings
from article_tags.core.database import drop_db, init_db
from article_tags.core.logging import get_logger, setup_logging
from article_tags.models import Base

logger = get_logger("init_db")


async def main(drop: bool = False) -> None:
    """Create every table known to the models, optionally dropping them first."""
    if drop:
        logger.warning("Dropping all tables", extra={"database_url": settings.DATABASE_URL})
        await drop_db()

    await init_db()
    logger.info(
        "Tables created",
        extra={
            "database_url": settings.DATABASE_URL,
            "tables": sorted(Base.metadata.tables),
        },
    )


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__.strip().splitlines()[0])
    parser.add_argument("--drop", action="store_true", help="drop existing tables first")
    args = parser.parse_args()

    setup_logging(log_level=settings.LOG_LEVEL, log_format="text")
    asyncio.run(main(drop=args.drop))
