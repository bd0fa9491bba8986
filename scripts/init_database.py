#!/usr/bin/env python3
"""Initialize ledger history tables."""

import asyncio
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from loguru import logger

from ledger_history.config.logging import setup_logging
from ledger_history.config.settings import settings
from ledger_history.database import create_engine
from ledger_history.models import Base


async def init_database() -> None:
    """Create all ledger history tables."""
    logger.info("Connecting to database...")
    engine = create_engine()

    async with engine.begin() as conn:
        logger.info("Creating tables (checkfirst=True)...")
        await conn.run_sync(
            Base.metadata.create_all,
            checkfirst=True
        )

    await engine.dispose()
    logger.success("Ledger history tables created successfully!")


if __name__ == "__main__":
    setup_logging(settings.log_level)
    asyncio.run(init_database())
