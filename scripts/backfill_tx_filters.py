#!/usr/bin/env python3
"""
Filter index backfill.

Indexes every executed transaction and priority operation above the
current index watermark, up to the given block (the newest stored block
by default). Safe to rerun: memberships already present are skipped.

Usage:
    python scripts/backfill_tx_filters.py [--to-block N] [--chunk-size N]
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from loguru import logger
from sqlalchemy import func, select

from ledger_history.config.logging import setup_logging
from ledger_history.config.settings import settings
from ledger_history.database import create_engine, create_session_maker
from ledger_history.models import ExecutedPriorityOperation, ExecutedTransaction
from ledger_history.services.filter_index_service import FilterIndexService


async def newest_block(session) -> int:
    """Highest block over both ledger partitions."""
    highest = 0
    for model in (ExecutedTransaction, ExecutedPriorityOperation):
        result = await session.execute(select(func.max(model.block_number)))
        highest = max(highest, result.scalar() or 0)
    return highest


async def backfill(to_block: int | None, chunk_size: int) -> int:
    """Run the backfill and return the number of inserted memberships."""
    engine = create_engine()
    session_maker = create_session_maker(engine)

    try:
        async with session_maker() as session:
            if to_block is None:
                to_block = await newest_block(session)
            logger.info(f"Backfilling filter index up to block {to_block}")

            service = FilterIndexService(session)
            return await service.backfill(to_block, chunk_size)
    finally:
        await engine.dispose()


def main() -> None:
    parser = argparse.ArgumentParser(description="Backfill the transaction filter index")
    parser.add_argument("--to-block", type=int, default=None)
    parser.add_argument(
        "--chunk-size", type=int, default=settings.backfill_chunk_size
    )
    args = parser.parse_args()

    setup_logging(settings.log_level, settings.log_file)
    inserted = asyncio.run(backfill(args.to_block, args.chunk_size))
    logger.success(f"Done: {inserted} memberships inserted")


if __name__ == "__main__":
    main()
