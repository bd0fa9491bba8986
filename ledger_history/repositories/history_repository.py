"""
Cross-partition history repository.

Queries that span both ledger partitions in one statement.
"""

from typing import NamedTuple

from sqlalchemy.ext.asyncio import AsyncSession

from ledger_history.domain.ordering import OrderKey, Partition
from ledger_history.repositories.query_builder import offset_positions_statement
from ledger_history.utils.db_decorators import with_store_errors


class PartitionPosition(NamedTuple):
    """Position of one entry and the partition that stores it."""

    tx_hash: str
    partition: Partition
    order_key: OrderKey


class HistoryRepository:
    """Offset-based reads over the union of both partitions."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    @with_store_errors
    async def offset_positions(
        self, address: str, offset: int, limit: int
    ) -> list[PartitionPosition]:
        """
        Get positions of an offset page, newest first.

        Args:
            address: Normalized address
            offset: Entries to skip from the newest one
            limit: Page size

        Returns:
            Positions of the page entries
        """
        result = await self.session.execute(
            offset_positions_statement(address, offset, limit)
        )
        return [
            PartitionPosition(
                tx_hash=row.tx_hash,
                partition=Partition(row.partition),
                order_key=OrderKey(row.block_number, row.block_index),
            )
            for row in result.all()
        ]
