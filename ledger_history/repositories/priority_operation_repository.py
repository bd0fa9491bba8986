"""
Priority operation repository.

Data access layer for the L1-originated partition.
"""

from collections.abc import Collection
from datetime import datetime

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from ledger_history.domain.dtos import EntryPosition
from ledger_history.models.executed_priority_operation import (
    ExecutedPriorityOperation,
)
from ledger_history.repositories.base import BaseRepository
from ledger_history.repositories.query_builder import HistoryQuery, membership_hashes
from ledger_history.utils.db_decorators import with_store_errors


class PriorityOperationRepository(BaseRepository[ExecutedPriorityOperation]):
    """Repository for executed priority operations."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository."""
        super().__init__(ExecutedPriorityOperation, session)

    @with_store_errors
    async def get_by_any_hash(
        self, tx_hash: str
    ) -> ExecutedPriorityOperation | None:
        """
        Get operation by its L2 hash or the hash of its L1 transaction.

        Args:
            tx_hash: Normalized hash

        Returns:
            Operation or None
        """
        stmt = (
            select(ExecutedPriorityOperation)
            .where(
                or_(
                    ExecutedPriorityOperation.tx_hash == tx_hash,
                    ExecutedPriorityOperation.eth_hash == tx_hash,
                )
            )
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def get_by_serial_id(
        self, serial_id: int
    ) -> ExecutedPriorityOperation | None:
        """Get operation by L1 serial id."""
        return await self.get_by(priority_op_serialid=serial_id)

    @with_store_errors
    async def find_slice(
        self, query: HistoryQuery
    ) -> list[ExecutedPriorityOperation]:
        """
        Get one bounded slice of an address history.

        Args:
            query: History filters

        Returns:
            At most query.limit operations in page order
        """
        result = await self.session.execute(
            query.slice_of(ExecutedPriorityOperation)
        )
        return list(result.scalars().all())

    @with_store_errors
    async def find_by_hashes(
        self, hashes: Collection[str]
    ) -> list[ExecutedPriorityOperation]:
        """Get operations for a set of L2 hashes."""
        if not hashes:
            return []
        stmt = select(ExecutedPriorityOperation).where(
            ExecutedPriorityOperation.tx_hash.in_(list(hashes))
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    @with_store_errors
    async def find_position(self, tx_hash: str) -> EntryPosition | None:
        """
        Get the order key and creation time of an operation.

        Args:
            tx_hash: Normalized L2 hash

        Returns:
            Position or None if unknown
        """
        stmt = select(
            ExecutedPriorityOperation.created_at,
            ExecutedPriorityOperation.block_number,
            ExecutedPriorityOperation.block_index,
        ).where(ExecutedPriorityOperation.tx_hash == tx_hash)
        row = (await self.session.execute(stmt)).first()
        if row is None:
            return None
        return EntryPosition(
            created_at=row.created_at,
            block_number=row.block_number,
            block_index=row.block_index,
        )

    @with_store_errors
    async def find_last_in_block(
        self, block_number: int
    ) -> ExecutedPriorityOperation | None:
        stmt = (
            select(ExecutedPriorityOperation)
            .where(ExecutedPriorityOperation.block_number == block_number)
            .order_by(
                ExecutedPriorityOperation.block_index.desc(),
                ExecutedPriorityOperation.created_at.desc(),
            )
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()

    @with_store_errors
    async def find_in_block_range(
        self, from_block: int, to_block: int
    ) -> list[ExecutedPriorityOperation]:
        """Get operations of an inclusive block range, ordered by position."""
        stmt = (
            select(ExecutedPriorityOperation)
            .where(
                ExecutedPriorityOperation.block_number.between(from_block, to_block)
            )
            .order_by(
                ExecutedPriorityOperation.block_number.asc(),
                ExecutedPriorityOperation.block_index.asc(),
            )
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    @with_store_errors
    async def earliest_created_at(self, address: str) -> datetime | None:
        """Get creation time of the first operation indexed for an address."""
        stmt = select(func.min(ExecutedPriorityOperation.created_at)).where(
            ExecutedPriorityOperation.tx_hash.in_(membership_hashes(address))
        )
        result = await self.session.execute(stmt)
        return result.scalar()
