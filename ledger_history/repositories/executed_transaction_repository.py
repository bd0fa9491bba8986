"""
Executed transaction repository.

Data access layer for the ordinary transaction partition.
"""

from collections.abc import Collection
from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ledger_history.domain.dtos import EntryPosition
from ledger_history.models.executed_transaction import ExecutedTransaction
from ledger_history.models.txs_batch_hash import TxsBatchHash
from ledger_history.repositories.base import BaseRepository
from ledger_history.repositories.query_builder import HistoryQuery, membership_hashes
from ledger_history.utils.db_decorators import with_store_errors


class ExecutedTransactionRepository(BaseRepository[ExecutedTransaction]):
    """Repository for executed transactions."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository."""
        super().__init__(ExecutedTransaction, session)

    async def get_by_hash(self, tx_hash: str) -> ExecutedTransaction | None:
        """
        Get executed transaction by hash.

        Args:
            tx_hash: Normalized transaction hash

        Returns:
            Transaction or None
        """
        return await self.get(tx_hash)

    @with_store_errors
    async def find_slice(self, query: HistoryQuery) -> list[ExecutedTransaction]:
        """
        Get one bounded slice of an address history.

        Args:
            query: History filters

        Returns:
            At most query.limit transactions in page order
        """
        result = await self.session.execute(query.slice_of(ExecutedTransaction))
        return list(result.scalars().all())

    @with_store_errors
    async def find_by_hashes(
        self, hashes: Collection[str]
    ) -> list[ExecutedTransaction]:
        """Get transactions for a set of hashes, in no particular order."""
        if not hashes:
            return []
        stmt = select(ExecutedTransaction).where(
            ExecutedTransaction.tx_hash.in_(list(hashes))
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    @with_store_errors
    async def find_position(self, tx_hash: str) -> EntryPosition | None:
        """
        Get the order key and creation time of a transaction.

        Args:
            tx_hash: Normalized transaction hash

        Returns:
            Position or None if unknown
        """
        stmt = select(
            ExecutedTransaction.created_at,
            ExecutedTransaction.block_number,
            ExecutedTransaction.block_index,
        ).where(ExecutedTransaction.tx_hash == tx_hash)
        row = (await self.session.execute(stmt)).first()
        if row is None:
            return None
        return EntryPosition(
            created_at=row.created_at,
            block_number=row.block_number,
            block_index=row.block_index,
        )

    @with_store_errors
    async def find_last_in_block(self, block_number: int) -> ExecutedTransaction | None:
        """Get the last transaction of a block by position."""
        stmt = (
            select(ExecutedTransaction)
            .where(ExecutedTransaction.block_number == block_number)
            .order_by(
                ExecutedTransaction.block_index.desc(),
                ExecutedTransaction.created_at.desc(),
            )
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()

    @with_store_errors
    async def find_in_block_range(
        self, from_block: int, to_block: int
    ) -> list[ExecutedTransaction]:
        """
        Get transactions of an inclusive block range.

        Args:
            from_block: First block
            to_block: Last block

        Returns:
            Transactions ordered by position
        """
        stmt = (
            select(ExecutedTransaction)
            .where(ExecutedTransaction.block_number.between(from_block, to_block))
            .order_by(
                ExecutedTransaction.block_number.asc(),
                ExecutedTransaction.block_index.asc(),
            )
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    @with_store_errors
    async def find_batch_members(self, batch_hash: str) -> list[ExecutedTransaction]:
        """
        Get the included members of a batch.

        Args:
            batch_hash: Normalized batch hash

        Returns:
            Members ordered by creation time, then position
        """
        stmt = (
            select(ExecutedTransaction)
            .join(
                TxsBatchHash,
                TxsBatchHash.batch_id == func.coalesce(ExecutedTransaction.batch_id, 0),
            )
            .where(TxsBatchHash.batch_hash == batch_hash)
            .order_by(
                ExecutedTransaction.created_at.asc(),
                ExecutedTransaction.block_index.asc(),
            )
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    @with_store_errors
    async def earliest_created_at(self, address: str) -> datetime | None:
        """Get creation time of the first transaction indexed for an address."""
        stmt = select(func.min(ExecutedTransaction.created_at)).where(
            ExecutedTransaction.tx_hash.in_(membership_hashes(address))
        )
        result = await self.session.execute(stmt)
        return result.scalar()
