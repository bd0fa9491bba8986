"""
Transaction filter repository.

Data access layer for the address to transaction membership index.
"""

from collections.abc import Iterable
from typing import NamedTuple

from sqlalchemy import func, select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from ledger_history.config.constants import FILTER_UPSERT_BATCH_SIZE
from ledger_history.models.executed_priority_operation import (
    ExecutedPriorityOperation,
)
from ledger_history.models.executed_transaction import ExecutedTransaction
from ledger_history.models.tx_filter import TxFilter
from ledger_history.repositories.base import BaseRepository
from ledger_history.repositories.query_builder import (
    candidate_hashes,
    count_statement,
)
from ledger_history.utils.db_decorators import with_store_errors


class FilterIndexEntry(NamedTuple):
    """One (address, token, tx_hash) membership."""

    address: str
    token: int
    tx_hash: str


class TxFilterRepository(BaseRepository[TxFilter]):
    """Repository for the transaction filter index."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository."""
        super().__init__(TxFilter, session)

    @with_store_errors
    async def indexed_hashes(
        self,
        address: str,
        token: int | None = None,
    ) -> set[str]:
        """
        Get hashes indexed for an address.

        Args:
            address: Normalized address
            token: Optional token id restriction

        Returns:
            Set of transaction hashes
        """
        result = await self.session.execute(candidate_hashes(address, token=token))
        return set(result.scalars().all())

    @with_store_errors
    async def common_hashes(
        self,
        address: str,
        second_address: str,
        token: int | None = None,
    ) -> set[str]:
        """
        Get hashes indexed for both addresses.

        Args:
            address: Normalized address
            second_address: Normalized counterparty address
            token: Optional token id restriction

        Returns:
            Intersection of both memberships
        """
        result = await self.session.execute(
            candidate_hashes(address, second_address, token)
        )
        return set(result.scalars().all())

    @with_store_errors
    async def count_hashes(
        self,
        address: str,
        token: int | None = None,
        second_address: str | None = None,
    ) -> int:
        """
        Count distinct hashes of an address history.

        Args:
            address: Normalized address
            token: Optional token id restriction
            second_address: Optional counterparty restriction

        Returns:
            Number of transactions
        """
        result = await self.session.execute(
            count_statement(address, second_address, token)
        )
        return result.scalar() or 0

    async def upsert(self, address: str, token: int, tx_hash: str) -> bool:
        """
        Index one membership.

        Returns:
            True if inserted, False if the triple was already indexed
        """
        inserted = await self.upsert_many(
            [FilterIndexEntry(address, token, tx_hash)]
        )
        return inserted > 0

    @with_store_errors
    async def upsert_many(self, entries: Iterable[FilterIndexEntry]) -> int:
        """
        Index memberships, skipping triples already present.

        The primary key on (address, token, tx_hash) is the only
        synchronization: concurrent duplicate deliveries collapse into
        one row. Large inputs are written in several statements of at
        most FILTER_UPSERT_BATCH_SIZE rows each.

        Args:
            entries: Memberships to index

        Returns:
            Number of rows actually inserted
        """
        rows = [entry._asdict() for entry in dict.fromkeys(entries)]

        inserted = 0
        for start in range(0, len(rows), FILTER_UPSERT_BATCH_SIZE):
            stmt = (
                insert(TxFilter)
                .values(rows[start:start + FILTER_UPSERT_BATCH_SIZE])
                .on_conflict_do_nothing(
                    index_elements=[
                        TxFilter.address,
                        TxFilter.token,
                        TxFilter.tx_hash,
                    ]
                )
            )
            result = await self.session.execute(stmt)
            inserted += max(result.rowcount or 0, 0)
        return inserted

    @with_store_errors
    async def watermark(self) -> int:
        """
        Get the highest block reflected in the index.

        Returns:
            Highest block number over both partitions, 0 if empty
        """
        highest = 0
        for model in (ExecutedTransaction, ExecutedPriorityOperation):
            stmt = select(func.max(model.block_number)).select_from(model).join(
                TxFilter, TxFilter.tx_hash == model.tx_hash
            )
            result = await self.session.execute(stmt)
            highest = max(highest, result.scalar() or 0)
        return highest
