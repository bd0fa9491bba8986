"""
History service.

Serves account histories merged from the ordinary transaction and
priority operation partitions. Each partition is read with one bounded
range query; the two sorted slices are merged by order key, annotated
with finality status and enriched with token symbols.
"""

from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from ledger_history.config.settings import settings
from ledger_history.domain.ordering import (
    HistoryEntry,
    OrderKey,
    Partition,
    SearchDirection,
    SortPosition,
    merge_partitions,
    partition_rank,
)
from ledger_history.repositories.executed_transaction_repository import (
    ExecutedTransactionRepository,
)
from ledger_history.repositories.history_repository import HistoryRepository
from ledger_history.repositories.priority_operation_repository import (
    PriorityOperationRepository,
)
from ledger_history.repositories.query_builder import HistoryQuery
from ledger_history.repositories.tx_filter_repository import TxFilterRepository
from ledger_history.services.base_service import BaseService
from ledger_history.services.conversion import priority_op_entry, transaction_entry
from ledger_history.services.status_resolver import StatusResolver
from ledger_history.services.token_cache import TokenSymbolCache, token_symbol_cache


class HistoryService(BaseService):
    """
    Account history service.

    Handles:
    - Cursor pages in either direction
    - Legacy offset pages
    - History counts and edge lookups (last hash, first timestamp)
    """

    def __init__(
        self,
        session: AsyncSession,
        token_cache: TokenSymbolCache | None = None,
        status_resolver: StatusResolver | None = None,
    ) -> None:
        """
        Initialize history service.

        Args:
            session: Async database session
            token_cache: Token symbol cache, the process-wide one by default
            status_resolver: Resolver sharing the request's ranges snapshot
        """
        super().__init__(session)
        self.tx_repo = ExecutedTransactionRepository(session)
        self.priority_repo = PriorityOperationRepository(session)
        self.filter_repo = TxFilterRepository(session)
        self.history_repo = HistoryRepository(session)
        self.token_cache = token_cache or token_symbol_cache
        self.status_resolver = status_resolver or StatusResolver(session)

    async def resolve_cursor(
        self, cursor: OrderKey | str | None
    ) -> OrderKey | SortPosition | None:
        """
        Turn a cursor into a page start position.

        A hash resolves to the full merge position of its entry, so a
        page never stops between entries sharing an order key.

        Args:
            cursor: Order key, normalized transaction hash or None

        Returns:
            Order key, sort position, or None when the cursor is None

        Raises:
            LookupError: If a hash cursor is not stored in either partition
        """
        if cursor is None or isinstance(cursor, OrderKey):
            return cursor

        partition = Partition.TRANSACTION
        position = await self.tx_repo.find_position(cursor)
        if position is None:
            partition = Partition.PRIORITY_OP
            position = await self.priority_repo.find_position(cursor)
        if position is None:
            raise LookupError(cursor)
        return SortPosition(
            block_number=position.block_number,
            block_index=position.block_index,
            created_at=position.created_at,
            partition_rank=partition_rank(partition),
            tx_hash=cursor,
        )

    async def page(
        self,
        address: str,
        second_address: str | None = None,
        token: int | None = None,
        cursor: OrderKey | str | None = None,
        direction: SearchDirection = SearchDirection.OLDER,
        limit: int | None = None,
    ) -> list[HistoryEntry]:
        """
        Get one page of an account history.

        Args:
            address: Normalized account address
            second_address: Only transactions shared with this address
            token: Only memberships carrying this token id
            cursor: Exclusive start position, a hash or None for the edge
            direction: OLDER (descending) or NEWER (ascending)
            limit: Page size, clamped to the configured maximum

        Returns:
            At most limit entries in page order; empty if a hash cursor
            is unknown
        """
        limit = settings.clamp_limit(limit)

        try:
            start = await self.resolve_cursor(cursor)
        except LookupError:
            self.logger.info(f"[History] Unknown cursor hash {cursor}, empty page")
            return []

        query = HistoryQuery(
            address=address,
            direction=direction,
            limit=limit,
            cursor=start,
            second_address=second_address,
            token=token,
        )

        transactions = await self.tx_repo.find_slice(query)
        priority_ops = []
        if query.includes_priority_ops:
            priority_ops = await self.priority_repo.find_slice(query)

        entries = merge_partitions(
            [transaction_entry(tx) for tx in transactions],
            [priority_op_entry(op) for op in priority_ops],
            direction,
            limit,
        )

        self.logger.debug(
            f"[History] {address} {direction} from {start}: "
            f"{len(transactions)} txs + {len(priority_ops)} ops -> {len(entries)}"
        )
        await self._finish(entries)
        return entries

    async def page_by_offset(
        self,
        address: str,
        offset: int = 0,
        limit: int | None = None,
    ) -> list[HistoryEntry]:
        """
        Get a legacy offset page, newest first.

        The offset is applied to the history as stored at call time, so
        pages drift when new entries arrive between calls.

        Args:
            address: Normalized account address
            offset: Entries to skip from the newest one
            limit: Page size, clamped to the configured maximum

        Returns:
            Page entries
        """
        limit = settings.clamp_limit(limit)
        positions = await self.history_repo.offset_positions(
            address, max(offset, 0), limit
        )

        tx_hashes = [
            p.tx_hash for p in positions if p.partition == Partition.TRANSACTION
        ]
        op_hashes = [
            p.tx_hash for p in positions if p.partition == Partition.PRIORITY_OP
        ]

        loaded: dict[tuple[Partition, str], HistoryEntry] = {}
        for tx in await self.tx_repo.find_by_hashes(tx_hashes):
            loaded[(Partition.TRANSACTION, tx.tx_hash)] = transaction_entry(tx)
        for op in await self.priority_repo.find_by_hashes(op_hashes):
            loaded[(Partition.PRIORITY_OP, op.tx_hash)] = priority_op_entry(op)

        entries = [
            loaded[(p.partition, p.tx_hash)]
            for p in positions
            if (p.partition, p.tx_hash) in loaded
        ]
        await self._finish(entries)
        return entries

    async def _finish(self, entries: list[HistoryEntry]) -> None:
        if not entries:
            return
        await self.status_resolver.annotate(entries)
        enricher = await self.token_cache.enricher(self.session)
        flagged = enricher.enrich_entries(entries)
        if flagged:
            self.logger.warning(f"[History] {flagged} entries left unenriched")

    async def count(
        self,
        address: str,
        token: int | None = None,
        second_address: str | None = None,
    ) -> int:
        """Count entries of an account history."""
        return await self.filter_repo.count_hashes(address, token, second_address)

    async def account_last_tx_hash(self, address: str) -> str | None:
        """
        Get the hash of the newest entry of an account.

        Args:
            address: Normalized account address

        Returns:
            Transaction hash or None if the history is empty
        """
        query = HistoryQuery(address=address, limit=1)
        newest = merge_partitions(
            [transaction_entry(tx) for tx in await self.tx_repo.find_slice(query)],
            [
                priority_op_entry(op)
                for op in await self.priority_repo.find_slice(query)
            ],
            SearchDirection.OLDER,
            1,
        )
        return newest[0].tx_hash if newest else None

    async def block_last_tx_hash(self, block_number: int) -> str | None:
        """
        Get the hash of the last entry of a block.

        Args:
            block_number: Block number

        Returns:
            Transaction hash or None if the block holds no entries
        """
        candidates: list[HistoryEntry] = []
        tx = await self.tx_repo.find_last_in_block(block_number)
        if tx is not None:
            candidates.append(transaction_entry(tx))
        op = await self.priority_repo.find_last_in_block(block_number)
        if op is not None:
            candidates.append(priority_op_entry(op))

        if not candidates:
            return None
        return max(candidates, key=HistoryEntry.sort_key).tx_hash

    async def tx_created_at_and_block(
        self, tx_hash: str
    ) -> tuple[datetime, int] | None:
        """
        Get creation time and block of a stored entry.

        Args:
            tx_hash: Normalized hash

        Returns:
            (created_at, block_number) or None if unknown
        """
        position = await self.tx_repo.find_position(tx_hash)
        if position is None:
            position = await self.priority_repo.find_position(tx_hash)
        if position is None:
            return None
        return position.created_at, position.block_number

    async def account_created_on(self, address: str) -> datetime | None:
        """
        Get the timestamp of the first entry touching an address.

        Args:
            address: Normalized account address

        Returns:
            Earliest creation time or None if the history is empty
        """
        candidates = [
            await self.tx_repo.earliest_created_at(address),
            await self.priority_repo.earliest_created_at(address),
        ]
        present = [value for value in candidates if value is not None]
        return min(present) if present else None
