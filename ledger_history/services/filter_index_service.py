"""
Filter index service.

Maintains the (address, token, tx_hash) membership index that history
queries select candidate hashes from, and answers membership lookups.
"""

from collections.abc import Iterable

from sqlalchemy.ext.asyncio import AsyncSession

from ledger_history.config.settings import settings
from ledger_history.domain.payload import (
    TxPayload,
    parse_priority_payload,
    parse_tx_payload,
)
from ledger_history.models.executed_priority_operation import (
    ExecutedPriorityOperation,
)
from ledger_history.models.executed_transaction import ExecutedTransaction
from ledger_history.repositories.executed_transaction_repository import (
    ExecutedTransactionRepository,
)
from ledger_history.repositories.priority_operation_repository import (
    PriorityOperationRepository,
)
from ledger_history.repositories.tx_filter_repository import (
    FilterIndexEntry,
    TxFilterRepository,
)
from ledger_history.services.base_service import BaseService
from ledger_history.utils.exceptions import MalformedPayloadError


# Token id used for memberships of payloads that name no token
BASE_TOKEN_ID = 0


class WatermarkCache:
    """Last known index watermark, shared across requests."""

    def __init__(self) -> None:
        self.block_number: int | None = None

    def remember(self, block_number: int) -> None:
        self.block_number = block_number

    def clear(self) -> None:
        self.block_number = None


def memberships(
    tx_hash: str,
    payload: TxPayload,
    accounts: Iterable[str | None] = (),
) -> list[FilterIndexEntry]:
    """
    Derive every membership of one ledger entry.

    Args:
        tx_hash: Entry hash
        payload: Typed payload of the entry
        accounts: Extra account addresses recorded on the stored row

    Returns:
        One entry per (address, token) pair
    """
    addresses = list(payload.touched_addresses())
    for account in accounts:
        if account and account.lower() not in addresses:
            addresses.append(account.lower())

    tokens = payload.token_ids() or (BASE_TOKEN_ID,)
    return [
        FilterIndexEntry(address=address, token=token, tx_hash=tx_hash)
        for address in addresses
        for token in tokens
    ]


class FilterIndexService(BaseService):
    """
    Filter index service.

    Handles:
    - Candidate hash lookups for one address or a pair of addresses
    - Idempotent indexing of memberships
    - Backfill of blocks newer than the index watermark
    """

    def __init__(
        self,
        session: AsyncSession,
        watermark_cache: WatermarkCache | None = None,
    ) -> None:
        """
        Initialize filter index service.

        Args:
            session: Async database session
            watermark_cache: Optional cache of the last read watermark
        """
        super().__init__(session)
        self.filter_repo = TxFilterRepository(session)
        self.tx_repo = ExecutedTransactionRepository(session)
        self.priority_repo = PriorityOperationRepository(session)
        self.watermark_cache = watermark_cache

    async def indexed_hashes(self, address: str, token: int | None = None) -> set[str]:
        return await self.filter_repo.indexed_hashes(address, token)

    async def common_hashes(
        self,
        address: str,
        second_address: str,
        token: int | None = None,
    ) -> set[str]:
        return await self.filter_repo.common_hashes(address, second_address, token)

    async def count(
        self,
        address: str,
        token: int | None = None,
        second_address: str | None = None,
    ) -> int:
        return await self.filter_repo.count_hashes(address, token, second_address)

    async def upsert(self, address: str, token: int, tx_hash: str) -> bool:
        return await self.filter_repo.upsert(address, token, tx_hash)

    async def upsert_many(self, entries: Iterable[FilterIndexEntry]) -> int:
        return await self.filter_repo.upsert_many(entries)

    async def watermark(self, use_cache: bool = True) -> int:
        """
        Get the highest block reflected in the index.

        Args:
            use_cache: Return the cached value when one is known

        Returns:
            Block number, 0 when the index is empty
        """
        if use_cache and self.watermark_cache is not None:
            cached = self.watermark_cache.block_number
            if cached is not None:
                return cached

        block_number = await self.filter_repo.watermark()
        if self.watermark_cache is not None:
            self.watermark_cache.remember(block_number)
        return block_number

    def _transaction_memberships(self, tx: ExecutedTransaction) -> list[FilterIndexEntry]:
        payload = parse_tx_payload(tx.tx, tx.operation)
        return memberships(
            tx.tx_hash,
            payload,
            (tx.from_account, tx.to_account, tx.primary_account_address),
        )

    def _priority_memberships(
        self, op: ExecutedPriorityOperation
    ) -> list[FilterIndexEntry]:
        payload = parse_priority_payload(op.operation)
        return memberships(op.tx_hash, payload, (op.from_account, op.to_account))

    async def index_block_range(self, from_block: int, to_block: int) -> int:
        """
        Index every entry of an inclusive block range.

        Entries whose payload cannot be parsed are skipped and logged.

        Args:
            from_block: First block
            to_block: Last block

        Returns:
            Number of memberships inserted
        """
        if from_block > to_block:
            return 0

        transactions = await self.tx_repo.find_in_block_range(from_block, to_block)
        priority_ops = await self.priority_repo.find_in_block_range(
            from_block, to_block
        )

        entries: list[FilterIndexEntry] = []
        skipped = 0

        for tx in transactions:
            try:
                entries.extend(self._transaction_memberships(tx))
            except MalformedPayloadError as e:
                skipped += 1
                self.logger.warning(
                    f"[FilterIndex] Skipping transaction {tx.tx_hash}: {e}"
                )

        for op in priority_ops:
            try:
                entries.extend(self._priority_memberships(op))
            except MalformedPayloadError as e:
                skipped += 1
                self.logger.warning(
                    f"[FilterIndex] Skipping priority operation {op.tx_hash}: {e}"
                )

        inserted = await self.filter_repo.upsert_many(entries)
        self.logger.info(
            f"[FilterIndex] Blocks {from_block}-{to_block}: "
            f"{len(transactions)} txs, {len(priority_ops)} priority ops, "
            f"{inserted} memberships inserted, {skipped} skipped"
        )
        return inserted

    async def backfill(self, to_block: int, chunk_size: int | None = None) -> int:
        """
        Index blocks above the watermark up to to_block.

        Each chunk is committed on its own, so an interrupted backfill
        resumes from the last committed chunk.

        Args:
            to_block: Last block to index
            chunk_size: Blocks per chunk, settings.backfill_chunk_size by default

        Returns:
            Total number of memberships inserted
        """
        chunk_size = chunk_size or settings.backfill_chunk_size
        start = await self.watermark(use_cache=False) + 1

        if start > to_block:
            self.logger.info(
                f"[FilterIndex] Index already covers block {to_block}"
            )
            return 0

        total = 0
        for chunk_start in range(start, to_block + 1, chunk_size):
            chunk_end = min(chunk_start + chunk_size - 1, to_block)
            total += await self.index_block_range(chunk_start, chunk_end)
            await self.commit()
            if self.watermark_cache is not None:
                self.watermark_cache.remember(chunk_end)

        self.logger.success(
            f"[FilterIndex] Backfill {start}-{to_block} done, {total} memberships"
        )
        return total
