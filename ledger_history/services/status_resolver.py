"""
Status resolver service.

Loads the confirmed ranges snapshot once per request and derives entry
statuses from it.
"""

from collections.abc import Iterable

from sqlalchemy.ext.asyncio import AsyncSession

from ledger_history.domain.ordering import HistoryEntry
from ledger_history.domain.status import ConfirmedRanges, TxStatus, resolve_status
from ledger_history.models.aggregate_operation import AggregatedActionType
from ledger_history.repositories.aggregate_operation_repository import (
    AggregateOperationRepository,
)
from ledger_history.services.base_service import BaseService


class StatusResolver(BaseService):
    """Derives finality status for entries of one request."""

    def __init__(self, session: AsyncSession) -> None:
        """
        Initialize status resolver.

        Args:
            session: Async database session
        """
        super().__init__(session)
        self.aggregate_repo = AggregateOperationRepository(session)
        self._ranges: ConfirmedRanges | None = None

    async def ranges(self) -> ConfirmedRanges:
        """
        Get the confirmed ranges snapshot.

        Loaded on first call; later calls in the same request reuse it so
        every entry of a response is judged against the same state.
        """
        if self._ranges is None:
            self._ranges = await self.aggregate_repo.confirmed_ranges()
            self.logger.debug(
                f"[Status] Snapshot: committed<={self._ranges.last_committed_block}, "
                f"finalized<={self._ranges.last_finalized_block}"
            )
        return self._ranges

    async def resolve(self, block_number: int | None, success: bool | None) -> TxStatus:
        """Derive the status of one entry."""
        return resolve_status(block_number, success, await self.ranges())

    async def annotate(self, entries: Iterable[HistoryEntry]) -> None:
        """
        Set status, committed and verified on history entries in place.

        Args:
            entries: Entries of one page
        """
        ranges = await self.ranges()
        for entry in entries:
            entry.status = resolve_status(entry.block_number, entry.success, ranges)
            entry.committed = ranges.is_committed(entry.block_number)
            entry.verified = ranges.is_finalized(entry.block_number)

    async def last_finalized_block(self) -> int:
        """Highest block covered by a confirmed ExecuteBlocks operation."""
        return (await self.ranges()).last_finalized_block

    async def is_block_finalized(self, block_number: int) -> bool:
        return (await self.ranges()).is_finalized(block_number)

    async def is_block_verified(self, block_number: int) -> bool:
        """
        Check for a confirmed ExecuteBlocks operation containing the block.

        Args:
            block_number: Block to check

        Returns:
            True if such an operation exists
        """
        operation = await self.aggregate_repo.find_confirmed_covering(
            block_number, AggregatedActionType.EXECUTE_BLOCKS
        )
        return operation is not None
