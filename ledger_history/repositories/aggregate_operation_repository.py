"""
Aggregated operation repository.

Data access layer for L1 settlement events (CommitBlocks, ExecuteBlocks).
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ledger_history.domain.status import BlockRange, ConfirmedRanges
from ledger_history.models.aggregate_operation import (
    AggregatedActionType,
    AggregateOperation,
)
from ledger_history.repositories.base import BaseRepository
from ledger_history.utils.db_decorators import with_store_errors


class AggregateOperationRepository(BaseRepository[AggregateOperation]):
    """Repository for aggregated operations."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository."""
        super().__init__(AggregateOperation, session)

    @with_store_errors
    async def latest_confirmed(
        self, action_type: AggregatedActionType
    ) -> AggregateOperation | None:
        """
        Get the confirmed operation of a kind with the highest range.

        Args:
            action_type: CommitBlocks or ExecuteBlocks

        Returns:
            Operation or None if nothing is confirmed yet
        """
        stmt = (
            select(AggregateOperation)
            .where(
                AggregateOperation.action_type == action_type.value,
                AggregateOperation.confirmed.is_(True),
            )
            .order_by(AggregateOperation.to_block.desc(), AggregateOperation.id.desc())
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def confirmed_ranges(self) -> ConfirmedRanges:
        """
        Load the confirmed ranges snapshot used for one request.

        Returns:
            Latest confirmed commit and execute ranges
        """
        committed = await self.latest_confirmed(AggregatedActionType.COMMIT_BLOCKS)
        executed = await self.latest_confirmed(AggregatedActionType.EXECUTE_BLOCKS)
        return ConfirmedRanges(
            committed=_as_range(committed),
            executed=_as_range(executed),
        )

    @with_store_errors
    async def find_confirmed_covering(
        self,
        block_number: int,
        action_type: AggregatedActionType = AggregatedActionType.EXECUTE_BLOCKS,
    ) -> AggregateOperation | None:
        """
        Get the confirmed operation whose range contains a block.

        Args:
            block_number: Block to look up
            action_type: Operation kind, ExecuteBlocks by default

        Returns:
            Operation or None if the block is not covered
        """
        stmt = (
            select(AggregateOperation)
            .where(
                AggregateOperation.action_type == action_type.value,
                AggregateOperation.confirmed.is_(True),
                AggregateOperation.from_block <= block_number,
                AggregateOperation.to_block >= block_number,
            )
            .order_by(AggregateOperation.id.asc())
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()


def _as_range(operation: AggregateOperation | None) -> BlockRange | None:
    if operation is None:
        return None
    return BlockRange(operation.from_block, operation.to_block)
