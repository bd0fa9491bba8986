"""
Batch service.

Reports the status of atomic transaction batches.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from ledger_history.domain.batch import BatchInfo, BatchMember, aggregate_batch_status
from ledger_history.models.aggregate_operation import AggregatedActionType
from ledger_history.repositories.aggregate_operation_repository import (
    AggregateOperationRepository,
)
from ledger_history.repositories.executed_transaction_repository import (
    ExecutedTransactionRepository,
)
from ledger_history.repositories.mempool_repository import MempoolRepository
from ledger_history.services.base_service import BaseService


class BatchService(BaseService):
    """Batch status aggregation over included and queued batches."""

    def __init__(self, session: AsyncSession) -> None:
        """
        Initialize batch service.

        Args:
            session: Async database session
        """
        super().__init__(session)
        self.tx_repo = ExecutedTransactionRepository(session)
        self.aggregate_repo = AggregateOperationRepository(session)
        self.mempool_repo = MempoolRepository(session)

    async def batch_info(self, batch_hash: str) -> BatchInfo | None:
        """
        Get a batch and its aggregated status.

        Included batches are judged by their members and the finality of
        their block. A batch with no included member is looked up among
        queued mempool batches and returned as found there.

        Args:
            batch_hash: Normalized batch hash

        Returns:
            BatchInfo or None if the batch is unknown
        """
        rows = await self.tx_repo.find_batch_members(batch_hash)
        if not rows:
            self.logger.debug(f"[Batch] {batch_hash} not included, checking mempool")
            return await self.mempool_repo.queued_batch_info(batch_hash)

        members = [
            BatchMember(
                tx_hash=row.tx_hash,
                block_number=row.block_number,
                success=row.success,
                created_at=row.created_at,
            )
            for row in rows
        ]

        operation = await self.aggregate_repo.find_confirmed_covering(
            members[0].block_number, AggregatedActionType.EXECUTE_BLOCKS
        )
        status = aggregate_batch_status(
            members,
            operation.created_at if operation is not None else None,
        )

        return BatchInfo(
            batch_hash=batch_hash,
            transaction_hashes=[member.tx_hash for member in members],
            created_at=members[0].created_at,
            batch_status=status,
        )
