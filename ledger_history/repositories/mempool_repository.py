"""
Mempool repository.

Read-only access to transactions accepted but not yet included in a
block. Mempool rows store hashes as bare hex; this repository takes and
returns 0x-prefixed hashes like the rest of the package.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ledger_history.domain.batch import BatchInfo, BatchStatus
from ledger_history.domain.status import TxStatus
from ledger_history.models.mempool_tx import MempoolTx
from ledger_history.models.txs_batch_hash import TxsBatchHash
from ledger_history.repositories.base import BaseRepository
from ledger_history.utils.db_decorators import with_store_errors


def _bare(tx_hash: str) -> str:
    return tx_hash[2:] if tx_hash.startswith("0x") else tx_hash


class MempoolRepository(BaseRepository[MempoolTx]):
    """Repository for queued mempool transactions."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository."""
        super().__init__(MempoolTx, session)

    async def get_queued(self, tx_hash: str) -> MempoolTx | None:
        """
        Get a queued transaction.

        Args:
            tx_hash: Normalized 0x-prefixed hash

        Returns:
            Mempool row or None
        """
        return await self.get_by(tx_hash=_bare(tx_hash))

    @with_store_errors
    async def queued_batch_info(self, batch_hash: str) -> BatchInfo | None:
        """
        Get a batch whose members are all still queued.

        Args:
            batch_hash: Normalized batch hash

        Returns:
            BatchInfo with QUEUED status, or None if unknown
        """
        stmt = (
            select(MempoolTx.tx_hash, MempoolTx.created_at)
            .join(TxsBatchHash, TxsBatchHash.batch_id == MempoolTx.batch_id)
            .where(TxsBatchHash.batch_hash == batch_hash)
            .order_by(MempoolTx.id.asc())
        )
        rows = (await self.session.execute(stmt)).all()
        if not rows:
            return None

        created_at = rows[0].created_at
        return BatchInfo(
            batch_hash=batch_hash,
            transaction_hashes=[f"0x{row.tx_hash}" for row in rows],
            created_at=created_at,
            batch_status=BatchStatus(
                last_state=TxStatus.QUEUED, updated_at=created_at
            ),
        )
