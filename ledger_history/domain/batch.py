"""
Batch status policy.

A batch is a set of transactions submitted and included atomically, so
all included members share one block.
"""

from dataclasses import dataclass, field
from datetime import datetime

from ledger_history.domain.status import TxStatus


@dataclass(frozen=True)
class BatchMember:
    """One included transaction of a batch."""

    tx_hash: str
    block_number: int
    success: bool
    created_at: datetime


@dataclass(frozen=True)
class BatchStatus:
    """Aggregated batch state and the moment it was reached."""

    last_state: TxStatus
    updated_at: datetime


@dataclass(frozen=True)
class BatchInfo:
    """Batch as returned by get-batch-info."""

    batch_hash: str
    transaction_hashes: list[str] = field(default_factory=list)
    created_at: datetime | None = None
    batch_status: BatchStatus | None = None


def aggregate_batch_status(
    members: list[BatchMember],
    finalized_at: datetime | None,
) -> BatchStatus:
    """
    Derive the status of an included batch.

    Policy:
    - REJECTED if any member failed, whatever the block finality
    - FINALIZED if the shared block is covered by a confirmed
      ExecuteBlocks operation (finalized_at is that operation's timestamp)
    - COMMITTED otherwise

    Args:
        members: Included members ordered by (created_at, block_index)
        finalized_at: Timestamp of the confirming operation, None if the
            block is not finalized

    Returns:
        Batch status

    Raises:
        ValueError: If members is empty
    """
    if not members:
        raise ValueError("Batch has no included members")

    created_at = members[0].created_at

    if any(not member.success for member in members):
        return BatchStatus(last_state=TxStatus.REJECTED, updated_at=created_at)

    if finalized_at is not None:
        return BatchStatus(last_state=TxStatus.FINALIZED, updated_at=finalized_at)

    return BatchStatus(last_state=TxStatus.COMMITTED, updated_at=created_at)
