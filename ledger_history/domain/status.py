"""
Transaction finality status.

Status is never stored per transaction. It is derived at read time from
the execution outcome and the latest confirmed aggregated operations,
so confirming one operation promotes its whole block range at once.
"""

from dataclasses import dataclass
from enum import StrEnum


class TxStatus(StrEnum):
    """Finality state of a ledger entry."""

    QUEUED = "queued"  # Not yet in a block (mempool)
    EXECUTED = "executed"  # In a block, no confirmed commit covers it
    COMMITTED = "committed"  # Covered by a confirmed CommitBlocks
    FINALIZED = "finalized"  # Covered by a confirmed ExecuteBlocks
    REJECTED = "rejected"  # Executed with failure, terminal


# Progression order used to check monotonicity
STATUS_RANK = {
    TxStatus.QUEUED: 0,
    TxStatus.EXECUTED: 1,
    TxStatus.COMMITTED: 2,
    TxStatus.FINALIZED: 3,
}


@dataclass(frozen=True)
class BlockRange:
    """Inclusive block range of a confirmed aggregated operation."""

    from_block: int
    to_block: int

    def __post_init__(self) -> None:
        if self.from_block > self.to_block:
            raise ValueError(
                f"Invalid block range [{self.from_block}, {self.to_block}]"
            )

    def contains(self, block_number: int) -> bool:
        return self.from_block <= block_number <= self.to_block


@dataclass(frozen=True)
class ConfirmedRanges:
    """
    Latest confirmed range per aggregated action kind.

    Confirmed ranges are contiguous and only grow, so every block up to
    the latest confirmed range's upper bound is covered: earlier blocks
    were confirmed by earlier operations of the same kind.
    """

    committed: BlockRange | None = None
    executed: BlockRange | None = None

    @property
    def last_committed_block(self) -> int:
        return self.committed.to_block if self.committed else 0

    @property
    def last_finalized_block(self) -> int:
        return self.executed.to_block if self.executed else 0

    def is_committed(self, block_number: int) -> bool:
        return self.committed is not None and block_number <= self.committed.to_block

    def is_finalized(self, block_number: int) -> bool:
        return self.executed is not None and block_number <= self.executed.to_block


def resolve_status(
    block_number: int | None,
    success: bool | None,
    ranges: ConfirmedRanges,
) -> TxStatus:
    """
    Derive the status of one entry.

    Rejection takes precedence over any confirmation of the enclosing
    block. Priority operations pass success=True.

    Args:
        block_number: Enclosing block, None for queued transactions
        success: Execution outcome, None when not executed yet
        ranges: Snapshot of confirmed ranges for the current request

    Returns:
        Derived status
    """
    if block_number is None:
        return TxStatus.QUEUED
    if success is False:
        return TxStatus.REJECTED
    if ranges.is_finalized(block_number):
        return TxStatus.FINALIZED
    if ranges.is_committed(block_number):
        return TxStatus.COMMITTED
    return TxStatus.EXECUTED
