"""
Order keys and the two-partition history merge.

Every ledger entry is ordered by (block_number, block_index). Ordinary
transactions and priority operations live in separate partitions that
are each queried already sorted; merge_partitions() interleaves the two
slices into one page.
"""

import heapq
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from itertools import islice
from typing import Any, NamedTuple

from ledger_history.domain.status import TxStatus


class SearchDirection(StrEnum):
    """Direction to walk the history from a cursor."""

    OLDER = "older"  # Keys strictly below the cursor, newest first
    NEWER = "newer"  # Keys strictly above the cursor, oldest first


class Partition(StrEnum):
    """Store partition an entry was read from."""

    TRANSACTION = "transaction"
    PRIORITY_OP = "priority_op"


# Deterministic tie-break between partitions sharing an order key
_PARTITION_RANK = {
    Partition.TRANSACTION: 0,
    Partition.PRIORITY_OP: 1,
}


def partition_rank(partition: Partition) -> int:
    return _PARTITION_RANK[partition]


class OrderKey(NamedTuple):
    """Global position of a ledger entry."""

    block_number: int
    block_index: int

    def __str__(self) -> str:
        return f"{self.block_number},{self.block_index}"

    @classmethod
    def parse(cls, value: str) -> "OrderKey":
        """
        Parse the "<block>,<index>" form used as tx_id in history items.

        Raises:
            ValueError: If value is not two comma separated integers
        """
        parts = value.split(",")
        if len(parts) != 2:
            raise ValueError(f"Invalid order key: {value}")
        block_number, block_index = (int(part.strip()) for part in parts)
        if block_number < 0 or block_index < 0:
            raise ValueError(f"Invalid order key: {value}")
        return cls(block_number, block_index)


class SortPosition(NamedTuple):
    """
    Full merge position of one stored entry.

    Hash cursors resolve to this instead of an OrderKey, so entries that
    share an order key are never split across a page boundary.
    """

    block_number: int
    block_index: int
    created_at: datetime
    partition_rank: int
    tx_hash: str

    @property
    def order_key(self) -> OrderKey:
        return OrderKey(self.block_number, self.block_index)


@dataclass
class HistoryEntry:
    """
    One item of an account history page.

    Attributes:
        order_key: (block_number, block_index) position
        partition: Store partition the entry came from
        tx_hash: Canonical 0x-prefixed hash of the entry
        hash: Display hash ("sync-tx:<hex>" or the L1 "0x<eth_hash>")
        tx: Payload JSON (enriched with token symbols before returning)
        created_at: Creation timestamp, secondary ordering component
    """

    order_key: OrderKey
    partition: Partition
    tx_hash: str
    hash: str
    tx: dict[str, Any]
    created_at: datetime
    success: bool | None = None
    fail_reason: str | None = None
    eth_block: int | None = None
    pq_id: int | None = None
    batch_id: int | None = None
    committed: bool = True
    verified: bool = False
    status: TxStatus | None = None
    enriched: bool = field(default=True, repr=False)

    @property
    def block_number(self) -> int:
        return self.order_key.block_number

    @property
    def tx_id(self) -> str:
        return str(self.order_key)

    def sort_key(self) -> tuple:
        """Total order used by the merge; unique per stored entry."""
        return (
            self.order_key.block_number,
            self.order_key.block_index,
            self.created_at,
            _PARTITION_RANK[self.partition],
            self.tx_hash,
        )


def merge_partitions(
    transactions: Iterable[HistoryEntry],
    priority_ops: Iterable[HistoryEntry],
    direction: SearchDirection,
    limit: int,
) -> list[HistoryEntry]:
    """
    Merge two direction-sorted slices into one page.

    Both inputs must already be sorted in the page direction (descending
    for OLDER, ascending for NEWER). Entries sharing an order key are
    ordered by creation time, then partition, then hash, so repeated calls
    over the same stored state return identical pages.

    Args:
        transactions: Slice of the ordinary transaction partition
        priority_ops: Slice of the priority operation partition
        direction: Page direction
        limit: Maximum number of entries to return

    Returns:
        At most `limit` entries in page order
    """
    if limit <= 0:
        return []

    merged = heapq.merge(
        transactions,
        priority_ops,
        key=HistoryEntry.sort_key,
        reverse=direction == SearchDirection.OLDER,
    )
    return list(islice(merged, limit))


def is_page_ordered(entries: list[HistoryEntry], direction: SearchDirection) -> bool:
    """Check the order invariant of a page."""
    keys = [entry.sort_key() for entry in entries]
    if direction == SearchDirection.OLDER:
        return all(a >= b for a, b in zip(keys, keys[1:]))
    return all(a <= b for a, b in zip(keys, keys[1:]))
