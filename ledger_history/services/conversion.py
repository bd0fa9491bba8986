"""
Conversion of stored rows into history entries.
"""

import copy

from ledger_history.config.constants import SYNC_TX_PREFIX
from ledger_history.domain.ordering import HistoryEntry, OrderKey, Partition
from ledger_history.models.executed_priority_operation import (
    ExecutedPriorityOperation,
)
from ledger_history.models.executed_transaction import ExecutedTransaction


def display_tx_hash(tx_hash: str) -> str:
    """Render a transaction hash as "sync-tx:<hex>"."""
    bare = tx_hash[2:] if tx_hash.startswith("0x") else tx_hash
    return f"{SYNC_TX_PREFIX}{bare}"


def transaction_entry(tx: ExecutedTransaction) -> HistoryEntry:
    """
    Build a history entry from an executed transaction.

    The payload is copied so enrichment never touches the loaded row.
    """
    return HistoryEntry(
        order_key=OrderKey(tx.block_number, tx.block_index),
        partition=Partition.TRANSACTION,
        tx_hash=tx.tx_hash,
        hash=display_tx_hash(tx.tx_hash),
        tx=copy.deepcopy(tx.tx),
        created_at=tx.created_at,
        success=tx.success,
        fail_reason=tx.fail_reason,
        batch_id=tx.batch_id,
    )


def priority_op_entry(op: ExecutedPriorityOperation) -> HistoryEntry:
    """Build a history entry from an executed priority operation."""
    return HistoryEntry(
        order_key=OrderKey(op.block_number, op.block_index),
        partition=Partition.PRIORITY_OP,
        tx_hash=op.tx_hash,
        hash=op.eth_hash,
        tx=copy.deepcopy(op.operation),
        created_at=op.created_at,
        success=True,
        eth_block=op.eth_block,
        pq_id=op.priority_op_serialid,
    )
