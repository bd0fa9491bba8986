"""
Database models.

Exports all SQLAlchemy models for easy imports.
"""

from ledger_history.models.aggregate_operation import (
    AggregatedActionType,
    AggregateOperation,
)
from ledger_history.models.base import Base
from ledger_history.models.executed_priority_operation import (
    ExecutedPriorityOperation,
)
from ledger_history.models.executed_transaction import ExecutedTransaction
from ledger_history.models.mempool_tx import MempoolTx
from ledger_history.models.token import Token
from ledger_history.models.tx_filter import TxFilter
from ledger_history.models.txs_batch_hash import TxsBatchHash

__all__ = [
    # Base
    "Base",
    # Ledger partitions
    "ExecutedTransaction",
    "ExecutedPriorityOperation",
    # Settlement
    "AggregatedActionType",
    "AggregateOperation",
    # Indexes and metadata
    "TxFilter",
    "TxsBatchHash",
    "Token",
    # Mempool (read-only)
    "MempoolTx",
]
