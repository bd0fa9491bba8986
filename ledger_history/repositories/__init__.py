"""
Repositories.

Data access layer for the ledger history store.
"""

from ledger_history.repositories.aggregate_operation_repository import (
    AggregateOperationRepository,
)
from ledger_history.repositories.base import BaseRepository
from ledger_history.repositories.executed_transaction_repository import (
    ExecutedTransactionRepository,
)
from ledger_history.repositories.history_repository import (
    HistoryRepository,
    PartitionPosition,
)
from ledger_history.repositories.mempool_repository import MempoolRepository
from ledger_history.repositories.priority_operation_repository import (
    PriorityOperationRepository,
)
from ledger_history.repositories.query_builder import HistoryQuery
from ledger_history.repositories.token_repository import TokenRepository
from ledger_history.repositories.tx_filter_repository import (
    FilterIndexEntry,
    TxFilterRepository,
)

__all__ = [
    "BaseRepository",
    "HistoryQuery",
    # Partitions
    "ExecutedTransactionRepository",
    "PriorityOperationRepository",
    "HistoryRepository",
    "PartitionPosition",
    # Index
    "FilterIndexEntry",
    "TxFilterRepository",
    # Settlement and metadata
    "AggregateOperationRepository",
    "TokenRepository",
    "MempoolRepository",
]
