"""
Ledger domain types.

Pure logic shared by repositories and services: payload variants, order
keys and the history merge, status resolution, batch policy and token
enrichment.
"""

from ledger_history.domain.batch import (
    BatchInfo,
    BatchMember,
    BatchStatus,
    aggregate_batch_status,
)
from ledger_history.domain.enrichment import TokenSymbolEnricher
from ledger_history.domain.ordering import (
    HistoryEntry,
    OrderKey,
    Partition,
    SearchDirection,
    merge_partitions,
)
from ledger_history.domain.payload import (
    TxPayload,
    TxSummary,
    parse_priority_payload,
    parse_tx_payload,
)
from ledger_history.domain.status import (
    BlockRange,
    ConfirmedRanges,
    TxStatus,
    resolve_status,
)

__all__ = [
    "BatchInfo",
    "BatchMember",
    "BatchStatus",
    "aggregate_batch_status",
    "TokenSymbolEnricher",
    "HistoryEntry",
    "OrderKey",
    "Partition",
    "SearchDirection",
    "merge_partitions",
    "TxPayload",
    "TxSummary",
    "parse_priority_payload",
    "parse_tx_payload",
    "BlockRange",
    "ConfirmedRanges",
    "TxStatus",
    "resolve_status",
]
