"""
Services.

Business logic over the repositories. One service instance serves one
request session.
"""

from ledger_history.services.batch_service import BatchService
from ledger_history.services.filter_index_service import (
    FilterIndexService,
    WatermarkCache,
)
from ledger_history.services.history_service import HistoryService
from ledger_history.services.ledger_api import LedgerHistoryApi
from ledger_history.services.receipt_service import ReceiptService
from ledger_history.services.status_resolver import StatusResolver
from ledger_history.services.token_cache import TokenSymbolCache, token_symbol_cache

__all__ = [
    "BatchService",
    "FilterIndexService",
    "WatermarkCache",
    "HistoryService",
    "LedgerHistoryApi",
    "ReceiptService",
    "StatusResolver",
    "TokenSymbolCache",
    "token_symbol_cache",
]
