"""
Response objects of the exposed read operations.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from ledger_history.domain.status import TxStatus


@dataclass(frozen=True)
class Receipt:
    """
    Receipt of a transaction or priority operation.

    block_number is None while the transaction is queued.
    """

    tx_hash: str
    status: TxStatus
    block_number: int | None = None
    fail_reason: str | None = None
    eth_block: int | None = None
    priority_op_serialid: int | None = None


@dataclass(frozen=True)
class TxData:
    """Receipt plus the stored payload."""

    receipt: Receipt
    tx: dict[str, Any]
    created_at: datetime
    eth_hash: str | None = None
    batch_id: int | None = None
    eth_sign_data: dict[str, Any] | None = None


@dataclass(frozen=True)
class PriorityOpReceipt:
    """Inclusion and finality flags of a priority operation."""

    committed: bool
    verified: bool


@dataclass(frozen=True)
class TxByHash:
    """Legacy flattened view of one executed entry."""

    tx_type: str
    from_: str
    to: str
    token: int
    amount: str
    fee: str | None
    block_number: int
    nonce: int
    created_at: str
    fail_reason: str | None
    tx: dict[str, Any]
    batch_id: int | None = None


@dataclass(frozen=True)
class EntryPosition:
    """Creation time and enclosing block of a stored entry."""

    created_at: datetime
    block_number: int
    block_index: int
