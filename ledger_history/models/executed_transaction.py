"""
Executed transaction model.

Ordinary user-signed transactions included in a block. Rows are written
once by the ingestion pipeline and never updated.
"""

from datetime import UTC, datetime
from typing import Any

from sqlalchemy import BigInteger, Boolean, DateTime, Index, Integer, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from ledger_history.models.base import Base


class ExecutedTransaction(Base):
    """
    Executed transaction.

    Attributes:
        tx_hash: 0x-prefixed lowercase transaction hash
        block_number: Block the transaction was included in
        block_index: Position inside the block
        tx: Signed transaction payload tagged by "type"
        operation: Executed operation blob (carries derived values
            such as withdraw_amount)
        success: Execution outcome
        fail_reason: Failure description for rejected transactions
        batch_id: Internal id of the atomic batch, if any
    """

    __tablename__ = "executed_transactions"
    __table_args__ = (
        Index("ix_executed_transactions_order_key", "block_number", "block_index"),
        Index("ix_executed_transactions_batch_id", "batch_id"),
    )

    tx_hash: Mapped[str] = mapped_column(String(66), primary_key=True)
    block_number: Mapped[int] = mapped_column(
        BigInteger, nullable=False, index=True
    )
    block_index: Mapped[int] = mapped_column(Integer, nullable=False)

    tx: Mapped[dict[str, Any]] = mapped_column(JSONB, nullable=False)
    operation: Mapped[dict[str, Any]] = mapped_column(JSONB, nullable=False)

    # Addresses (normalized to lowercase)
    from_account: Mapped[str] = mapped_column(
        String(42), nullable=False, index=True
    )
    to_account: Mapped[str | None] = mapped_column(
        String(42), nullable=True, index=True
    )
    primary_account_address: Mapped[str] = mapped_column(
        String(42), nullable=False, index=True
    )

    success: Mapped[bool] = mapped_column(Boolean, nullable=False)
    fail_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    nonce: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    batch_id: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    eth_sign_data: Mapped[dict[str, Any] | None] = mapped_column(
        JSONB, nullable=True
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<ExecutedTransaction(tx_hash={self.tx_hash[:18]}..., "
            f"block={self.block_number}, index={self.block_index}, "
            f"success={self.success})>"
        )
