"""
Executed priority operation model.

L1-originated operations (deposits, full exits) included in a block.
Always successful once executed.
"""

from datetime import UTC, datetime
from typing import Any

from sqlalchemy import BigInteger, DateTime, Index, Integer, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from ledger_history.models.base import Base


class ExecutedPriorityOperation(Base):
    """
    Executed priority operation.

    Attributes:
        tx_hash: L2 hash of the operation
        eth_hash: Hash of the originating L1 transaction
        priority_op_serialid: Serial id assigned on L1 (origin ordering)
        eth_block: L1 block the operation was emitted in
        operation: Payload tagged by "type" with the nested "priority_op"
    """

    __tablename__ = "executed_priority_operations"
    __table_args__ = (
        Index(
            "ix_executed_priority_operations_order_key",
            "block_number",
            "block_index",
        ),
    )

    tx_hash: Mapped[str] = mapped_column(String(66), primary_key=True)
    eth_hash: Mapped[str] = mapped_column(
        String(66), nullable=False, unique=True
    )
    block_number: Mapped[int] = mapped_column(
        BigInteger, nullable=False, index=True
    )
    block_index: Mapped[int] = mapped_column(Integer, nullable=False)

    priority_op_serialid: Mapped[int] = mapped_column(
        BigInteger, nullable=False, unique=True
    )
    eth_block: Mapped[int] = mapped_column(BigInteger, nullable=False)
    eth_block_index: Mapped[int | None] = mapped_column(
        Integer, nullable=True
    )

    operation: Mapped[dict[str, Any]] = mapped_column(JSONB, nullable=False)

    from_account: Mapped[str] = mapped_column(
        String(42), nullable=False, index=True
    )
    to_account: Mapped[str] = mapped_column(
        String(42), nullable=False, index=True
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<ExecutedPriorityOperation(serial_id={self.priority_op_serialid}, "
            f"block={self.block_number}, index={self.block_index})>"
        )
