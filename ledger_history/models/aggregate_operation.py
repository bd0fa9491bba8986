"""
Aggregated operation model.

An L1 settlement event covering an inclusive range of blocks.
"""

from datetime import UTC, datetime
from enum import StrEnum

from sqlalchemy import BigInteger, Boolean, CheckConstraint, DateTime, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from ledger_history.models.base import Base


class AggregatedActionType(StrEnum):
    """Kind of settlement performed on L1."""

    COMMIT_BLOCKS = "CommitBlocks"
    EXECUTE_BLOCKS = "ExecuteBlocks"


class AggregateOperation(Base):
    """
    Aggregated operation.

    Append-only; confirmed flips from false to true exactly once.
    """

    __tablename__ = "aggregate_operations"
    __table_args__ = (
        CheckConstraint("from_block <= to_block", name="block_range_ordered"),
        Index(
            "ix_aggregate_operations_kind_range",
            "action_type",
            "confirmed",
            "to_block",
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    action_type: Mapped[str] = mapped_column(String(32), nullable=False)
    from_block: Mapped[int] = mapped_column(BigInteger, nullable=False)
    to_block: Mapped[int] = mapped_column(BigInteger, nullable=False)
    confirmed: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<AggregateOperation({self.action_type} "
            f"[{self.from_block}, {self.to_block}], confirmed={self.confirmed})>"
        )

    def covers(self, block_number: int) -> bool:
        """Check if block lies inside this operation's range."""
        return self.from_block <= block_number <= self.to_block
