"""
Mempool transaction model.

Transactions accepted but not yet included in a block. Maintained by the
mempool component; this package only reads it.
"""

from datetime import UTC, datetime
from typing import Any

from sqlalchemy import BigInteger, DateTime, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from ledger_history.models.base import Base


class MempoolTx(Base):
    """
    Queued transaction.

    tx_hash is stored as bare hex without the 0x prefix.
    """

    __tablename__ = "mempool_txs"

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=True)
    tx_hash: Mapped[str] = mapped_column(
        String(64), nullable=False, unique=True
    )
    tx: Mapped[dict[str, Any]] = mapped_column(JSONB, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )
    batch_id: Mapped[int] = mapped_column(
        BigInteger, nullable=False, default=0, index=True
    )
    eth_sign_data: Mapped[dict[str, Any] | None] = mapped_column(
        JSONB, nullable=True
    )
