"""
Transaction batch hash model.

Maps the internal batch id shared by batch members to its external hash.
"""

from sqlalchemy import BigInteger, String
from sqlalchemy.orm import Mapped, mapped_column

from ledger_history.models.base import Base


class TxsBatchHash(Base):
    """External identifier of an atomically submitted batch."""

    __tablename__ = "txs_batches_hashes"

    batch_id: Mapped[int] = mapped_column(BigInteger, primary_key=True)
    batch_hash: Mapped[str] = mapped_column(
        String(66), nullable=False, unique=True
    )
