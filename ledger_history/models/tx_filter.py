"""
Transaction filter model.

Address to transaction membership index. The composite primary key on
(address, token, tx_hash) makes repeated indexing of a triple a no-op.
"""

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from ledger_history.models.base import Base


class TxFilter(Base):
    """Membership of a transaction in an address history for one token."""

    __tablename__ = "tx_filters"

    address: Mapped[str] = mapped_column(String(42), primary_key=True)
    token: Mapped[int] = mapped_column(Integer, primary_key=True)
    tx_hash: Mapped[str] = mapped_column(
        String(66), primary_key=True, index=True
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<TxFilter(address={self.address}, token={self.token}, "
            f"tx_hash={self.tx_hash[:18]}...)>"
        )
