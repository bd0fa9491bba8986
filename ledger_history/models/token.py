"""
Token model.

Token metadata used to render symbols in transaction payloads.
"""

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from ledger_history.models.base import Base


class Token(Base):
    """Fungible token metadata."""

    __tablename__ = "tokens"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    address: Mapped[str] = mapped_column(
        String(42), nullable=False, unique=True
    )
    symbol: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    decimals: Mapped[int] = mapped_column(Integer, nullable=False, default=18)

    def __repr__(self) -> str:
        """String representation."""
        return f"<Token(id={self.id}, symbol={self.symbol})>"
