"""
Token repository.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ledger_history.models.token import Token
from ledger_history.repositories.base import BaseRepository
from ledger_history.utils.db_decorators import with_store_errors


class TokenRepository(BaseRepository[Token]):
    """Repository for token metadata."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository."""
        super().__init__(Token, session)

    @with_store_errors
    async def load_symbols(self) -> dict[int, str]:
        """
        Load every token symbol.

        Returns:
            Mapping of token id to symbol
        """
        result = await self.session.execute(select(Token.id, Token.symbol))
        return {row.id: row.symbol for row in result.all()}
