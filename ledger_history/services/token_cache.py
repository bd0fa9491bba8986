"""
Token symbol cache.

Process-scoped read-through cache of the token table. Loaded on first
use and reloaded on explicit refresh, or after the configured lifetime
when one is set. Concurrent loads are serialized by an asyncio.Lock;
the most recent load wins.
"""

import asyncio
import time
from collections.abc import Mapping

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from ledger_history.config.settings import settings
from ledger_history.domain.enrichment import TokenSymbolEnricher
from ledger_history.repositories.token_repository import TokenRepository


class TokenSymbolCache:
    """Cached token id to symbol table."""

    def __init__(self, ttl_seconds: int | None = None) -> None:
        """
        Initialize cache.

        Args:
            ttl_seconds: Lifetime of a loaded table, 0 or None to keep it
                until refresh() or invalidate()
        """
        self.ttl_seconds = (
            settings.token_cache_ttl_seconds if ttl_seconds is None else ttl_seconds
        )
        self._symbols: dict[int, str] | None = None
        self._loaded_at = 0.0
        self._lock = asyncio.Lock()

    @property
    def is_loaded(self) -> bool:
        return self._symbols is not None

    def _is_stale(self) -> bool:
        if self._symbols is None:
            return True
        if not self.ttl_seconds:
            return False
        return time.monotonic() - self._loaded_at >= self.ttl_seconds

    async def _load(self, session: AsyncSession) -> dict[int, str]:
        symbols = await TokenRepository(session).load_symbols()
        self._symbols = symbols
        self._loaded_at = time.monotonic()
        logger.info(f"[TokenCache] Loaded {len(symbols)} token symbols")
        return symbols

    async def get_symbols(self, session: AsyncSession) -> Mapping[int, str]:
        """
        Get the symbol table, loading it when absent or stale.

        Args:
            session: Session of the current request

        Returns:
            Token id to symbol mapping
        """
        if not self._is_stale():
            return self._symbols

        async with self._lock:
            # Another request may have loaded it while we waited
            if not self._is_stale():
                return self._symbols
            return await self._load(session)

    async def refresh(self, session: AsyncSession) -> Mapping[int, str]:
        """Reload the symbol table unconditionally."""
        async with self._lock:
            return await self._load(session)

    def invalidate(self) -> None:
        """Drop the table; the next read reloads it."""
        self._symbols = None
        self._loaded_at = 0.0
        logger.debug("[TokenCache] Invalidated")

    async def enricher(
        self,
        session: AsyncSession,
        min_nft_token_id: int | None = None,
    ) -> TokenSymbolEnricher:
        """Build an enricher over the current symbol table."""
        symbols = await self.get_symbols(session)
        return TokenSymbolEnricher(
            symbols,
            min_nft_token_id or settings.min_nft_token_id,
        )


# Shared by every request of the process
token_symbol_cache = TokenSymbolCache()
