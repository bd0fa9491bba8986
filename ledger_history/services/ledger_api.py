"""
Exposed read operations.

Every operation validates its input, opens its own read transaction and
runs under a deadline. A deadline hit or a store failure surfaces as
StoreUnavailableError for that call only.
"""

import asyncio
from collections.abc import Awaitable, Callable
from datetime import datetime
from typing import TypeVar

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ledger_history.config.settings import settings
from ledger_history.database import get_session_maker, read_transaction
from ledger_history.domain.batch import BatchInfo
from ledger_history.domain.dtos import PriorityOpReceipt, Receipt, TxByHash, TxData
from ledger_history.domain.ordering import HistoryEntry, OrderKey, SearchDirection
from ledger_history.services.batch_service import BatchService
from ledger_history.services.history_service import HistoryService
from ledger_history.services.receipt_service import ReceiptService
from ledger_history.services.token_cache import TokenSymbolCache, token_symbol_cache
from ledger_history.utils.exceptions import StoreUnavailableError
from ledger_history.utils.validation import normalize_address, normalize_tx_hash


T = TypeVar("T")


def parse_cursor(cursor: OrderKey | str | None) -> OrderKey | str | None:
    """
    Normalize a page cursor.

    Args:
        cursor: Order key, "<block>,<index>" tx_id, transaction hash or None

    Returns:
        Order key or normalized hash

    Raises:
        ValueError: If the cursor is neither a tx_id nor a hash
    """
    if cursor is None or isinstance(cursor, OrderKey):
        return cursor
    if "," in cursor:
        return OrderKey.parse(cursor)
    return normalize_tx_hash(cursor)


class LedgerHistoryApi:
    """
    Read operations offered to external clients.

    Example:
        api = LedgerHistoryApi()
        page = await api.get_account_history_page(address, limit=10)
    """

    def __init__(
        self,
        session_maker: async_sessionmaker[AsyncSession] | None = None,
        token_cache: TokenSymbolCache | None = None,
        timeout: float | None = None,
    ) -> None:
        """
        Initialize API.

        Args:
            session_maker: Session factory, the process-wide one by default
            token_cache: Token symbol cache, the process-wide one by default
            timeout: Default deadline in seconds
        """
        self._session_maker = session_maker
        self.token_cache = token_cache or token_symbol_cache
        self.timeout = timeout or settings.request_timeout_seconds

    @property
    def session_maker(self) -> async_sessionmaker[AsyncSession]:
        if self._session_maker is None:
            self._session_maker = get_session_maker()
        return self._session_maker

    async def _run(
        self,
        name: str,
        operation: Callable[[AsyncSession], Awaitable[T]],
        timeout: float | None,
    ) -> T:
        deadline = timeout or self.timeout

        async def in_transaction() -> T:
            async with read_transaction(self.session_maker) as session:
                return await operation(session)

        try:
            return await asyncio.wait_for(in_transaction(), deadline)
        except asyncio.TimeoutError as e:
            logger.error(f"[API] {name} exceeded {deadline}s deadline")
            raise StoreUnavailableError(name, e) from e

    def _history(self, session: AsyncSession) -> HistoryService:
        return HistoryService(session, token_cache=self.token_cache)

    async def get_receipt(
        self, tx_hash: str, timeout: float | None = None
    ) -> Receipt | None:
        """Get the receipt of a transaction, priority operation or queued tx."""
        tx_hash = normalize_tx_hash(tx_hash)
        return await self._run(
            "get_receipt",
            lambda session: ReceiptService(session).get_receipt(tx_hash),
            timeout,
        )

    async def get_tx_data(
        self, tx_hash: str, timeout: float | None = None
    ) -> TxData | None:
        """Get receipt and stored payload of any known entry."""
        tx_hash = normalize_tx_hash(tx_hash)
        return await self._run(
            "get_tx_data",
            lambda session: ReceiptService(session).get_tx_data(tx_hash),
            timeout,
        )

    async def get_priority_op_receipt(
        self, serial_id: int, timeout: float | None = None
    ) -> PriorityOpReceipt:
        """Get inclusion and finality flags of a priority operation."""
        if serial_id < 0:
            raise ValueError(f"Invalid priority operation serial id: {serial_id}")
        return await self._run(
            "get_priority_op_receipt",
            lambda session: ReceiptService(session).get_priority_op_receipt(serial_id),
            timeout,
        )

    async def get_tx_by_hash(
        self, tx_hash: str, timeout: float | None = None
    ) -> TxByHash | None:
        """Get the legacy flattened view of an executed entry."""
        tx_hash = normalize_tx_hash(tx_hash)
        return await self._run(
            "get_tx_by_hash",
            lambda session: ReceiptService(session).get_tx_by_hash(tx_hash),
            timeout,
        )

    async def get_account_history_page(
        self,
        address: str,
        cursor: OrderKey | str | None = None,
        direction: SearchDirection | str = SearchDirection.OLDER,
        limit: int | None = None,
        second_address: str | None = None,
        token: int | None = None,
        offset: int | None = None,
        timeout: float | None = None,
    ) -> list[HistoryEntry]:
        """
        Get one page of an account history.

        Args:
            address: Account address
            cursor: Order key, tx_id string or transaction hash
            direction: "older" or "newer"
            limit: Page size
            second_address: Only transactions shared with this address
            token: Only entries for this token id
            offset: Legacy offset paging, newest first; excludes every
                other filter
            timeout: Deadline in seconds

        Returns:
            Page entries

        Raises:
            ValueError: On invalid input
            StoreUnavailableError: On store failure or deadline hit
        """
        address = normalize_address(address)

        if offset is not None:
            if offset < 0:
                raise ValueError(f"Invalid offset: {offset}")
            if cursor is not None or second_address is not None or token is not None:
                raise ValueError("Offset paging takes no cursor or filters")
            return await self._run(
                "get_account_history_page",
                lambda session: self._history(session).page_by_offset(
                    address, offset, limit
                ),
                timeout,
            )

        direction = SearchDirection(direction)
        cursor = parse_cursor(cursor)
        if second_address is not None:
            second_address = normalize_address(second_address)
        if token is not None and token < 0:
            raise ValueError(f"Invalid token id: {token}")

        return await self._run(
            "get_account_history_page",
            lambda session: self._history(session).page(
                address,
                second_address=second_address,
                token=token,
                cursor=cursor,
                direction=direction,
                limit=limit,
            ),
            timeout,
        )

    async def get_account_history_count(
        self,
        address: str,
        token: int | None = None,
        second_address: str | None = None,
        timeout: float | None = None,
    ) -> int:
        """Count entries of an account history."""
        address = normalize_address(address)
        if second_address is not None:
            second_address = normalize_address(second_address)
        return await self._run(
            "get_account_history_count",
            lambda session: self._history(session).count(
                address, token, second_address
            ),
            timeout,
        )

    async def get_account_last_tx_hash(
        self, address: str, timeout: float | None = None
    ) -> str | None:
        address = normalize_address(address)
        return await self._run(
            "get_account_last_tx_hash",
            lambda session: self._history(session).account_last_tx_hash(address),
            timeout,
        )

    async def get_block_last_tx_hash(
        self, block_number: int, timeout: float | None = None
    ) -> str | None:
        if block_number < 0:
            raise ValueError(f"Invalid block number: {block_number}")
        return await self._run(
            "get_block_last_tx_hash",
            lambda session: self._history(session).block_last_tx_hash(block_number),
            timeout,
        )

    async def get_batch_info(
        self, batch_hash: str, timeout: float | None = None
    ) -> BatchInfo | None:
        """Get a batch and its aggregated status."""
        batch_hash = normalize_tx_hash(batch_hash)
        return await self._run(
            "get_batch_info",
            lambda session: BatchService(session).batch_info(batch_hash),
            timeout,
        )

    async def get_tx_created_at_and_block(
        self, tx_hash: str, timeout: float | None = None
    ) -> tuple[datetime, int] | None:
        tx_hash = normalize_tx_hash(tx_hash)
        return await self._run(
            "get_tx_created_at_and_block",
            lambda session: self._history(session).tx_created_at_and_block(tx_hash),
            timeout,
        )

    async def account_created_on(
        self, address: str, timeout: float | None = None
    ) -> datetime | None:
        """Get the timestamp of the first entry touching an address."""
        address = normalize_address(address)
        return await self._run(
            "account_created_on",
            lambda session: self._history(session).account_created_on(address),
            timeout,
        )

    async def refresh_token_symbols(self, timeout: float | None = None) -> int:
        """
        Reload the token symbol cache.

        Returns:
            Number of symbols loaded
        """
        symbols = await self._run(
            "refresh_token_symbols",
            self.token_cache.refresh,
            timeout,
        )
        return len(symbols)
