"""Integration tests for LedgerHistoryApi input handling and deadlines."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from conftest import ALICE, BOB, make_hash
from ledger_history.domain.ordering import OrderKey, SearchDirection
from ledger_history.services import ledger_api
from ledger_history.services.ledger_api import LedgerHistoryApi, parse_cursor
from ledger_history.utils.exceptions import StoreUnavailableError


def session_maker_for(session):
    """Session factory usable by read_transaction."""
    begin = MagicMock()
    begin.__aenter__ = AsyncMock()
    begin.__aexit__ = AsyncMock(return_value=False)
    session.begin.return_value = begin

    context = MagicMock()
    context.__aenter__ = AsyncMock(return_value=session)
    context.__aexit__ = AsyncMock(return_value=False)
    return MagicMock(return_value=context)


@pytest.fixture
def session():
    return MagicMock()


@pytest.fixture
def api(session):
    return LedgerHistoryApi(
        session_maker=session_maker_for(session),
        token_cache=MagicMock(),
        timeout=1.0,
    )


class RecordingHistoryService:
    """Stands in for HistoryService and records the calls it gets."""

    calls: list[tuple[str, tuple, dict]] = []

    def __init__(self, session, token_cache=None):
        self.session = session

    async def page(self, *args, **kwargs):
        self.calls.append(("page", args, kwargs))
        return []

    async def page_by_offset(self, *args, **kwargs):
        self.calls.append(("page_by_offset", args, kwargs))
        return []

    async def count(self, *args):
        self.calls.append(("count", args, {}))
        return 3


@pytest.fixture
def recorded(monkeypatch):
    RecordingHistoryService.calls = []
    monkeypatch.setattr(ledger_api, "HistoryService", RecordingHistoryService)
    return RecordingHistoryService.calls


class TestParseCursor:
    """Tests for cursor parsing."""

    def test_tx_id(self):
        assert parse_cursor("7,2") == OrderKey(7, 2)

    def test_hash(self):
        assert parse_cursor("AB" * 32) == "0x" + "ab" * 32

    def test_none_and_order_key_pass_through(self):
        assert parse_cursor(None) is None
        assert parse_cursor(OrderKey(1, 0)) == OrderKey(1, 0)

    @pytest.mark.parametrize("cursor", ["7,", "a,b", "1,2,3", "-1,0", "nope"])
    def test_invalid(self, cursor):
        with pytest.raises(ValueError):
            parse_cursor(cursor)


class TestInputValidation:
    """Invalid input is rejected before the store is touched."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "call",
        [
            lambda api: api.get_receipt("0x1234"),
            lambda api: api.get_tx_by_hash("not-a-hash"),
            lambda api: api.get_priority_op_receipt(-1),
            lambda api: api.get_account_history_page("0xdead"),
            lambda api: api.get_account_history_page(ALICE, direction="sideways"),
            lambda api: api.get_account_history_page(ALICE, token=-2),
            lambda api: api.get_account_history_page(ALICE, offset=-1),
            lambda api: api.get_account_history_page(ALICE, offset=0, token=1),
            lambda api: api.get_account_history_page(
                ALICE, offset=0, cursor="7,2"
            ),
            lambda api: api.get_account_history_count(ALICE, second_address="x"),
            lambda api: api.get_block_last_tx_hash(-5),
            lambda api: api.get_batch_info(""),
            lambda api: api.account_created_on("0x12"),
        ],
    )
    async def test_rejected_without_store_access(self, call):
        session_maker = MagicMock()
        api = LedgerHistoryApi(session_maker=session_maker, token_cache=MagicMock())

        with pytest.raises(ValueError):
            await call(api)

        session_maker.assert_not_called()


class TestDelegation:
    """Tests for argument normalization on the way to the services."""

    @pytest.mark.asyncio
    async def test_cursor_page_normalized(self, api, recorded):
        await api.get_account_history_page(
            ALICE.upper().replace("0X", "0x"),
            cursor="7,2",
            direction="newer",
            second_address=BOB,
            limit=5,
        )

        name, args, kwargs = recorded[0]
        assert name == "page"
        assert args == (ALICE,)
        assert kwargs["cursor"] == OrderKey(7, 2)
        assert kwargs["direction"] == SearchDirection.NEWER
        assert kwargs["second_address"] == BOB
        assert kwargs["limit"] == 5

    @pytest.mark.asyncio
    async def test_offset_page(self, api, recorded):
        await api.get_account_history_page(ALICE, offset=20, limit=10)

        assert recorded == [("page_by_offset", (ALICE, 20, 10), {})]

    @pytest.mark.asyncio
    async def test_count(self, api, recorded):
        assert await api.get_account_history_count(ALICE, token=1) == 3
        assert recorded == [("count", (ALICE, 1, None), {})]

    @pytest.mark.asyncio
    async def test_refresh_token_symbols(self, session):
        token_cache = MagicMock()
        token_cache.refresh = AsyncMock(return_value={0: "ETH", 1: "USDC"})
        api = LedgerHistoryApi(
            session_maker=session_maker_for(session), token_cache=token_cache
        )

        assert await api.refresh_token_symbols() == 2
        token_cache.refresh.assert_awaited_once_with(session)


class SlowReceiptService:
    def __init__(self, session):
        self.session = session

    async def get_receipt(self, tx_hash):
        await asyncio.sleep(5)


class FailingReceiptService:
    def __init__(self, session):
        self.session = session

    async def get_receipt(self, tx_hash):
        raise StoreUnavailableError("get_by_hash")


class TestFailures:
    """Tests for deadlines and store failures."""

    @pytest.mark.asyncio
    async def test_deadline_becomes_store_unavailable(self, api, monkeypatch):
        monkeypatch.setattr(ledger_api, "ReceiptService", SlowReceiptService)

        with pytest.raises(StoreUnavailableError) as exc_info:
            await api.get_receipt(make_hash(1), timeout=0.01)

        assert exc_info.value.operation == "get_receipt"

    @pytest.mark.asyncio
    async def test_store_failure_propagates(self, api, monkeypatch):
        monkeypatch.setattr(ledger_api, "ReceiptService", FailingReceiptService)

        with pytest.raises(StoreUnavailableError):
            await api.get_receipt(make_hash(1))
