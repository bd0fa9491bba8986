"""Integration tests for BatchService over the in-memory ledger."""

from datetime import timedelta

import pytest

from conftest import BASE_TIME, make_hash
from ledger_history.domain.status import TxStatus
from ledger_history.models import AggregatedActionType, MempoolTx
from ledger_history.services.batch_service import BatchService


BATCH_HASH = make_hash(777)


@pytest.fixture
def batch_service(ledger, mock_session):
    service = BatchService(mock_session)
    ledger.wire(service)
    return service


@pytest.fixture
def included_batch(ledger):
    """Two members of batch 1 included in block 5."""
    ledger.batches[1] = BATCH_HASH
    first = ledger.add_tx(5, 0, batch_id=1, created_at=BASE_TIME)
    second = ledger.add_tx(5, 1, batch_id=1, created_at=BASE_TIME)
    return first, second


class TestIncludedBatch:
    """Tests for batches with included members."""

    @pytest.mark.asyncio
    async def test_committed_when_block_not_finalized(
        self, included_batch, batch_service
    ):
        first, second = included_batch

        info = await batch_service.batch_info(BATCH_HASH)

        assert info.transaction_hashes == [first.tx_hash, second.tx_hash]
        assert info.created_at == BASE_TIME
        assert info.batch_status.last_state == TxStatus.COMMITTED
        assert info.batch_status.updated_at == BASE_TIME

    @pytest.mark.asyncio
    async def test_finalized_by_covering_execute_operation(
        self, ledger, included_batch, batch_service
    ):
        executed_at = BASE_TIME + timedelta(hours=3)
        ledger.confirm(AggregatedActionType.EXECUTE_BLOCKS, 4, 6, created_at=executed_at)

        info = await batch_service.batch_info(BATCH_HASH)

        assert info.batch_status.last_state == TxStatus.FINALIZED
        assert info.batch_status.updated_at == executed_at

    @pytest.mark.asyncio
    async def test_commit_operation_does_not_finalize(
        self, ledger, included_batch, batch_service
    ):
        ledger.confirm(AggregatedActionType.COMMIT_BLOCKS, 1, 10)
        ledger.confirm(AggregatedActionType.EXECUTE_BLOCKS, 1, 10, confirmed=False)

        info = await batch_service.batch_info(BATCH_HASH)

        assert info.batch_status.last_state == TxStatus.COMMITTED

    @pytest.mark.asyncio
    async def test_rejected_when_any_member_failed(self, ledger, batch_service):
        ledger.batches[1] = BATCH_HASH
        ledger.add_tx(5, 0, batch_id=1, created_at=BASE_TIME)
        ledger.add_tx(5, 1, batch_id=1, success=False, created_at=BASE_TIME)
        ledger.confirm(AggregatedActionType.EXECUTE_BLOCKS, 1, 10)

        info = await batch_service.batch_info(BATCH_HASH)

        assert info.batch_status.last_state == TxStatus.REJECTED
        assert info.batch_status.updated_at == BASE_TIME


class TestQueuedBatch:
    """Tests for batches still in the mempool."""

    @pytest.mark.asyncio
    async def test_falls_through_to_mempool(self, ledger, batch_service):
        ledger.batches[2] = BATCH_HASH
        ledger.mempool.append(
            MempoolTx(
                id=1,
                tx_hash="cd" * 32,
                tx={"type": "Transfer"},
                created_at=BASE_TIME,
                batch_id=2,
            )
        )

        info = await batch_service.batch_info(BATCH_HASH)

        assert info.transaction_hashes == ["0x" + "cd" * 32]
        assert info.batch_status.last_state == TxStatus.QUEUED

    @pytest.mark.asyncio
    async def test_unknown_batch(self, batch_service):
        assert await batch_service.batch_info(make_hash(999)) is None
