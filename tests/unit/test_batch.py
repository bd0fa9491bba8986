"""Unit tests for the batch status policy."""

from datetime import UTC, datetime, timedelta

import pytest

from ledger_history.domain.batch import BatchMember, aggregate_batch_status
from ledger_history.domain.status import TxStatus


CREATED = datetime(2026, 1, 1, tzinfo=UTC)
FINALIZED = CREATED + timedelta(hours=2)


def member(seed: int, success: bool = True) -> BatchMember:
    return BatchMember(
        tx_hash=f"0x{seed:064x}",
        block_number=10,
        success=success,
        created_at=CREATED + timedelta(seconds=seed),
    )


class TestAggregateBatchStatus:
    """Tests for aggregate_batch_status."""

    def test_all_succeeded_finalized(self):
        status = aggregate_batch_status([member(0), member(1)], FINALIZED)

        assert status.last_state == TxStatus.FINALIZED
        assert status.updated_at == FINALIZED

    def test_all_succeeded_not_finalized_is_committed(self):
        status = aggregate_batch_status([member(0), member(1)], None)

        assert status.last_state == TxStatus.COMMITTED
        assert status.updated_at == CREATED

    def test_any_failure_rejects_even_when_finalized(self):
        status = aggregate_batch_status([member(0), member(1, success=False)], FINALIZED)

        assert status.last_state == TxStatus.REJECTED
        assert status.updated_at == CREATED

    def test_updated_at_from_first_member(self):
        status = aggregate_batch_status([member(3), member(5)], None)

        assert status.updated_at == CREATED + timedelta(seconds=3)

    def test_empty_batch_rejected(self):
        with pytest.raises(ValueError):
            aggregate_batch_status([], None)
