"""
Receipt service.

Single-entry lookups: receipts, stored payloads and the legacy
flattened transaction view.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from ledger_history.config.constants import (
    UNKNOWN_AMOUNT,
    UNKNOWN_FEE,
    UNKNOWN_FROM,
    UNKNOWN_TO,
    UNKNOWN_TOKEN_ID,
    UNKNOWN_TX_TYPE,
)
from ledger_history.domain.dtos import PriorityOpReceipt, Receipt, TxByHash, TxData
from ledger_history.domain.payload import (
    TxSummary,
    payload_kind,
    parse_priority_payload,
    parse_tx_payload,
)
from ledger_history.domain.status import TxStatus
from ledger_history.repositories.executed_transaction_repository import (
    ExecutedTransactionRepository,
)
from ledger_history.repositories.mempool_repository import MempoolRepository
from ledger_history.repositories.priority_operation_repository import (
    PriorityOperationRepository,
)
from ledger_history.services.base_service import BaseService
from ledger_history.services.status_resolver import StatusResolver
from ledger_history.utils.datetime_utils import format_legacy
from ledger_history.utils.exceptions import MalformedPayloadError


def _fallback_summary(raw: object, token: int | None, nonce: int) -> TxSummary:
    return TxSummary(
        kind=payload_kind(raw) or UNKNOWN_TX_TYPE,
        from_=UNKNOWN_FROM,
        to=UNKNOWN_TO,
        fee=UNKNOWN_FEE,
        amount=UNKNOWN_AMOUNT,
        token=token,
        nonce=nonce,
    )


class ReceiptService(BaseService):
    """
    Receipt service.

    Lookups fall through ordinary transactions, then priority operations
    (by L2 hash or L1 hash), then queued mempool transactions.
    """

    def __init__(
        self,
        session: AsyncSession,
        status_resolver: StatusResolver | None = None,
    ) -> None:
        """
        Initialize receipt service.

        Args:
            session: Async database session
            status_resolver: Resolver sharing the request's ranges snapshot
        """
        super().__init__(session)
        self.tx_repo = ExecutedTransactionRepository(session)
        self.priority_repo = PriorityOperationRepository(session)
        self.mempool_repo = MempoolRepository(session)
        self.status_resolver = status_resolver or StatusResolver(session)

    async def get_receipt(self, tx_hash: str) -> Receipt | None:
        """
        Get the receipt of any known entry.

        Args:
            tx_hash: Normalized hash

        Returns:
            Receipt or None if the hash is unknown
        """
        data = await self.get_tx_data(tx_hash)
        return data.receipt if data is not None else None

    async def get_tx_data(self, tx_hash: str) -> TxData | None:
        """
        Get receipt and stored payload of any known entry.

        Args:
            tx_hash: Normalized hash

        Returns:
            TxData or None if the hash is unknown
        """
        tx = await self.tx_repo.get_by_hash(tx_hash)
        if tx is not None:
            status = await self.status_resolver.resolve(tx.block_number, tx.success)
            return TxData(
                receipt=Receipt(
                    tx_hash=tx.tx_hash,
                    status=status,
                    block_number=tx.block_number,
                    fail_reason=tx.fail_reason,
                ),
                tx=tx.tx,
                created_at=tx.created_at,
                batch_id=tx.batch_id,
                eth_sign_data=tx.eth_sign_data,
            )

        op = await self.priority_repo.get_by_any_hash(tx_hash)
        if op is not None:
            status = await self.status_resolver.resolve(op.block_number, True)
            return TxData(
                receipt=Receipt(
                    tx_hash=op.tx_hash,
                    status=status,
                    block_number=op.block_number,
                    eth_block=op.eth_block,
                    priority_op_serialid=op.priority_op_serialid,
                ),
                tx=op.operation,
                created_at=op.created_at,
                eth_hash=op.eth_hash,
            )

        queued = await self.mempool_repo.get_queued(tx_hash)
        if queued is not None:
            return TxData(
                receipt=Receipt(tx_hash=tx_hash, status=TxStatus.QUEUED),
                tx=queued.tx,
                created_at=queued.created_at,
                batch_id=queued.batch_id,
                eth_sign_data=queued.eth_sign_data,
            )

        return None

    async def get_priority_op_receipt(self, serial_id: int) -> PriorityOpReceipt:
        """
        Get inclusion and finality flags of a priority operation.

        Args:
            serial_id: L1 serial id

        Returns:
            Receipt; both flags false when the operation is not executed
        """
        op = await self.priority_repo.get_by_serial_id(serial_id)
        if op is None:
            return PriorityOpReceipt(committed=False, verified=False)

        verified = await self.status_resolver.is_block_verified(op.block_number)
        return PriorityOpReceipt(committed=True, verified=verified)

    async def get_tx_by_hash(self, tx_hash: str) -> TxByHash | None:
        """
        Get the legacy flattened view of an executed entry.

        Ordinary transactions are matched by hash, priority operations by
        the hash of their L1 transaction.

        Args:
            tx_hash: Normalized hash

        Returns:
            TxByHash or None if the hash is unknown
        """
        tx = await self.tx_repo.get_by_hash(tx_hash)
        if tx is not None:
            try:
                summary = parse_tx_payload(tx.tx, tx.operation).summary()
            except MalformedPayloadError as e:
                self.logger.warning(f"[Receipt] {tx.tx_hash}: {e}")
                token = tx.tx.get("token") if isinstance(tx.tx, dict) else None
                summary = _fallback_summary(
                    tx.tx, token if isinstance(token, int) else None, tx.nonce
                )
            return TxByHash(
                tx_type=summary.kind,
                from_=summary.from_,
                to=summary.to,
                token=_token_id(summary.token),
                amount=summary.amount,
                fee=summary.fee,
                block_number=tx.block_number,
                nonce=summary.nonce,
                created_at=format_legacy(tx.created_at),
                fail_reason=tx.fail_reason,
                tx=tx.tx,
                batch_id=tx.batch_id,
            )

        op = await self.priority_repo.get_by(eth_hash=tx_hash)
        if op is None:
            return None

        try:
            summary = parse_priority_payload(op.operation).summary()
        except MalformedPayloadError as e:
            self.logger.warning(f"[Receipt] Priority operation {op.tx_hash}: {e}")
            summary = _fallback_summary(op.operation, None, -1)

        return TxByHash(
            tx_type=summary.kind,
            from_=summary.from_,
            to=summary.to,
            token=_token_id(summary.token),
            amount=summary.amount,
            fee=summary.fee,
            block_number=op.block_number,
            nonce=-1,
            created_at=format_legacy(op.created_at),
            fail_reason=None,
            tx=op.operation,
        )


def _token_id(token: int | None) -> int:
    return UNKNOWN_TOKEN_ID if token is None else token
