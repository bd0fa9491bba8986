"""
Typed transaction payloads.

Stored payloads are JSON objects tagged by a "type" field. They are
converted once, here, into frozen dataclasses so that the rest of the
package reads from/to/fee/amount/token through one total dispatch over
the variant classes instead of probing JSON keys.

Sentinel strings ("unknown from", ...) are only produced by summary()
when the stored payload lacks the field.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, ClassVar

from ledger_history.config.constants import (
    OP_DEPOSIT,
    OP_FULL_EXIT,
    PRIORITY_OP_KEY,
    TX_CHANGE_PUBKEY,
    TX_CHANGE_PUBKEY_OFFCHAIN,
    TX_FORCED_EXIT,
    TX_MINT_NFT,
    TX_SWAP,
    TX_TRANSFER,
    TX_TRANSFER_TO_NEW,
    TX_WITHDRAW,
    TX_WITHDRAW_NFT,
    UNKNOWN_AMOUNT,
    UNKNOWN_FROM,
    UNKNOWN_TO,
)
from ledger_history.utils.exceptions import MalformedPayloadError


@dataclass(frozen=True)
class TxSummary:
    """Flattened view of a payload used by the legacy transaction endpoint."""

    kind: str
    from_: str
    to: str
    fee: str | None
    amount: str
    token: int | None
    nonce: int


def _text(raw: dict[str, Any], key: str) -> str | None:
    value = raw.get(key)
    return value if isinstance(value, str) else None


def _number(raw: dict[str, Any], key: str) -> int | None:
    value = raw.get(key)
    # bool is an int subclass, reject it explicitly
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value


def _lower(value: str | None) -> str | None:
    return value.lower() if value else None


@dataclass(frozen=True)
class TxPayload(ABC):
    """Base class of every payload variant."""

    kind: ClassVar[str] = ""

    nonce: int | None = None

    @abstractmethod
    def summary(self) -> TxSummary:
        """Flattened view for the legacy transaction endpoint."""

    @abstractmethod
    def touched_addresses(self) -> tuple[str, ...]:
        """Addresses whose history includes this payload."""

    @abstractmethod
    def token_ids(self) -> tuple[int, ...]:
        """Token ids this payload moves or pays fees in."""

    def _nonce(self) -> int:
        return self.nonce if self.nonce is not None else -1


def _addresses(*values: str | None) -> tuple[str, ...]:
    seen: list[str] = []
    for value in values:
        address = _lower(value)
        if address and address not in seen:
            seen.append(address)
    return tuple(seen)


def _tokens(*values: int | None) -> tuple[int, ...]:
    seen: list[int] = []
    for value in values:
        if value is not None and value not in seen:
            seen.append(value)
    return tuple(seen)


@dataclass(frozen=True)
class Transfer(TxPayload):
    """Transfer between two accounts (TransferToNew included)."""

    kind: ClassVar[str] = TX_TRANSFER

    from_: str | None = None
    to: str | None = None
    token: int | None = None
    amount: str | None = None
    fee: str | None = None
    to_new_account: bool = False

    def summary(self) -> TxSummary:
        return TxSummary(
            kind=self.kind,
            from_=self.from_ or UNKNOWN_FROM,
            to=self.to or UNKNOWN_TO,
            fee=self.fee,
            amount=self.amount or UNKNOWN_AMOUNT,
            token=self.token,
            nonce=self._nonce(),
        )

    def touched_addresses(self) -> tuple[str, ...]:
        return _addresses(self.from_, self.to)

    def token_ids(self) -> tuple[int, ...]:
        return _tokens(self.token)


@dataclass(frozen=True)
class Withdraw(TxPayload):
    """Withdrawal from L2 to an L1 address."""

    kind: ClassVar[str] = TX_WITHDRAW

    from_: str | None = None
    to: str | None = None
    token: int | None = None
    amount: str | None = None
    fee: str | None = None

    def summary(self) -> TxSummary:
        return TxSummary(
            kind=self.kind,
            from_=self.from_ or UNKNOWN_FROM,
            to=self.to or UNKNOWN_TO,
            fee=self.fee,
            amount=self.amount or UNKNOWN_AMOUNT,
            token=self.token,
            nonce=self._nonce(),
        )

    def touched_addresses(self) -> tuple[str, ...]:
        return _addresses(self.from_, self.to)

    def token_ids(self) -> tuple[int, ...]:
        return _tokens(self.token)


@dataclass(frozen=True)
class ChangePubKey(TxPayload):
    """Signing key rotation (ChangePubKeyOffchain included)."""

    kind: ClassVar[str] = TX_CHANGE_PUBKEY

    account: str | None = None
    new_pk_hash: str | None = None
    fee_token: int | None = None
    fee: str | None = None

    def summary(self) -> TxSummary:
        return TxSummary(
            kind=self.kind,
            from_=self.account or UNKNOWN_FROM,
            to=self.new_pk_hash or UNKNOWN_TO,
            fee=self.fee,
            amount=UNKNOWN_AMOUNT,
            token=self.fee_token,
            nonce=self._nonce(),
        )

    def touched_addresses(self) -> tuple[str, ...]:
        return _addresses(self.account)

    def token_ids(self) -> tuple[int, ...]:
        return _tokens(self.fee_token)


@dataclass(frozen=True)
class MintNFT(TxPayload):
    """NFT mint paid by the creator in a fungible fee token."""

    kind: ClassVar[str] = TX_MINT_NFT

    creator_address: str | None = None
    recipient: str | None = None
    fee_token: int | None = None
    fee: str | None = None

    def summary(self) -> TxSummary:
        return TxSummary(
            kind=self.kind,
            from_=self.creator_address or UNKNOWN_FROM,
            to=self.recipient or UNKNOWN_TO,
            fee=self.fee,
            amount="1",
            token=self.fee_token,
            nonce=self._nonce(),
        )

    def touched_addresses(self) -> tuple[str, ...]:
        return _addresses(self.creator_address, self.recipient)

    def token_ids(self) -> tuple[int, ...]:
        return _tokens(self.fee_token)


@dataclass(frozen=True)
class WithdrawNFT(TxPayload):
    """Withdrawal of an NFT to L1."""

    kind: ClassVar[str] = TX_WITHDRAW_NFT

    from_: str | None = None
    to: str | None = None
    token: int | None = None
    fee_token: int | None = None
    fee: str | None = None

    def summary(self) -> TxSummary:
        return TxSummary(
            kind=self.kind,
            from_=self.from_ or UNKNOWN_FROM,
            to=self.to or UNKNOWN_TO,
            fee=self.fee,
            amount="1",
            token=self.token,
            nonce=self._nonce(),
        )

    def touched_addresses(self) -> tuple[str, ...]:
        return _addresses(self.from_, self.to)

    def token_ids(self) -> tuple[int, ...]:
        return _tokens(self.token, self.fee_token)


@dataclass(frozen=True)
class ForcedExit(TxPayload):
    """Exit of a target account initiated by another account."""

    kind: ClassVar[str] = TX_FORCED_EXIT

    target: str | None = None
    token: int | None = None
    fee: str | None = None
    withdraw_amount: str | None = None

    def summary(self) -> TxSummary:
        return TxSummary(
            kind=self.kind,
            from_=self.target or UNKNOWN_FROM,
            to=self.target or UNKNOWN_TO,
            fee=self.fee,
            amount=self.withdraw_amount or UNKNOWN_AMOUNT,
            token=self.token,
            nonce=self._nonce(),
        )

    def touched_addresses(self) -> tuple[str, ...]:
        return _addresses(self.target)

    def token_ids(self) -> tuple[int, ...]:
        return _tokens(self.token)


@dataclass(frozen=True)
class Swap(TxPayload):
    """Atomic swap of two orders settled by a submitter."""

    kind: ClassVar[str] = TX_SWAP

    submitter_address: str | None = None
    fee_token: int | None = None
    fee: str | None = None
    order_recipients: tuple[str, ...] = field(default_factory=tuple)
    order_tokens: tuple[int, ...] = field(default_factory=tuple)

    def summary(self) -> TxSummary:
        return TxSummary(
            kind=self.kind,
            from_=self.submitter_address or UNKNOWN_FROM,
            to=self.submitter_address or UNKNOWN_TO,
            fee=self.fee,
            amount="0",
            token=self.fee_token,
            nonce=self._nonce(),
        )

    def touched_addresses(self) -> tuple[str, ...]:
        return _addresses(self.submitter_address, *self.order_recipients)

    def token_ids(self) -> tuple[int, ...]:
        return _tokens(self.fee_token, *self.order_tokens)


@dataclass(frozen=True)
class Deposit(TxPayload):
    """L1 deposit into an L2 account."""

    kind: ClassVar[str] = OP_DEPOSIT

    from_: str | None = None
    to: str | None = None
    token: int | None = None
    amount: str | None = None

    def summary(self) -> TxSummary:
        return TxSummary(
            kind=self.kind,
            from_=self.from_ or UNKNOWN_FROM,
            to=self.to or UNKNOWN_TO,
            fee=None,
            amount=self.amount or UNKNOWN_AMOUNT,
            token=self.token,
            nonce=-1,
        )

    def touched_addresses(self) -> tuple[str, ...]:
        return _addresses(self.from_, self.to)

    def token_ids(self) -> tuple[int, ...]:
        return _tokens(self.token)


@dataclass(frozen=True)
class FullExit(TxPayload):
    """L1-requested exit of a whole token balance."""

    kind: ClassVar[str] = OP_FULL_EXIT

    eth_address: str | None = None
    token: int | None = None
    withdraw_amount: str | None = None

    def summary(self) -> TxSummary:
        return TxSummary(
            kind=self.kind,
            from_=self.eth_address or UNKNOWN_FROM,
            to=self.eth_address or UNKNOWN_TO,
            fee=None,
            amount=self.withdraw_amount or UNKNOWN_AMOUNT,
            token=self.token,
            nonce=-1,
        )

    def touched_addresses(self) -> tuple[str, ...]:
        return _addresses(self.eth_address)

    def token_ids(self) -> tuple[int, ...]:
        return _tokens(self.token)


def payload_kind(raw: Any) -> str | None:
    """Return the kind tag of a stored payload, or None when absent."""
    if not isinstance(raw, dict):
        return None
    return _text(raw, "type")


def _swap_orders(raw: dict[str, Any]) -> tuple[tuple[str, ...], tuple[int, ...]]:
    recipients: list[str] = []
    tokens: list[int] = []
    orders = raw.get("orders")
    if isinstance(orders, list):
        for order in orders:
            if not isinstance(order, dict):
                continue
            recipient = _text(order, "recipient")
            if recipient:
                recipients.append(recipient)
            for key in ("tokenBuy", "tokenSell"):
                token = _number(order, key)
                if token is not None:
                    tokens.append(token)
    return tuple(recipients), tuple(tokens)


def parse_tx_payload(
    raw: Any,
    operation: dict[str, Any] | None = None,
) -> TxPayload:
    """
    Convert an ordinary transaction payload into its variant.

    Args:
        raw: Stored transaction JSON
        operation: Stored executed-operation JSON, source of derived
            values such as a forced exit's withdraw_amount

    Returns:
        Typed payload

    Raises:
        MalformedPayloadError: If the kind tag is missing or unknown
    """
    kind = payload_kind(raw)
    if kind is None:
        raise MalformedPayloadError("Transaction payload has no type tag")

    nonce = _number(raw, "nonce")

    if kind in (TX_TRANSFER, TX_TRANSFER_TO_NEW):
        return Transfer(
            nonce=nonce,
            from_=_text(raw, "from"),
            to=_text(raw, "to"),
            token=_number(raw, "token"),
            amount=_text(raw, "amount"),
            fee=_text(raw, "fee"),
            to_new_account=kind == TX_TRANSFER_TO_NEW,
        )
    if kind == TX_WITHDRAW:
        return Withdraw(
            nonce=nonce,
            from_=_text(raw, "from"),
            to=_text(raw, "to"),
            token=_number(raw, "token"),
            amount=_text(raw, "amount"),
            fee=_text(raw, "fee"),
        )
    if kind in (TX_CHANGE_PUBKEY, TX_CHANGE_PUBKEY_OFFCHAIN):
        return ChangePubKey(
            nonce=nonce,
            account=_text(raw, "account"),
            new_pk_hash=_text(raw, "newPkHash"),
            fee_token=_number(raw, "feeToken"),
            fee=_text(raw, "fee"),
        )
    if kind == TX_MINT_NFT:
        return MintNFT(
            nonce=nonce,
            creator_address=_text(raw, "creatorAddress"),
            recipient=_text(raw, "recipient"),
            fee_token=_number(raw, "feeToken"),
            fee=_text(raw, "fee"),
        )
    if kind == TX_WITHDRAW_NFT:
        return WithdrawNFT(
            nonce=nonce,
            from_=_text(raw, "from"),
            to=_text(raw, "to"),
            token=_number(raw, "token"),
            fee_token=_number(raw, "feeToken"),
            fee=_text(raw, "fee"),
        )
    if kind == TX_FORCED_EXIT:
        return ForcedExit(
            nonce=nonce,
            target=_text(raw, "target"),
            token=_number(raw, "token"),
            fee=_text(raw, "fee"),
            withdraw_amount=_text(operation or {}, "withdraw_amount"),
        )
    if kind == TX_SWAP:
        recipients, tokens = _swap_orders(raw)
        return Swap(
            nonce=nonce,
            submitter_address=_text(raw, "submitterAddress"),
            fee_token=_number(raw, "feeToken"),
            fee=_text(raw, "fee"),
            order_recipients=recipients,
            order_tokens=tokens,
        )

    raise MalformedPayloadError(f"Unknown transaction type: {kind}", kind=kind)


def parse_priority_payload(raw: Any) -> TxPayload:
    """
    Convert a priority operation payload into its variant.

    Args:
        raw: Stored operation JSON with the nested "priority_op" object

    Returns:
        Typed payload

    Raises:
        MalformedPayloadError: If the kind tag or nested object is missing
    """
    kind = payload_kind(raw)
    if kind is None:
        raise MalformedPayloadError("Priority operation has no type tag")

    inner = raw.get(PRIORITY_OP_KEY)
    if not isinstance(inner, dict):
        raise MalformedPayloadError(
            f"{kind} operation has no {PRIORITY_OP_KEY} object", kind=kind
        )

    if kind == OP_DEPOSIT:
        return Deposit(
            from_=_text(inner, "from"),
            to=_text(inner, "to"),
            token=_number(inner, "token"),
            amount=_text(inner, "amount"),
        )
    if kind == OP_FULL_EXIT:
        return FullExit(
            eth_address=_text(inner, "eth_address"),
            token=_number(inner, "token"),
            withdraw_amount=_text(raw, "withdraw_amount"),
        )

    raise MalformedPayloadError(f"Unknown priority operation type: {kind}", kind=kind)
