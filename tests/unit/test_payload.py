"""Unit tests for typed payload parsing."""

import pytest

from ledger_history.domain.payload import (
    ChangePubKey,
    Deposit,
    ForcedExit,
    FullExit,
    MintNFT,
    Swap,
    Transfer,
    TxPayload,
    parse_priority_payload,
    parse_tx_payload,
)
from ledger_history.utils.exceptions import MalformedPayloadError


ALICE = "0x742d35cc6634c0532925a3b844bc9e7595f0beb0"
BOB = "0x55d398326f99059ff775485246999027b3197955"


class TestParseTxPayload:
    """Tests for ordinary transaction payloads."""

    def test_transfer(self):
        """Transfer fields map onto the summary."""
        payload = parse_tx_payload({
            "type": "Transfer",
            "from": ALICE,
            "to": BOB,
            "token": 3,
            "amount": "100",
            "fee": "2",
            "nonce": 7,
        })

        summary = payload.summary()
        assert isinstance(payload, Transfer)
        assert summary.kind == "Transfer"
        assert (summary.from_, summary.to) == (ALICE, BOB)
        assert (summary.amount, summary.fee, summary.token) == ("100", "2", 3)
        assert summary.nonce == 7

    def test_transfer_to_new_reported_as_transfer(self):
        """TransferToNew is reported with the Transfer kind."""
        payload = parse_tx_payload({"type": "TransferToNew", "from": ALICE, "to": BOB})

        assert payload.to_new_account is True
        assert payload.summary().kind == "Transfer"

    def test_missing_fields_use_sentinels(self):
        """Absent fields produce sentinel strings, fee stays None."""
        summary = parse_tx_payload({"type": "Withdraw"}).summary()

        assert summary.from_ == "unknown from"
        assert summary.to == "unknown to"
        assert summary.amount == "unknown amount"
        assert summary.fee is None
        assert summary.token is None
        assert summary.nonce == -1

    def test_change_pubkey_uses_fee_token(self):
        """ChangePubKey reports the fee token and the new key hash."""
        payload = parse_tx_payload({
            "type": "ChangePubKeyOffchain",
            "account": ALICE,
            "newPkHash": "sync:abc",
            "feeToken": 1,
        })

        summary = payload.summary()
        assert isinstance(payload, ChangePubKey)
        assert summary.to == "sync:abc"
        assert summary.token == 1
        assert summary.amount == "unknown amount"

    def test_mint_nft_amount_is_one(self):
        payload = parse_tx_payload({
            "type": "MintNFT",
            "creatorAddress": ALICE,
            "recipient": BOB,
            "feeToken": 0,
        })

        assert isinstance(payload, MintNFT)
        assert payload.summary().amount == "1"
        assert payload.touched_addresses() == (ALICE, BOB)

    def test_forced_exit_amount_from_operation(self):
        """ForcedExit withdraw amount comes from the executed operation."""
        payload = parse_tx_payload(
            {"type": "ForcedExit", "target": BOB, "token": 2},
            operation={"withdraw_amount": "42"},
        )

        assert isinstance(payload, ForcedExit)
        assert payload.summary().amount == "42"
        assert payload.summary().from_ == BOB

    def test_swap_collects_orders(self):
        """Swap touches submitter and order recipients, all order tokens."""
        payload = parse_tx_payload({
            "type": "Swap",
            "submitterAddress": ALICE,
            "feeToken": 0,
            "orders": [
                {"recipient": BOB, "tokenBuy": 1, "tokenSell": 2},
                {"recipient": ALICE, "tokenBuy": 2, "tokenSell": 1},
            ],
        })

        assert isinstance(payload, Swap)
        assert payload.touched_addresses() == (ALICE, BOB)
        assert payload.token_ids() == (0, 1, 2)
        assert payload.summary().amount == "0"

    def test_addresses_lowercased(self):
        payload = parse_tx_payload({
            "type": "Transfer",
            "from": ALICE.upper().replace("0X", "0x"),
            "to": BOB,
        })

        assert payload.touched_addresses() == (ALICE, BOB)

    def test_missing_type_raises(self):
        with pytest.raises(MalformedPayloadError):
            parse_tx_payload({"from": ALICE})

    def test_unknown_type_raises_with_kind(self):
        with pytest.raises(MalformedPayloadError) as exc_info:
            parse_tx_payload({"type": "Teleport"})

        assert exc_info.value.kind == "Teleport"

    def test_non_dict_raises(self):
        with pytest.raises(MalformedPayloadError):
            parse_tx_payload(["Transfer"])


class TestParsePriorityPayload:
    """Tests for priority operation payloads."""

    def test_deposit_reads_nested_object(self):
        payload = parse_priority_payload({
            "type": "Deposit",
            "priority_op": {"from": ALICE, "to": BOB, "token": 5, "amount": "9"},
        })

        summary = payload.summary()
        assert isinstance(payload, Deposit)
        assert (summary.from_, summary.to, summary.token) == (ALICE, BOB, 5)
        assert summary.fee is None
        assert summary.nonce == -1

    def test_full_exit_amount_top_level(self):
        payload = parse_priority_payload({
            "type": "FullExit",
            "priority_op": {"eth_address": ALICE, "token": 1},
            "withdraw_amount": "77",
        })

        assert isinstance(payload, FullExit)
        assert payload.summary().amount == "77"
        assert payload.touched_addresses() == (ALICE,)

    def test_missing_nested_object_raises(self):
        with pytest.raises(MalformedPayloadError):
            parse_priority_payload({"type": "Deposit"})

    def test_unknown_kind_raises(self):
        with pytest.raises(MalformedPayloadError):
            parse_priority_payload({"type": "Transfer", "priority_op": {}})


class TestTxPayloadBase:
    """Tests for the abstract payload base."""

    def test_base_cannot_be_instantiated(self):
        with pytest.raises(TypeError):
            TxPayload()

    def test_variant_missing_an_accessor_cannot_be_instantiated(self):
        class Partial(TxPayload):
            def summary(self):
                return None

        with pytest.raises(TypeError):
            Partial()

    def test_every_variant_is_concrete(self):
        variants = (ChangePubKey, Deposit, ForcedExit, FullExit, MintNFT, Swap, Transfer)
        for variant in variants:
            assert not variant.__abstractmethods__
