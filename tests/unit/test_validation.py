"""Unit tests for validation utilities."""

import pytest

from ledger_history.utils.validation import (
    is_valid_tx_hash,
    normalize_address,
    normalize_tx_hash,
)


HEX_HASH = "ab" * 32


class TestNormalizeAddress:
    """Tests for account address normalization."""

    def test_checksum_address_lowercased(self):
        address = "0x742d35Cc6634C0532925a3b844Bc9e7595f0bEb0"

        assert normalize_address(address) == address.lower()

    def test_surrounding_whitespace_stripped(self):
        address = "0x" + "1" * 40

        assert normalize_address(f"  {address} ") == address

    @pytest.mark.parametrize(
        "address",
        [
            "",
            "0x1234",
            "0x" + "z" * 40,
            "0x" + "1" * 41,
        ],
    )
    def test_invalid_addresses(self, address):
        with pytest.raises(ValueError):
            normalize_address(address)


class TestNormalizeTxHash:
    """Tests for transaction hash normalization."""

    def test_prefixed_hash(self):
        assert normalize_tx_hash(f"0x{HEX_HASH.upper()}") == f"0x{HEX_HASH}"

    def test_bare_hash(self):
        assert normalize_tx_hash(HEX_HASH) == f"0x{HEX_HASH}"

    def test_display_prefix_accepted(self):
        assert normalize_tx_hash(f"sync-tx:{HEX_HASH}") == f"0x{HEX_HASH}"

    @pytest.mark.parametrize(
        "tx_hash",
        [
            "",
            "0x1234",
            "0x" + "g" * 64,
            "0x" + "a" * 65,
        ],
    )
    def test_invalid_hashes(self, tx_hash):
        with pytest.raises(ValueError):
            normalize_tx_hash(tx_hash)

    def test_is_valid_tx_hash(self):
        assert is_valid_tx_hash(HEX_HASH)
        assert not is_valid_tx_hash("nope")
