"""Address and hash normalization."""

from eth_utils import is_hex, is_hex_address, remove_0x_prefix, to_normalized_address


# Length of a transaction hash in hex digits (32 bytes)
TX_HASH_HEX_LENGTH = 64


def normalize_address(address: str) -> str:
    """
    Normalize an account address to lowercase 0x-prefixed hex.

    Args:
        address: Address in any hex casing, with or without checksum

    Returns:
        Normalized address

    Raises:
        ValueError: If the address is not a 20-byte hex address
    """
    if not address or not isinstance(address, str):
        raise ValueError("Address is empty")

    candidate = address.strip()
    if not is_hex_address(candidate):
        raise ValueError(f"Invalid address: {candidate}")

    return to_normalized_address(candidate)


def normalize_tx_hash(tx_hash: str) -> str:
    """
    Normalize a transaction hash to lowercase 0x-prefixed hex.

    Accepts the "sync-tx:" display prefix used by history items.

    Args:
        tx_hash: Transaction hash

    Returns:
        Normalized hash

    Raises:
        ValueError: If the value is not a 32-byte hex string
    """
    if not tx_hash or not isinstance(tx_hash, str):
        raise ValueError("Transaction hash is empty")

    candidate = tx_hash.strip().lower()
    if candidate.startswith("sync-tx:"):
        candidate = candidate[len("sync-tx:"):]

    digits = remove_0x_prefix(candidate)
    if len(digits) != TX_HASH_HEX_LENGTH or not is_hex(digits):
        raise ValueError(f"Invalid transaction hash: {tx_hash}")

    return f"0x{digits}"


def is_valid_tx_hash(tx_hash: str) -> bool:
    """Check if value can be normalized as a transaction hash."""
    try:
        normalize_tx_hash(tx_hash)
    except ValueError:
        return False
    return True
