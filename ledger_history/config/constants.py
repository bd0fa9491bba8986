"""
Ledger constants.

Token id boundaries, transaction kind tags and the sentinel strings used
when a payload lacks a field.
"""

# Token ids at or above this value belong to NFTs
MIN_NFT_TOKEN_ID = 65536

# Symbol reported for a fungible token id missing from the token table
UNKNOWN_TOKEN_SYMBOL = "UNKNOWN"

# Sentinels for absent payload fields
UNKNOWN_FROM = "unknown from"
UNKNOWN_TO = "unknown to"
UNKNOWN_AMOUNT = "unknown amount"
UNKNOWN_FEE = "unknown fee"

# Ordinary transaction kinds
TX_TRANSFER = "Transfer"
TX_TRANSFER_TO_NEW = "TransferToNew"
TX_WITHDRAW = "Withdraw"
TX_CHANGE_PUBKEY = "ChangePubKey"
TX_CHANGE_PUBKEY_OFFCHAIN = "ChangePubKeyOffchain"
TX_MINT_NFT = "MintNFT"
TX_WITHDRAW_NFT = "WithdrawNFT"
TX_FORCED_EXIT = "ForcedExit"
TX_SWAP = "Swap"

# Priority operation kinds
OP_DEPOSIT = "Deposit"
OP_FULL_EXIT = "FullExit"

PRIORITY_OP_KINDS = frozenset({OP_DEPOSIT, OP_FULL_EXIT})

TX_KINDS = frozenset({
    TX_TRANSFER,
    TX_TRANSFER_TO_NEW,
    TX_WITHDRAW,
    TX_CHANGE_PUBKEY,
    TX_CHANGE_PUBKEY_OFFCHAIN,
    TX_MINT_NFT,
    TX_WITHDRAW_NFT,
    TX_FORCED_EXIT,
    TX_SWAP,
})

# Key holding the nested payload of a priority operation
PRIORITY_OP_KEY = "priority_op"

# Display prefix for ordinary transaction hashes in history items
SYNC_TX_PREFIX = "sync-tx:"

# Kind reported for a stored payload without a recognizable type tag
UNKNOWN_TX_TYPE = "unknown tx_type"

# Token id reported when a payload carries none
UNKNOWN_TOKEN_ID = -1

# Rows per filter index insert; three bind parameters per row keeps one
# statement under the 32767 parameter limit of the PostgreSQL protocol
FILTER_UPSERT_BATCH_SIZE = 10000
