"""Create ledger history tables.

Revision ID: 20261018_000001
Revises:
Create Date: 2026-10-18

This migration creates the executed ledger partitions, the aggregated
operations log, the transaction filter index, batch hashes, tokens and
the mempool table read by receipts and batch lookups.
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "20261018_000001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    """Create ledger history tables."""
    op.create_table(
        "executed_transactions",
        sa.Column("tx_hash", sa.String(length=66), nullable=False),
        # Position
        sa.Column("block_number", sa.BigInteger(), nullable=False),
        sa.Column("block_index", sa.Integer(), nullable=False),
        # Payloads
        sa.Column("tx", postgresql.JSONB(), nullable=False),
        sa.Column("operation", postgresql.JSONB(), nullable=False),
        # Accounts
        sa.Column("from_account", sa.String(length=42), nullable=False),
        sa.Column("to_account", sa.String(length=42), nullable=True),
        sa.Column("primary_account_address", sa.String(length=42), nullable=False),
        # Outcome
        sa.Column("success", sa.Boolean(), nullable=False),
        sa.Column("fail_reason", sa.Text(), nullable=True),
        sa.Column("nonce", sa.BigInteger(), nullable=False, server_default="0"),
        sa.Column("batch_id", sa.BigInteger(), nullable=True),
        sa.Column("eth_sign_data", postgresql.JSONB(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("tx_hash", name="executed_transactions_pkey"),
    )
    op.create_index(
        "ix_executed_transactions_order_key",
        "executed_transactions",
        ["block_number", "block_index"],
    )
    op.create_index(
        "ix_executed_transactions_block_number",
        "executed_transactions",
        ["block_number"],
    )
    op.create_index(
        "ix_executed_transactions_batch_id",
        "executed_transactions",
        ["batch_id"],
    )
    op.create_index(
        "ix_executed_transactions_from_account",
        "executed_transactions",
        ["from_account"],
    )
    op.create_index(
        "ix_executed_transactions_to_account",
        "executed_transactions",
        ["to_account"],
    )
    op.create_index(
        "ix_executed_transactions_primary_account_address",
        "executed_transactions",
        ["primary_account_address"],
    )

    op.create_table(
        "executed_priority_operations",
        sa.Column("tx_hash", sa.String(length=66), nullable=False),
        sa.Column("eth_hash", sa.String(length=66), nullable=False),
        # Position
        sa.Column("block_number", sa.BigInteger(), nullable=False),
        sa.Column("block_index", sa.Integer(), nullable=False),
        # L1 origin
        sa.Column("priority_op_serialid", sa.BigInteger(), nullable=False),
        sa.Column("eth_block", sa.BigInteger(), nullable=False),
        sa.Column("eth_block_index", sa.Integer(), nullable=True),
        sa.Column("operation", postgresql.JSONB(), nullable=False),
        sa.Column("from_account", sa.String(length=42), nullable=False),
        sa.Column("to_account", sa.String(length=42), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("tx_hash", name="executed_priority_operations_pkey"),
        sa.UniqueConstraint(
            "eth_hash", name="uq_executed_priority_operations_eth_hash"
        ),
        sa.UniqueConstraint(
            "priority_op_serialid",
            name="uq_executed_priority_operations_priority_op_serialid",
        ),
    )
    op.create_index(
        "ix_executed_priority_operations_order_key",
        "executed_priority_operations",
        ["block_number", "block_index"],
    )
    op.create_index(
        "ix_executed_priority_operations_block_number",
        "executed_priority_operations",
        ["block_number"],
    )
    op.create_index(
        "ix_executed_priority_operations_from_account",
        "executed_priority_operations",
        ["from_account"],
    )
    op.create_index(
        "ix_executed_priority_operations_to_account",
        "executed_priority_operations",
        ["to_account"],
    )

    op.create_table(
        "aggregate_operations",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("action_type", sa.String(length=32), nullable=False),  # CommitBlocks, ExecuteBlocks
        sa.Column("from_block", sa.BigInteger(), nullable=False),
        sa.Column("to_block", sa.BigInteger(), nullable=False),
        sa.Column("confirmed", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id", name="aggregate_operations_pkey"),
        sa.CheckConstraint(
            "from_block <= to_block",
            name="ck_aggregate_operations_block_range_ordered",
        ),
    )
    op.create_index(
        "ix_aggregate_operations_kind_range",
        "aggregate_operations",
        ["action_type", "confirmed", "to_block"],
    )

    op.create_table(
        "tx_filters",
        sa.Column("address", sa.String(length=42), nullable=False),
        sa.Column("token", sa.Integer(), nullable=False),
        sa.Column("tx_hash", sa.String(length=66), nullable=False),
        sa.PrimaryKeyConstraint("address", "token", "tx_hash", name="tx_filters_pkey"),
    )
    op.create_index("ix_tx_filters_tx_hash", "tx_filters", ["tx_hash"])

    op.create_table(
        "txs_batches_hashes",
        sa.Column("batch_id", sa.BigInteger(), autoincrement=False, nullable=False),
        sa.Column("batch_hash", sa.String(length=66), nullable=False),
        sa.PrimaryKeyConstraint("batch_id", name="txs_batches_hashes_pkey"),
        sa.UniqueConstraint("batch_hash", name="uq_txs_batches_hashes_batch_hash"),
    )

    op.create_table(
        "tokens",
        sa.Column("id", sa.Integer(), autoincrement=False, nullable=False),
        sa.Column("address", sa.String(length=42), nullable=False),
        sa.Column("symbol", sa.String(length=32), nullable=False),
        sa.Column("decimals", sa.Integer(), nullable=False, server_default="18"),
        sa.PrimaryKeyConstraint("id", name="tokens_pkey"),
        sa.UniqueConstraint("address", name="uq_tokens_address"),
    )
    op.create_index("ix_tokens_symbol", "tokens", ["symbol"])

    op.create_table(
        "mempool_txs",
        sa.Column("id", sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column("tx_hash", sa.String(length=64), nullable=False),  # bare hex
        sa.Column("tx", postgresql.JSONB(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column("batch_id", sa.BigInteger(), nullable=False, server_default="0"),
        sa.Column("eth_sign_data", postgresql.JSONB(), nullable=True),
        sa.PrimaryKeyConstraint("id", name="mempool_txs_pkey"),
        sa.UniqueConstraint("tx_hash", name="uq_mempool_txs_tx_hash"),
    )
    op.create_index("ix_mempool_txs_batch_id", "mempool_txs", ["batch_id"])


def downgrade() -> None:
    """Drop ledger history tables."""
    op.drop_index("ix_mempool_txs_batch_id", table_name="mempool_txs")
    op.drop_table("mempool_txs")

    op.drop_index("ix_tokens_symbol", table_name="tokens")
    op.drop_table("tokens")

    op.drop_table("txs_batches_hashes")

    op.drop_index("ix_tx_filters_tx_hash", table_name="tx_filters")
    op.drop_table("tx_filters")

    op.drop_index("ix_aggregate_operations_kind_range", table_name="aggregate_operations")
    op.drop_table("aggregate_operations")

    op.drop_index(
        "ix_executed_priority_operations_to_account",
        table_name="executed_priority_operations",
    )
    op.drop_index(
        "ix_executed_priority_operations_from_account",
        table_name="executed_priority_operations",
    )
    op.drop_index(
        "ix_executed_priority_operations_block_number",
        table_name="executed_priority_operations",
    )
    op.drop_index(
        "ix_executed_priority_operations_order_key",
        table_name="executed_priority_operations",
    )
    op.drop_table("executed_priority_operations")

    op.drop_index(
        "ix_executed_transactions_primary_account_address",
        table_name="executed_transactions",
    )
    op.drop_index("ix_executed_transactions_to_account", table_name="executed_transactions")
    op.drop_index("ix_executed_transactions_from_account", table_name="executed_transactions")
    op.drop_index("ix_executed_transactions_batch_id", table_name="executed_transactions")
    op.drop_index("ix_executed_transactions_block_number", table_name="executed_transactions")
    op.drop_index("ix_executed_transactions_order_key", table_name="executed_transactions")
    op.drop_table("executed_transactions")
