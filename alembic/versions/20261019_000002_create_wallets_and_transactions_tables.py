"""Create wallets and transactions tables

Revision ID: 20261019_000002
Revises: 20261019_000001
Create Date: 2026-10-19

Per-payee wallets and the append-only transaction ledger.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = "20261019_000002"
down_revision: Union[str, None] = "20261019_000001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "wallets",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("owner_id", sa.String(64), nullable=False),
        sa.Column("balance", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("balance >= 0", name="ck_wallets_balance_non_negative"),
    )
    op.create_index("ix_wallets_owner_id", "wallets", ["owner_id"], unique=True)

    op.create_table(
        "transactions",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("wallet_id", sa.String(36), nullable=False),
        sa.Column("reference_id", sa.String(36), nullable=False),
        sa.Column("amount", sa.Integer(), nullable=False),
        sa.Column(
            "type",
            sa.Enum("EARNING", "PLATFORM_FEE", name="transaction_type", create_constraint=True),
            nullable=False,
        ),
        sa.Column(
            "status",
            sa.Enum("COMPLETED", name="transaction_status", create_constraint=True),
            nullable=False,
            server_default="COMPLETED",
        ),
        sa.Column("metadata", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(
            ["wallet_id"],
            ["wallets.id"],
            name="fk_transactions_wallet_id",
            ondelete="RESTRICT",
        ),
        sa.ForeignKeyConstraint(
            ["reference_id"],
            ["purchases.id"],
            name="fk_transactions_reference_id",
            ondelete="RESTRICT",
        ),
        sa.UniqueConstraint("wallet_id", "reference_id", "type", name="uq_transactions_wallet_reference_type"),
    )
    op.create_index("ix_transactions_wallet_id", "transactions", ["wallet_id"])
    op.create_index("ix_transactions_reference_id", "transactions", ["reference_id"])
    op.create_index("ix_transactions_type", "transactions", ["type"])


def downgrade() -> None:
    op.drop_index("ix_transactions_type", table_name="transactions")
    op.drop_index("ix_transactions_reference_id", table_name="transactions")
    op.drop_index("ix_transactions_wallet_id", table_name="transactions")
    op.drop_table("transactions")
    op.drop_index("ix_wallets_owner_id", table_name="wallets")
    op.drop_table("wallets")
    op.execute("DROP TYPE IF EXISTS transaction_type")
    op.execute("DROP TYPE IF EXISTS transaction_status")
