"""Create blogs and purchases tables

Revision ID: 20261019_000001
Revises: None
Create Date: 2026-10-19

This migration creates the catalog mirror and the purchase ledger.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '20261019_000001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the blogs and purchases tables."""
    op.create_table(
        'blogs',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('author_id', sa.String(64), nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('slug', sa.String(255), nullable=False),
        sa.Column('is_exclusive', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('price', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('slug', name='uq_blogs_slug'),
    )
    op.create_index('ix_blogs_author_id', 'blogs', ['author_id'])

    op.create_table(
        'purchases',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('buyer_id', sa.String(64), nullable=False),
        sa.Column('item_id', sa.String(36), nullable=False),
        sa.Column('order_id', sa.String(64), nullable=True),
        sa.Column('payment_id', sa.String(64), nullable=True),
        sa.Column('signature', sa.String(128), nullable=True),
        sa.Column('amount', sa.Integer(), nullable=False),
        sa.Column('currency', sa.String(3), nullable=False, server_default='INR'),
        sa.Column(
            'status',
            sa.Enum('PENDING', 'COMPLETED', 'FAILED', name='purchase_status', create_constraint=True),
            nullable=False,
            server_default='PENDING'
        ),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(
            ['item_id'],
            ['blogs.id'],
            name='fk_purchases_item_id',
            ondelete='RESTRICT'
        ),
        sa.UniqueConstraint('buyer_id', 'item_id', name='uq_purchases_buyer_item'),
    )

    # Create indexes for common queries
    op.create_index('ix_purchases_order_id', 'purchases', ['order_id'], unique=True)
    op.create_index('ix_purchases_buyer_id', 'purchases', ['buyer_id'])
    op.create_index('ix_purchases_item_id', 'purchases', ['item_id'])
    op.create_index('ix_purchases_status', 'purchases', ['status'])


def downgrade() -> None:
    """Drop the purchases and blogs tables."""
    op.drop_index('ix_purchases_status', table_name='purchases')
    op.drop_index('ix_purchases_item_id', table_name='purchases')
    op.drop_index('ix_purchases_buyer_id', table_name='purchases')
    op.drop_index('ix_purchases_order_id', table_name='purchases')
    op.drop_table('purchases')
    op.drop_index('ix_blogs_author_id', table_name='blogs')
    op.drop_table('blogs')

    # Drop the enum type
    op.execute("DROP TYPE IF EXISTS purchase_status")
