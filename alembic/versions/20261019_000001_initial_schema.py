"""Initial schema: members, packages, tree nodes, wallets, transactions.

Revision ID: 20261019_000001
Revises:
Create Date: 2026-10-19

Tree nodes and wallets carry a version column used as an optimistic lock.
Slot uniqueness under a parent is enforced by (sponsor_id, position).
"""

import sqlalchemy as sa
from alembic import op


# revision identifiers, used by Alembic.
revision = '20261019_000001'
down_revision = None
branch_labels = None
depends_on = None


MONEY = sa.DECIMAL(18, 8)


def upgrade() -> None:
    """Create ledger tables."""
    op.create_table(
        'packages',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('price', MONEY, nullable=False),
        sa.Column(
            'commission_rate',
            sa.DECIMAL(10, 4),
            nullable=False,
            comment='Pairing commission rate in percent (10.0000 = 10%)',
        ),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name'),
        sa.CheckConstraint('price > 0', name='check_package_price_positive'),
        sa.CheckConstraint(
            'commission_rate >= 0 AND commission_rate <= 100',
            name='check_package_commission_rate_range',
        ),
    )
    op.create_index('ix_packages_is_active', 'packages', ['is_active'])

    op.create_table(
        'members',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('username', sa.String(length=30), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('sponsor_id', sa.Integer(), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('active_package_id', sa.Integer(), nullable=True),
        sa.Column('registration_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['sponsor_id'], ['members.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(
            ['active_package_id'], ['packages.id'], ondelete='SET NULL'
        ),
        sa.CheckConstraint(
            "status IN ('active', 'inactive', 'suspended')",
            name='check_member_status',
        ),
    )
    op.create_index('ix_members_username', 'members', ['username'], unique=True)
    op.create_index('ix_members_sponsor_id', 'members', ['sponsor_id'])
    op.create_index('ix_members_status', 'members', ['status'])

    op.create_table(
        'tree_nodes',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('member_id', sa.Integer(), nullable=False),
        sa.Column('sponsor_id', sa.Integer(), nullable=True),
        sa.Column('left_child_id', sa.Integer(), nullable=True),
        sa.Column('right_child_id', sa.Integer(), nullable=True),
        sa.Column('position', sa.String(length=10), nullable=False),
        sa.Column('depth', sa.Integer(), nullable=False),
        sa.Column('left_leg_volume', MONEY, nullable=False),
        sa.Column('right_leg_volume', MONEY, nullable=False),
        sa.Column('version', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['member_id'], ['members.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['sponsor_id'], ['members.id']),
        sa.ForeignKeyConstraint(['left_child_id'], ['members.id']),
        sa.ForeignKeyConstraint(['right_child_id'], ['members.id']),
        sa.UniqueConstraint(
            'sponsor_id', 'position', name='uq_tree_nodes_parent_slot'
        ),
        sa.CheckConstraint(
            'left_leg_volume >= 0', name='check_tree_left_volume_non_negative'
        ),
        sa.CheckConstraint(
            'right_leg_volume >= 0', name='check_tree_right_volume_non_negative'
        ),
        sa.CheckConstraint('depth >= 0', name='check_tree_depth_non_negative'),
        sa.CheckConstraint(
            "position IN ('root', 'left', 'right')", name='check_tree_position'
        ),
    )
    op.create_index('ix_tree_nodes_member_id', 'tree_nodes', ['member_id'], unique=True)
    op.create_index('ix_tree_nodes_sponsor_id', 'tree_nodes', ['sponsor_id'])
    op.create_index('ix_tree_nodes_left_child_id', 'tree_nodes', ['left_child_id'])
    op.create_index('ix_tree_nodes_right_child_id', 'tree_nodes', ['right_child_id'])
    op.create_index('ix_tree_nodes_depth', 'tree_nodes', ['depth'])

    op.create_table(
        'wallets',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('member_id', sa.Integer(), nullable=False),
        sa.Column('wallet_type', sa.String(length=20), nullable=False),
        sa.Column('balance', MONEY, nullable=False),
        sa.Column('version', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['member_id'], ['members.id'], ondelete='CASCADE'),
        sa.UniqueConstraint('member_id', 'wallet_type', name='uq_wallets_member_type'),
        sa.CheckConstraint('balance >= 0', name='check_wallet_balance_non_negative'),
        sa.CheckConstraint(
            "wallet_type IN ('main', 'commission')", name='check_wallet_type'
        ),
    )
    op.create_index('ix_wallets_member_id', 'wallets', ['member_id'])

    op.create_table(
        'transactions',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('member_id', sa.Integer(), nullable=False),
        sa.Column('wallet_type', sa.String(length=20), nullable=False),
        sa.Column('type', sa.String(length=20), nullable=False),
        sa.Column('amount', MONEY, nullable=False),
        sa.Column('balance_before', MONEY, nullable=False),
        sa.Column('balance_after', MONEY, nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('related_member_id', sa.Integer(), nullable=True),
        sa.Column('timestamp', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['member_id'], ['members.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(
            ['related_member_id'], ['members.id'], ondelete='SET NULL'
        ),
        sa.CheckConstraint('amount > 0', name='check_transaction_amount_positive'),
        sa.CheckConstraint(
            "type IN ('deposit', 'purchase', 'commission', 'withdrawal')",
            name='check_transaction_type',
        ),
    )
    op.create_index('ix_transactions_member_id', 'transactions', ['member_id'])
    op.create_index(
        'ix_transactions_related_member_id', 'transactions', ['related_member_id']
    )
    op.create_index('ix_transactions_timestamp', 'transactions', ['timestamp'])
    op.create_index(
        'idx_transactions_member_type', 'transactions', ['member_id', 'type']
    )


def downgrade() -> None:
    """Drop ledger tables."""
    op.drop_table('transactions')
    op.drop_table('wallets')
    op.drop_table('tree_nodes')
    op.drop_table('members')
    op.drop_table('packages')
