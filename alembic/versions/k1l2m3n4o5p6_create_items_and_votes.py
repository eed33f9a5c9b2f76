"""create_items_and_votes

Revision ID: k1l2m3n4o5p6
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'k1l2m3n4o5p6'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=True),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('image', sa.String(length=500), nullable=True),
        sa.Column('username', sa.String(length=20), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email'),
    )
    op.create_index('ix_users_username', 'users', ['username'], unique=True)

    op.create_table(
        'items',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('type', sa.String(length=10), nullable=False),
        sa.Column('name', sa.String(length=500), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('url', sa.String(length=1000), nullable=True),
        sa.Column('image_url', sa.String(length=1000), nullable=True),
        sa.Column('artist', sa.JSON(), nullable=False),
        sa.Column('tags', sa.JSON(), nullable=False),
        sa.Column('published_on', sa.Date(), nullable=True),
        sa.Column('provider_id', sa.String(length=500), nullable=True),
        sa.Column('submitted_by', sa.String(length=64), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['submitted_by'], ['users.id'], ondelete='CASCADE'),
        sa.CheckConstraint("type IN ('music', 'book', 'movie', 'misc')", name='ck_items_type'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_items_type', 'items', ['type'])
    op.create_index('ix_items_submitted_by', 'items', ['submitted_by'])
    op.create_index('ix_items_created_at', 'items', ['created_at'])

    op.create_table(
        'item_votes',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.String(length=64), nullable=False),
        sa.Column('item_id', sa.String(length=36), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['item_id'], ['items.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'item_id', name='unique_user_item_vote'),
    )
    op.create_index('ix_item_votes_user_id', 'item_votes', ['user_id'])
    op.create_index('ix_item_votes_item_id', 'item_votes', ['item_id'])


def downgrade() -> None:
    op.drop_index('ix_item_votes_item_id', table_name='item_votes')
    op.drop_index('ix_item_votes_user_id', table_name='item_votes')
    op.drop_table('item_votes')
    op.drop_index('ix_items_created_at', table_name='items')
    op.drop_index('ix_items_submitted_by', table_name='items')
    op.drop_index('ix_items_type', table_name='items')
    op.drop_table('items')
    op.drop_index('ix_users_username', table_name='users')
    op.drop_table('users')
