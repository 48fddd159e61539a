"""initial schema

Revision ID: 001
Revises: 
Create Date: 2026-10-19 10:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # --- users ---
    op.create_table(
        'users',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('username', sa.String(length=64), nullable=False),
        sa.Column('name', sa.String(length=128), nullable=False),
        sa.Column('avatar', sa.String(length=512), nullable=True),
        sa.Column('bio', sa.Text(), nullable=True),
        sa.Column('hashed_password', sa.String(length=255), nullable=False),
        sa.Column('status', sa.String(length=16), server_default='active', nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email'),
        sa.UniqueConstraint('username')
    )

    # --- auth_tokens ---
    op.create_table(
        'auth_tokens',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('user_id', sa.String(length=64), nullable=False),
        sa.Column('token_hash', sa.CHAR(length=64), nullable=False),
        sa.Column('issued_at', sa.DateTime(), nullable=False),
        sa.Column('expires_at', sa.DateTime(), nullable=False),
        sa.Column('revoked_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('token_hash')
    )
    op.create_index('idx_auth_tokens_user_expires', 'auth_tokens', ['user_id', 'expires_at'], unique=False)

    # --- password_reset_tokens ---
    op.create_table(
        'password_reset_tokens',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('user_id', sa.String(length=64), nullable=False),
        sa.Column('token_hash', sa.CHAR(length=64), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('expires_at', sa.DateTime(), nullable=False),
        sa.Column('used_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('token_hash')
    )
    op.create_index('idx_password_reset_user', 'password_reset_tokens', ['user_id'], unique=False)

    # --- interests ---
    op.create_table(
        'interests',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('user_id', sa.String(length=64), nullable=False),
        sa.Column('category', sa.String(length=64), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'category', name='uq_interests_user_category')
    )
    op.create_index('idx_interests_user_position', 'interests', ['user_id', 'position'], unique=False)

    op.create_table(
        'interest_items',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('interest_id', sa.String(length=64), nullable=False),
        sa.Column('name', sa.String(length=128), nullable=False),
        sa.Column('rating', sa.Integer(), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.CheckConstraint('rating >= 1 AND rating <= 5', name='chk_interest_items_rating'),
        sa.ForeignKeyConstraint(['interest_id'], ['interests.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_interest_items_interest', 'interest_items', ['interest_id', 'position'], unique=False)

    # --- friend_requests ---
    op.create_table(
        'friend_requests',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('sender_id', sa.String(length=64), nullable=False),
        sa.Column('recipient_id', sa.String(length=64), nullable=False),
        sa.Column('status', sa.String(length=16), server_default='pending', nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('responded_at', sa.DateTime(), nullable=True),
        sa.Column('pending_pair_key', sa.String(length=160), nullable=True),
        sa.CheckConstraint('sender_id <> recipient_id', name='chk_friend_requests_not_self'),
        sa.CheckConstraint("status IN ('pending', 'accepted', 'rejected')", name='chk_friend_requests_status'),
        sa.ForeignKeyConstraint(['sender_id'], ['users.id']),
        sa.ForeignKeyConstraint(['recipient_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('pending_pair_key', name='uq_friend_requests_pending_pair')
    )
    op.create_index('idx_friend_requests_recipient', 'friend_requests', ['recipient_id', 'status', 'created_at'], unique=False)
    op.create_index('idx_friend_requests_sender', 'friend_requests', ['sender_id', 'status', 'created_at'], unique=False)

    # --- friendship_edges ---
    op.create_table(
        'friendship_edges',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('user_low_id', sa.String(length=64), nullable=False),
        sa.Column('user_high_id', sa.String(length=64), nullable=False),
        sa.Column('request_id', sa.String(length=64), nullable=True),
        sa.Column('since', sa.DateTime(), nullable=False),
        sa.CheckConstraint('user_low_id < user_high_id', name='chk_friendship_edges_ordered'),
        sa.ForeignKeyConstraint(['user_low_id'], ['users.id']),
        sa.ForeignKeyConstraint(['user_high_id'], ['users.id']),
        sa.ForeignKeyConstraint(['request_id'], ['friend_requests.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_low_id', 'user_high_id', name='uq_friendship_edges_pair')
    )
    op.create_index('idx_friendship_edges_high', 'friendship_edges', ['user_high_id'], unique=False)

    # --- notifications ---
    op.create_table(
        'notifications',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('user_id', sa.String(length=64), nullable=False),
        sa.Column('actor_id', sa.String(length=64), nullable=True),
        sa.Column('type', sa.String(length=32), nullable=False),
        sa.Column('payload', sa.JSON(), nullable=True),
        sa.Column('is_read', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.ForeignKeyConstraint(['actor_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_notifications_user_created', 'notifications', ['user_id', 'created_at'], unique=False)
    op.create_index('idx_notifications_user_unread', 'notifications', ['user_id', 'is_read'], unique=False)


def downgrade() -> None:
    op.drop_table('notifications')
    op.drop_table('friendship_edges')
    op.drop_table('friend_requests')
    op.drop_table('interest_items')
    op.drop_table('interests')
    op.drop_table('password_reset_tokens')
    op.drop_table('auth_tokens')
    op.drop_table('users')
