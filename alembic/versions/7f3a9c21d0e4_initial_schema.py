"""initial schema

Revision ID: 7f3a9c21d0e4
Revises:
Create Date: 2026-10-19 10:12:08.512337

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '7f3a9c21d0e4'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _id_column() -> sa.Column:
    return sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True,
                     server_default=sa.text('gen_random_uuid()'))


def _user_fk(table: str) -> sa.ForeignKeyConstraint:
    return sa.ForeignKeyConstraint(['user_id'], ['users.id'],
                                   name=op.f(f'fk_{table}_user_id_users'),
                                   ondelete='CASCADE')


def upgrade() -> None:
    """Create all tables from scratch."""

    # ── users ──────────────────────────────────────────────────────────
    op.create_table(
        'users',
        _id_column(),
        sa.Column('email', sa.String(320), nullable=True),
        sa.Column('password_hash', sa.String(255), nullable=True),
        sa.Column('name', sa.String(255), nullable=True),
        sa.Column('telegram_id', sa.String(64), nullable=True),
        sa.Column('telegram_username', sa.String(255), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True,
                  server_default=sa.text('now()')),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_users')),
        sa.UniqueConstraint('email', name=op.f('uq_users_email')),
        sa.UniqueConstraint('telegram_id', name=op.f('uq_users_telegram_id')),
    )

    # ── profiles ───────────────────────────────────────────────────────
    op.create_table(
        'profiles',
        _id_column(),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('hobbies', postgresql.JSONB(), nullable=False,
                  server_default=sa.text("'[]'::jsonb")),
        sa.Column('interests', postgresql.JSONB(), nullable=False,
                  server_default=sa.text("'[]'::jsonb")),
        sa.Column('languages', postgresql.JSONB(), nullable=False,
                  server_default=sa.text("'[]'::jsonb")),
        sa.Column('work_context', sa.Text(), nullable=True),
        sa.Column('youtubers', postgresql.JSONB(), nullable=False,
                  server_default=sa.text("'[]'::jsonb")),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True,
                  server_default=sa.text('now()')),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_profiles')),
        _user_fk('profiles'),
        sa.UniqueConstraint('user_id', name=op.f('uq_profiles_user_id')),
    )

    # ── history_sessions ───────────────────────────────────────────────
    op.create_table(
        'history_sessions',
        _id_column(),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('mood', sa.String(32), nullable=True),
        sa.Column('suggestions', postgresql.JSONB(), nullable=False,
                  server_default=sa.text("'[]'::jsonb")),
        sa.Column('feedback', sa.String(16), nullable=True),
        sa.Column('timestamp', sa.DateTime(timezone=True), nullable=True,
                  server_default=sa.text('now()')),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_history_sessions')),
        _user_fk('history_sessions'),
    )
    op.create_index('idx_history_user_timestamp', 'history_sessions',
                    ['user_id', 'timestamp'])

    # ── saved_items ────────────────────────────────────────────────────
    op.create_table(
        'saved_items',
        _id_column(),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('video_id', sa.String(255), nullable=False),
        sa.Column('list', sa.String(32), nullable=False),
        sa.Column('suggestion', postgresql.JSONB(), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('added_at', sa.DateTime(timezone=True), nullable=True,
                  server_default=sa.text('now()')),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_saved_items')),
        _user_fk('saved_items'),
        sa.UniqueConstraint('user_id', 'video_id', name='uq_saved_items_user_video'),
    )
    op.create_index('idx_saved_items_user_id', 'saved_items', ['user_id'])

    # ── likes ──────────────────────────────────────────────────────────
    op.create_table(
        'likes',
        _id_column(),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('video_id', sa.String(255), nullable=False),
        sa.Column('suggestion', postgresql.JSONB(), nullable=True),
        sa.Column('liked_at', sa.DateTime(timezone=True), nullable=True,
                  server_default=sa.text('now()')),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_likes')),
        _user_fk('likes'),
        sa.UniqueConstraint('user_id', 'video_id', name='uq_likes_user_video'),
    )
    op.create_index('idx_likes_user_id', 'likes', ['user_id'])

    # ── user_stats ─────────────────────────────────────────────────────
    op.create_table(
        'user_stats',
        _id_column(),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('total_queries', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('total_likes', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('total_saves', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('total_videos_watched', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('streak', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('longest_streak', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('favorite_categories', postgresql.JSONB(), nullable=False,
                  server_default=sa.text("'{}'::jsonb")),
        sa.Column('last_active_date', sa.DateTime(timezone=True), nullable=True,
                  server_default=sa.text('now()')),
        sa.Column('joined_at', sa.DateTime(timezone=True), nullable=True,
                  server_default=sa.text('now()')),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_user_stats')),
        _user_fk('user_stats'),
        sa.UniqueConstraint('user_id', name=op.f('uq_user_stats_user_id')),
    )

    # ── telegram_accounts ──────────────────────────────────────────────
    op.create_table(
        'telegram_accounts',
        _id_column(),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('telegram_id', sa.String(64), nullable=False),
        sa.Column('username', sa.String(255), nullable=True),
        sa.Column('first_name', sa.String(255), nullable=True),
        sa.Column('last_name', sa.String(255), nullable=True),
        sa.Column('language_code', sa.String(16), nullable=True),
        sa.Column('current_mood', sa.String(32), nullable=True),
        sa.Column('pending_profile_setup', sa.Boolean(), nullable=False,
                  server_default=sa.false()),
        sa.Column('last_active', sa.DateTime(timezone=True), nullable=True,
                  server_default=sa.text('now()')),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True,
                  server_default=sa.text('now()')),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_telegram_accounts')),
        _user_fk('telegram_accounts'),
        sa.UniqueConstraint('user_id', name=op.f('uq_telegram_accounts_user_id')),
        sa.UniqueConstraint('telegram_id', name=op.f('uq_telegram_accounts_telegram_id')),
    )

    # ── notification_settings ──────────────────────────────────────────
    op.create_table(
        'notification_settings',
        _id_column(),
        sa.Column('telegram_account_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('daily_digest', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('daily_digest_time', sa.String(5), nullable=True),
        sa.Column('trending_alerts', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('reminders', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('timezone', sa.String(64), nullable=False, server_default='UTC'),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_notification_settings')),
        sa.ForeignKeyConstraint(['telegram_account_id'], ['telegram_accounts.id'],
                                name=op.f('fk_notification_settings_telegram_account_id'),
                                ondelete='CASCADE'),
        sa.UniqueConstraint('telegram_account_id',
                            name=op.f('uq_notification_settings_telegram_account_id')),
    )


def downgrade() -> None:
    """Drop all tables in reverse dependency order."""
    op.drop_table('notification_settings')
    op.drop_table('telegram_accounts')
    op.drop_table('user_stats')
    op.drop_table('likes')
    op.drop_table('saved_items')
    op.drop_table('history_sessions')
    op.drop_table('profiles')
    op.drop_table('users')
