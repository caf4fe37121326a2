"""initial_schema

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-03-01 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0001_initial_schema'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create mission, reward, history and progression tables."""
    # Native UUID on PostgreSQL, CHAR(32) hex elsewhere
    uuid = sa.Uuid()

    op.create_table('mission_instances',
        sa.Column('mission_id', uuid, nullable=False),
        sa.Column('player_id', uuid, nullable=False),
        sa.Column('template_id', sa.String(length=50), nullable=False),
        sa.Column('title', sa.String(length=100), nullable=False),
        sa.Column('description', sa.String(length=500), nullable=False),
        sa.Column('icon', sa.String(length=50), nullable=False),
        sa.Column('action_type', sa.String(length=50), nullable=False),
        sa.Column('rarity', sa.String(length=20), nullable=False),
        sa.Column('target_value', sa.Integer(), nullable=False),
        sa.Column('current_value', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('points_reward', sa.Integer(), nullable=False),
        sa.Column('special_reward_chance', sa.Float(), nullable=False, server_default='0'),
        sa.Column('is_completed', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('is_claimed', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('claimed_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('mission_id')
    )
    op.create_index('ix_mission_instances_player_id', 'mission_instances', ['player_id'], unique=False)
    op.create_index('ix_mission_instances_player_expires', 'mission_instances',
                    ['player_id', 'expires_at'], unique=False)
    op.create_index('ix_mission_instances_player_action', 'mission_instances',
                    ['player_id', 'action_type'], unique=False)

    op.create_table('compound_progress',
        sa.Column('player_id', uuid, nullable=False),
        sa.Column('messages', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('translations', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('media', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('player_id')
    )

    op.create_table('mission_generation_markers',
        sa.Column('player_id', uuid, nullable=False),
        sa.Column('last_generated_date', sa.Date(), nullable=False),
        sa.PrimaryKeyConstraint('player_id')
    )

    op.create_table('special_rewards',
        sa.Column('reward_id', uuid, nullable=False),
        sa.Column('player_id', uuid, nullable=False),
        sa.Column('title', sa.String(length=100), nullable=False),
        sa.Column('description', sa.String(length=500), nullable=False),
        sa.Column('icon', sa.String(length=50), nullable=False),
        sa.Column('rarity', sa.String(length=20), nullable=False),
        sa.Column('reward_type', sa.String(length=20), nullable=False),
        sa.Column('payload', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('reward_id')
    )
    op.create_index('ix_special_rewards_player_id', 'special_rewards', ['player_id'], unique=False)

    op.create_table('mission_history',
        sa.Column('entry_id', uuid, nullable=False),
        sa.Column('player_id', uuid, nullable=False),
        sa.Column('template_id', sa.String(length=50), nullable=False),
        sa.Column('action_type', sa.String(length=50), nullable=False),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('points_earned', sa.Integer(), nullable=False),
        sa.Column('reward_id', uuid, nullable=True),
        sa.PrimaryKeyConstraint('entry_id')
    )
    op.create_index('ix_mission_history_player_id', 'mission_history', ['player_id'], unique=False)
    op.create_index('ix_mission_history_player_completed', 'mission_history',
                    ['player_id', 'completed_at'], unique=False)

    op.create_table('progression_ledgers',
        sa.Column('player_id', uuid, nullable=False),
        sa.Column('points', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('level', sa.String(length=20), nullable=False, server_default='novice'),
        sa.Column('streak_days', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('last_activity_date', sa.Date(), nullable=True),
        sa.Column('achievements_unlocked', sa.JSON(), nullable=False),
        sa.Column('owned_reward_ids', sa.JSON(), nullable=False),
        sa.Column('action_counters', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('player_id')
    )


def downgrade() -> None:
    """Drop all gamification tables."""
    op.drop_table('progression_ledgers')
    op.drop_index('ix_mission_history_player_completed', table_name='mission_history')
    op.drop_index('ix_mission_history_player_id', table_name='mission_history')
    op.drop_table('mission_history')
    op.drop_index('ix_special_rewards_player_id', table_name='special_rewards')
    op.drop_table('special_rewards')
    op.drop_table('mission_generation_markers')
    op.drop_table('compound_progress')
    op.drop_index('ix_mission_instances_player_action', table_name='mission_instances')
    op.drop_index('ix_mission_instances_player_expires', table_name='mission_instances')
    op.drop_index('ix_mission_instances_player_id', table_name='mission_instances')
    op.drop_table('mission_instances')
