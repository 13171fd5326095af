"""create users, weekly_games and player_registrations

Revision ID: 4b7e9a2c1d30
Revises:
Create Date: 2026-10-18 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '4b7e9a2c1d30'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'users',
        sa.Column('id', sa.String(length=255), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('first_name', sa.String(length=255), nullable=True),
        sa.Column('last_name', sa.String(length=255), nullable=True),
        sa.Column('profile_image_url', sa.String(length=1024), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email'),
    )
    op.create_table(
        'weekly_games',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('game_date', sa.DateTime(), nullable=False),
        sa.Column('week_start', sa.Date(), nullable=False),
        sa.Column('is_frozen', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('week_start'),
    )
    op.create_index('ix_weekly_games_game_date', 'weekly_games', ['game_date'])
    op.create_table(
        'player_registrations',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.String(length=255), nullable=False),
        sa.Column('game_id', sa.Integer(), nullable=False),
        sa.Column('registered_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['game_id'], ['weekly_games.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'game_id', name='uq_player_registrations_user_game'),
    )
    op.create_index('ix_player_registrations_user_id', 'player_registrations', ['user_id'])
    op.create_index('ix_player_registrations_game_id', 'player_registrations', ['game_id'])


def downgrade():
    op.drop_index('ix_player_registrations_game_id', table_name='player_registrations')
    op.drop_index('ix_player_registrations_user_id', table_name='player_registrations')
    op.drop_table('player_registrations')
    op.drop_index('ix_weekly_games_game_date', table_name='weekly_games')
    op.drop_table('weekly_games')
    op.drop_table('users')
