"""create admin, game_room, user, game_session and answer tables

Revision ID: 5b7e0c1d9a21
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '5b7e0c1d9a21'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'admin',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('username', sa.String(length=64), nullable=False),
        sa.Column('password_hash', sa.String(length=128), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_admin_username', 'admin', ['username'], unique=True)

    op.create_table(
        'game_room',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('code', sa.String(length=16), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('expires_at', sa.DateTime(), nullable=False),
        sa.Column('total_participants', sa.Integer(), nullable=False),
        sa.Column('team_config', sa.JSON(), nullable=True),
        sa.Column('partner_config', sa.JSON(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_game_room_code', 'game_room', ['code'], unique=False)
    op.create_index(
        'uq_game_room_active_code', 'game_room', ['code'], unique=True,
        postgresql_where=sa.text('is_active'),
        sqlite_where=sa.text('is_active = 1'),
    )

    op.create_table(
        'user',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('game_room_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=64), nullable=False),
        sa.Column('seat_number', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['game_room_id'], ['game_room.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('game_room_id', 'seat_number', name='uq_user_room_seat'),
    )
    op.create_index('ix_user_game_room_id', 'user', ['game_room_id'], unique=False)

    op.create_table(
        'game_session',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('game_room_id', sa.Integer(), nullable=False),
        sa.Column('user1_id', sa.Integer(), nullable=False),
        sa.Column('user2_id', sa.Integer(), nullable=False),
        sa.Column('is_complete', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint('user1_id < user2_id', name='ck_game_session_pair_order'),
        sa.ForeignKeyConstraint(['game_room_id'], ['game_room.id']),
        sa.ForeignKeyConstraint(['user1_id'], ['user.id']),
        sa.ForeignKeyConstraint(['user2_id'], ['user.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_game_session_game_room_id', 'game_session', ['game_room_id'], unique=False)
    op.create_index(
        'uq_game_session_open_pair', 'game_session', ['game_room_id', 'user1_id', 'user2_id'], unique=True,
        postgresql_where=sa.text('NOT is_complete'),
        sqlite_where=sa.text('is_complete = 0'),
    )

    op.create_table(
        'answer',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('game_session_id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('question_number', sa.Integer(), nullable=False),
        sa.Column('my_answer', sa.Text(), nullable=False),
        sa.Column('partner_guess', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint('question_number >= 1', name='ck_answer_question_number'),
        sa.ForeignKeyConstraint(['game_session_id'], ['game_session.id']),
        sa.ForeignKeyConstraint(['user_id'], ['user.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('game_session_id', 'user_id', 'question_number', name='uq_answer_session_user_question'),
    )
    op.create_index('ix_answer_game_session_id', 'answer', ['game_session_id'], unique=False)


def downgrade():
    op.drop_index('ix_answer_game_session_id', table_name='answer')
    op.drop_table('answer')
    op.drop_index('uq_game_session_open_pair', table_name='game_session')
    op.drop_index('ix_game_session_game_room_id', table_name='game_session')
    op.drop_table('game_session')
    op.drop_index('ix_user_game_room_id', table_name='user')
    op.drop_table('user')
    op.drop_index('uq_game_room_active_code', table_name='game_room')
    op.drop_index('ix_game_room_code', table_name='game_room')
    op.drop_table('game_room')
    op.drop_index('ix_admin_username', table_name='admin')
    op.drop_table('admin')
