"""workouts, exercises, logs, profiles + template catalog

Revision ID: 4b1e9c2d7a10
Revises:
Create Date: 2025-10-02 19:12:44.318201

"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

from gymii.training.catalog import TEMPLATES


# revision identifiers, used by Alembic.
revision: str = '4b1e9c2d7a10'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # 1) accounts
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False, server_default=''),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP')),
    )
    op.create_index('ix_users_id', 'users', ['id'])
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'profiles',
        sa.Column('id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('full_name', sa.String(length=120), nullable=True),
        sa.Column('weight', sa.Numeric(5, 2), nullable=True),
        sa.Column('height', sa.Numeric(5, 2), nullable=True),
        sa.Column('age', sa.Integer(), nullable=True),
        sa.Column('goal', sa.Text(), nullable=True),
        sa.Column('weekly_frequency', sa.Integer(), nullable=False, server_default='3'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP')),
    )

    # 2) workouts and their exercises
    op.create_table(
        'workouts',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('muscle_group', sa.String(length=255), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP')),
    )

    op.create_table(
        'exercises',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('workout_id', sa.Integer(), sa.ForeignKey('workouts.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('sets', sa.Integer(), nullable=False),
        sa.Column('reps', sa.Integer(), nullable=False),
        sa.Column('weight', sa.Numeric(6, 2), nullable=False, server_default='0'),
        sa.Column('rest_seconds', sa.Integer(), nullable=False, server_default='60'),
        sa.Column('order_index', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('set_plan', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP')),
    )

    # 3) append-only set log
    op.create_table(
        'workout_logs',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('exercise_id', sa.Integer(), sa.ForeignKey('exercises.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('weight', sa.Numeric(6, 2), nullable=False),
        sa.Column('reps', sa.Integer(), nullable=False),
        sa.Column('sets', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('completed_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False, index=True),
    )

    # 4) template catalog, seeded with the built-in plans
    templates = op.create_table(
        'workout_templates',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('slug', sa.String(length=120), nullable=False),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('muscle_groups', sa.JSON(), nullable=False),
        sa.Column('intensity', sa.String(length=60), nullable=True),
        sa.Column('rest_seconds', sa.Integer(), nullable=True),
        sa.Column('duration_minutes', sa.Integer(), nullable=True),
        sa.Column('exercises', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP')),
    )
    op.create_index('ix_workout_templates_slug', 'workout_templates', ['slug'], unique=True)
    op.bulk_insert(templates, [
        {
            'slug': t['slug'],
            'name': t['name'],
            'description': t.get('description'),
            'muscle_groups': t['muscle_groups'],
            'intensity': t.get('intensity'),
            'rest_seconds': t.get('rest_seconds'),
            'duration_minutes': t.get('duration_minutes'),
            'exercises': t['exercises'],
        }
        for t in TEMPLATES
    ])


def downgrade() -> None:
    # drop child tables in reverse order
    op.drop_index('ix_workout_templates_slug', table_name='workout_templates')
    op.drop_table('workout_templates')
    op.drop_table('workout_logs')
    op.drop_table('exercises')
    op.drop_table('workouts')
    op.drop_table('profiles')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_index('ix_users_id', table_name='users')
    op.drop_table('users')
