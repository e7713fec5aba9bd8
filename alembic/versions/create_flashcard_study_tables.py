"""create users, flashcard sets and flashcards tables

Revision ID: create_flashcard_study_tables
Revises:
Create Date: 2026-10-19

Creates the tables for local accounts, flashcard sets and their cards.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = 'create_flashcard_study_tables'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Get connection and inspector
    conn = op.get_bind()
    inspector = sa.inspect(conn)
    existing_tables = inspector.get_table_names()

    if 'users' not in existing_tables:
        op.create_table(
            'users',
            sa.Column('id', sa.String(36), primary_key=True),
            sa.Column('email', sa.String(255), unique=True, nullable=False, index=True),
            sa.Column('hashed_password', sa.String(255), nullable=False),
            sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
            sa.Column(
                'created_at',
                sa.DateTime(timezone=True),
                nullable=False,
                server_default=sa.func.now()
            ),
            sa.Column(
                'updated_at',
                sa.DateTime(timezone=True),
                nullable=False,
                server_default=sa.func.now()
            ),
            sa.Column('last_login', sa.DateTime(timezone=True), nullable=True),
        )

    if 'flashcard_sets' not in existing_tables:
        op.create_table(
            'flashcard_sets',
            sa.Column('id', sa.String(36), primary_key=True),
            sa.Column('user_id', sa.String(36), nullable=False, index=True),
            sa.Column('grade', sa.Integer(), nullable=False),
            sa.Column('subject', sa.String(100), nullable=False),
            sa.Column('topic', sa.String(500), nullable=False),
            sa.Column('completed', sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column(
                'created_at',
                sa.DateTime(timezone=True),
                nullable=False,
                server_default=sa.func.now()
            ),
            sa.Column(
                'updated_at',
                sa.DateTime(timezone=True),
                nullable=False,
                server_default=sa.func.now()
            ),
            sa.ForeignKeyConstraint(
                ['user_id'],
                ['users.id'],
                name='fk_flashcard_sets_user_id',
                ondelete='CASCADE'
            ),
        )

    if 'flashcards' not in existing_tables:
        op.create_table(
            'flashcards',
            sa.Column('id', sa.String(36), primary_key=True),
            sa.Column('flashcard_set_id', sa.String(36), nullable=False, index=True),
            sa.Column('content', sa.Text(), nullable=False),
            sa.Column('explanation', sa.Text(), nullable=True),
            sa.Column('order_index', sa.Integer(), nullable=False, server_default='0'),
            # Study flags
            sa.Column('understood', sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column('needs_review', sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column('is_explanatory', sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column(
                'created_at',
                sa.DateTime(timezone=True),
                nullable=False,
                server_default=sa.func.now()
            ),
            sa.ForeignKeyConstraint(
                ['flashcard_set_id'],
                ['flashcard_sets.id'],
                name='fk_flashcards_flashcard_set_id',
                ondelete='CASCADE'
            ),
        )

        # Cards are always read in order within a set
        op.create_index(
            'ix_flashcards_set_order',
            'flashcards',
            ['flashcard_set_id', 'order_index']
        )


def downgrade() -> None:
    # Get connection and inspector
    conn = op.get_bind()
    inspector = sa.inspect(conn)
    existing_tables = inspector.get_table_names()

    if 'flashcards' in existing_tables:
        op.drop_index('ix_flashcards_set_order', table_name='flashcards')
        op.drop_table('flashcards')

    if 'flashcard_sets' in existing_tables:
        op.drop_table('flashcard_sets')

    if 'users' in existing_tables:
        op.drop_table('users')
