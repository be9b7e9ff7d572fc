"""initial_schema

Revision ID: 3c9a7e21d4b0
Revises: 
Create Date: 2026-10-18 09:12:31.204518

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '3c9a7e21d4b0'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Ensure the pgcrypto extension is available for gen_random_uuid()
    op.execute("CREATE EXTENSION IF NOT EXISTS pgcrypto")

    op.create_table('conversations',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False, server_default=sa.text('gen_random_uuid()')),
        sa.Column('title', sa.Text(), nullable=True),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.PrimaryKeyConstraint('id')
    )

    # sequence_id is the pagination key: generated, monotonic, never reused
    op.create_table('messages',
        sa.Column('sequence_id', sa.BigInteger(), sa.Identity(always=True), nullable=False),
        sa.Column('conversation_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('body', postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.ForeignKeyConstraint(['conversation_id'], ['conversations.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('sequence_id')
    )

    op.create_index(
        'messages_conversation_sequence_desc',
        'messages',
        ['conversation_id', 'sequence_id'],
        unique=False,
        postgresql_ops={'sequence_id': 'DESC'}
    )


def downgrade() -> None:
    op.drop_index('messages_conversation_sequence_desc', table_name='messages')

    # Drop tables in reverse order due to foreign key constraints
    op.drop_table('messages')
    op.drop_table('conversations')

    # Note: We don't drop the pgcrypto extension as it might be used by other parts of the database
