"""SQLAlchemy models for the Chat Feed schema."""

from sqlalchemy import (
    BigInteger, Column, DateTime, ForeignKey, Identity, Index, Text, text
)
from sqlalchemy.dialects.postgresql import UUID, JSONB
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

# Create base class for models
Base = declarative_base()


class Conversation(Base):
    """Conversations table model."""
    __tablename__ = 'conversations'

    id = Column(UUID(as_uuid=True), primary_key=True, server_default=text('gen_random_uuid()'))
    title = Column(Text)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class Message(Base):
    """Messages table model.

    ``sequence_id`` is an always-generated identity, the ordering key for
    cursor pagination.
    """
    __tablename__ = 'messages'

    sequence_id = Column(BigInteger, Identity(always=True), primary_key=True)
    conversation_id = Column(
        UUID(as_uuid=True),
        ForeignKey('conversations.id', ondelete='CASCADE'),
        nullable=False
    )
    body = Column(JSONB, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (
        Index(
            'messages_conversation_sequence_desc',
            'conversation_id', 'sequence_id',
            postgresql_ops={'sequence_id': 'DESC'}
        ),
    )
