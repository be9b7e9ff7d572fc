"""Pydantic models for messages."""

from datetime import datetime
from typing import Dict, Any
from uuid import UUID

from pydantic import BaseModel, Field, ConfigDict


class MessageCreate(BaseModel):
    """Model for sending a new message into a conversation."""

    body: Dict[str, Any] = Field(
        ...,
        description="Message payload",
        examples=[{"text": "See you at noon", "author": "alice"}]
    )


class Message(BaseModel):
    """A single message, ordered within its conversation by ``sequence_id``.

    ``sequence_id`` is assigned by the store at creation, strictly increasing
    and never reused, so newer messages always carry a greater value.
    """

    sequence_id: int = Field(gt=0, description="Monotonic ordering key")
    conversation_id: UUID = Field(description="Conversation this message belongs to")
    body: Dict[str, Any] = Field(description="Message payload")
    created_at: datetime = Field(description="Creation timestamp")

    model_config = ConfigDict(
        from_attributes=True,
        frozen=True,
        json_schema_extra={
            "example": {
                "sequence_id": 42,
                "conversation_id": "550e8400-e29b-41d4-a716-446655440000",
                "body": {"text": "See you at noon", "author": "alice"},
                "created_at": "2024-01-01T12:00:00Z"
            }
        }
    )


# Database row model (for internal use)
class MessageRow(BaseModel):
    """Model representing a message database row."""

    sequence_id: int
    conversation_id: UUID
    body: Dict[str, Any]
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

    def to_message(self) -> Message:
        """Convert to public Message model."""
        return Message(
            sequence_id=self.sequence_id,
            conversation_id=self.conversation_id,
            body=self.body,
            created_at=self.created_at
        )
