"""Pydantic models for conversations."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field, ConfigDict


class ConversationCreate(BaseModel):
    """Model for opening a new conversation."""

    title: Optional[str] = Field(
        default=None,
        max_length=200,
        description="Optional human-readable conversation title",
        examples=["Weekend plans"]
    )


class Conversation(BaseModel):
    """Container whose messages are paginated."""

    id: UUID = Field(description="Conversation UUID")
    title: Optional[str] = Field(default=None, description="Conversation title")
    created_at: datetime = Field(description="Creation timestamp")

    model_config = ConfigDict(
        from_attributes=True,
        frozen=True,
        json_schema_extra={
            "example": {
                "id": "550e8400-e29b-41d4-a716-446655440000",
                "title": "Weekend plans",
                "created_at": "2024-01-01T12:00:00Z"
            }
        }
    )
