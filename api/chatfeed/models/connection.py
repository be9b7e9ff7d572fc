"""Relay connection models: edges, page info and the connection envelope."""

from typing import Tuple

from pydantic import BaseModel, Field, ConfigDict

from .messages import Message


class PageInfo(BaseModel):
    """Existence of items strictly beyond the two ends of a window."""

    has_previous_page: bool = Field(
        default=False,
        alias="hasPreviousPage",
        description="Whether newer messages exist before the first edge"
    )
    has_next_page: bool = Field(
        default=False,
        alias="hasNextPage",
        description="Whether older messages exist after the last edge"
    )

    model_config = ConfigDict(populate_by_name=True, frozen=True)


class Edge(BaseModel):
    """A message paired with its opaque cursor."""

    node: Message
    cursor: str = Field(description="Opaque cursor for this message")

    model_config = ConfigDict(frozen=True)


class Connection(BaseModel):
    """Ordered edges (newest first) plus page info."""

    edges: Tuple[Edge, ...] = Field(default=(), description="Edges, newest message first")
    page_info: PageInfo = Field(default_factory=PageInfo, alias="pageInfo")

    model_config = ConfigDict(
        populate_by_name=True,
        frozen=True,
        json_schema_extra={
            "example": {
                "edges": [
                    {
                        "node": {
                            "sequence_id": 42,
                            "conversation_id": "550e8400-e29b-41d4-a716-446655440000",
                            "body": {"text": "See you at noon"},
                            "created_at": "2024-01-01T12:00:00Z"
                        },
                        "cursor": "NDI="
                    }
                ],
                "pageInfo": {"hasPreviousPage": False, "hasNextPage": True}
            }
        }
    )
