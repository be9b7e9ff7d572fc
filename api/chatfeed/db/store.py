"""Message store contract shared by the PostgreSQL and in-memory backends."""

import operator
from enum import Enum
from typing import AsyncContextManager, List, Optional, Protocol
from uuid import UUID

from ..models.conversations import Conversation, ConversationCreate
from ..models.messages import Message, MessageCreate


class BoundaryOp(str, Enum):
    """Comparison applied between ``sequence_id`` and a boundary value."""

    LT = "<"
    LE = "<="
    GT = ">"
    GE = ">="

    def holds(self, sequence_id: int, boundary: int) -> bool:
        """Evaluate the comparison in Python."""
        return _OPERATORS[self](sequence_id, boundary)


_OPERATORS = {
    BoundaryOp.LT: operator.lt,
    BoundaryOp.LE: operator.le,
    BoundaryOp.GT: operator.gt,
    BoundaryOp.GE: operator.ge,
}


class Direction(str, Enum):
    """Sort direction by ``sequence_id``."""

    ASC = "asc"
    DESC = "desc"


class StoreSnapshot(Protocol):
    """Consistent read view over one conversation's messages."""

    async def fetch_ordered(
        self,
        boundary_op: Optional[BoundaryOp],
        boundary_value: Optional[int],
        limit: int,
        direction: Direction
    ) -> List[Message]:
        """Fetch up to ``limit`` messages matching the boundary, in ``direction`` order.

        With ``boundary_op`` of None no boundary applies.
        """
        ...

    async def exists_beyond(self, boundary_op: BoundaryOp, boundary_value: int) -> bool:
        """Return whether any message matches the boundary."""
        ...


class MessageStore(Protocol):
    """Persistence collaborator for conversations and their messages."""

    def snapshot(self, conversation_id: UUID) -> AsyncContextManager[StoreSnapshot]:
        """Open a snapshot for one conversation.

        Raises NotFoundError on entry if the conversation does not exist.
        """
        ...

    async def create_conversation(self, data: ConversationCreate) -> Conversation:
        ...

    async def get_conversation(self, conversation_id: UUID) -> Conversation:
        ...

    async def create_message(self, conversation_id: UUID, data: MessageCreate) -> Message:
        ...

    async def close(self) -> None:
        ...
