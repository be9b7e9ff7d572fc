"""Window resolution: turn a window spec into a bounded, ordered slice of messages."""

import logging
from dataclasses import dataclass, field
from typing import List
from uuid import UUID

from ..db.store import BoundaryOp, Direction, MessageStore
from ..models.messages import Message
from .window import WindowMode, WindowSpec


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WindowResult:
    """Messages of one window, newest first, with boundary existence flags."""

    items: List[Message] = field(default_factory=list)
    has_previous_page: bool = False
    has_next_page: bool = False


async def resolve_window(store: MessageStore, conversation_id: UUID, spec: WindowSpec) -> WindowResult:
    """Resolve a window of a conversation's messages.

    The fetch and both boundary probes run in one store snapshot, so a message
    created while the window resolves is seen by all of them or by none.

    Forward windows (``first``/``after``) take messages strictly older than the
    cursor; ``has_next_page`` probes below the oldest fetched message and
    ``has_previous_page`` is only true when a cursor was given and something at
    or above it exists. Backward windows (``last``/``before``) mirror this from
    the oldest end and are reversed to newest-first before returning.

    Args:
        store: Message store to read from
        conversation_id: Conversation whose messages are paged
        spec: Validated window specification

    Returns:
        Window result with messages ordered newest first

    Raises:
        NotFoundError: If the conversation does not exist
        UnavailableError: If the store fails during the fetch or a probe
    """
    async with store.snapshot(conversation_id) as snapshot:
        if spec.mode is WindowMode.FORWARD:
            if spec.boundary is None:
                items = await snapshot.fetch_ordered(None, None, spec.count, Direction.DESC)
                has_previous_page = False
            else:
                items = await snapshot.fetch_ordered(BoundaryOp.LT, spec.boundary, spec.count, Direction.DESC)
                has_previous_page = await snapshot.exists_beyond(BoundaryOp.GE, spec.boundary)

            has_next_page = bool(items) and await snapshot.exists_beyond(BoundaryOp.LT, items[-1].sequence_id)
        else:
            if spec.boundary is None:
                items = await snapshot.fetch_ordered(None, None, spec.count, Direction.ASC)
                has_next_page = False
            else:
                items = await snapshot.fetch_ordered(BoundaryOp.GT, spec.boundary, spec.count, Direction.ASC)
                has_next_page = await snapshot.exists_beyond(BoundaryOp.LE, spec.boundary)

            has_previous_page = bool(items) and await snapshot.exists_beyond(BoundaryOp.GT, items[-1].sequence_id)
            items = list(reversed(items))

    logger.debug(
        f"Resolved {spec.mode.value} window of {len(items)}/{spec.count} messages in conversation "
        f"{conversation_id}: has_previous_page={has_previous_page}, has_next_page={has_next_page}"
    )

    return WindowResult(items=items, has_previous_page=has_previous_page, has_next_page=has_next_page)
