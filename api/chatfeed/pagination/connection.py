"""Connection assembly: wrap a resolved window into Relay edges and page info."""

from typing import Iterable, List, Optional

from ..errors.problem_details import InvariantViolationError
from ..models.connection import Connection, Edge, PageInfo
from ..models.messages import Message
from .cursor import MAX_SEQUENCE_ID, encode_cursor


def _valid_sequence_id(message: Message) -> Optional[int]:
    sequence_id = getattr(message, "sequence_id", None)
    if isinstance(sequence_id, bool) or not isinstance(sequence_id, int):
        return None
    if not 0 < sequence_id <= MAX_SEQUENCE_ID:
        return None
    return sequence_id


def assemble_connection(
    items: Iterable[Message],
    has_previous_page: bool,
    has_next_page: bool
) -> Connection:
    """Build a connection from messages ordered newest first.

    Raises:
        InvariantViolationError: If a message has no valid sequence id, or the
            messages are not strictly descending by sequence id
    """
    edges: List[Edge] = []
    previous: Optional[int] = None

    for item in items:
        sequence_id = _valid_sequence_id(item)
        if sequence_id is None:
            raise InvariantViolationError(f"Message without a valid sequence id: {item!r}")
        if previous is not None and sequence_id >= previous:
            raise InvariantViolationError(
                f"Messages out of order: sequence id {sequence_id} follows {previous}"
            )
        edges.append(Edge(node=item, cursor=encode_cursor(sequence_id)))
        previous = sequence_id

    return Connection(
        edges=edges,
        page_info=PageInfo(has_previous_page=has_previous_page, has_next_page=has_next_page)
    )
