"""Message store backends."""

from .store import BoundaryOp, Direction, MessageStore, StoreSnapshot
from .memory import InMemoryMessageStore
from .postgres import PostgresMessageStore
from ..config import Settings


def create_message_store(settings: Settings) -> MessageStore:
    """Build the store selected by ``settings.store_backend``."""
    if settings.store_backend == "memory":
        return InMemoryMessageStore()
    return PostgresMessageStore()


__all__ = [
    "BoundaryOp",
    "Direction",
    "MessageStore",
    "StoreSnapshot",
    "InMemoryMessageStore",
    "PostgresMessageStore",
    "create_message_store"
]
