"""Data models for the Chat Feed API."""

from .conversations import Conversation, ConversationCreate
from .messages import Message, MessageCreate, MessageRow
from .connection import Connection, Edge, PageInfo

__all__ = [
    "Conversation",
    "ConversationCreate",
    "Message",
    "MessageCreate",
    "MessageRow",
    "Connection",
    "Edge",
    "PageInfo"
]
