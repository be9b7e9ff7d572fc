"""Pagination module for cursor-based Relay connections."""

from .cursor import (
    CursorData,
    MAX_SEQUENCE_ID,
    encode_cursor,
    decode_cursor
)
from .window import WindowMode, WindowSpec
from .resolver import WindowResult, resolve_window
from .connection import assemble_connection

__all__ = [
    "CursorData",
    "MAX_SEQUENCE_ID",
    "encode_cursor",
    "decode_cursor",
    "WindowMode",
    "WindowSpec",
    "WindowResult",
    "resolve_window",
    "assemble_connection"
]
