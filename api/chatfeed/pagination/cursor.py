"""Opaque cursor encoding for message sequence ids."""

import base64
import binascii

from pydantic import BaseModel, Field, ValidationError

from ..errors.problem_details import InvalidCursorError

# Upper bound of a PostgreSQL BIGINT identity column
MAX_SEQUENCE_ID = 2**63 - 1


class CursorData(BaseModel):
    """Data carried by a cursor."""

    sequence_id: int = Field(gt=0, le=MAX_SEQUENCE_ID, description="Ordering key of the message")


def encode_cursor(sequence_id: int) -> str:
    """Encode a sequence id into an opaque cursor.

    Args:
        sequence_id: Positive ordering key of a message

    Returns:
        Base64 encoded cursor string

    Raises:
        ValueError: If the sequence id is outside the valid domain
    """
    try:
        cursor_data = CursorData(sequence_id=sequence_id)
    except ValidationError as e:
        raise ValueError(f"Failed to encode cursor: {e}") from e

    return base64.b64encode(str(cursor_data.sequence_id).encode("ascii")).decode("ascii")


def decode_cursor(cursor: str) -> int:
    """Decode an opaque cursor back into its sequence id.

    Only the canonical encoding of a sequence id is accepted, so every valid
    cursor maps to exactly one sequence id and back.

    Args:
        cursor: Base64 encoded cursor string

    Returns:
        The decoded sequence id

    Raises:
        InvalidCursorError: If cursor is malformed or outside the valid domain
    """
    if not cursor:
        raise InvalidCursorError("Empty cursor provided")

    try:
        text = base64.b64decode(cursor.encode("ascii"), validate=True).decode("ascii")
    except (binascii.Error, UnicodeError) as e:
        raise InvalidCursorError(f"Invalid cursor format: {e}")

    if not text.isdigit():
        raise InvalidCursorError("Invalid cursor format: not a sequence id")

    try:
        if len(text) > len(str(MAX_SEQUENCE_ID)):
            raise ValueError(text)
        cursor_data = CursorData(sequence_id=int(text))
    except (ValueError, ValidationError):
        raise InvalidCursorError("Cursor is outside the valid sequence id range")

    if encode_cursor(cursor_data.sequence_id) != cursor:
        raise InvalidCursorError("Invalid cursor format: non-canonical encoding")

    return cursor_data.sequence_id
