"""Window specifications: ``first``/``after`` and ``last``/``before`` requests."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, ConfigDict

from ..config import get_settings
from ..errors.problem_details import InvalidArgumentError
from .cursor import decode_cursor


class WindowMode(str, Enum):
    """Direction a window is anchored in."""

    FORWARD = "forward"
    BACKWARD = "backward"


class WindowSpec(BaseModel):
    """A validated, bounded window request.

    Forward windows walk from newest toward oldest starting strictly after the
    ``cursor`` message; backward windows walk from oldest toward newest
    starting strictly before it.
    """

    mode: WindowMode
    count: int = Field(ge=1)
    cursor: Optional[str] = None
    boundary: Optional[int] = Field(default=None, description="Decoded cursor, if any")

    model_config = ConfigDict(frozen=True)

    @classmethod
    def forward(cls, first: int, after: Optional[str] = None, max_page_size: Optional[int] = None) -> "WindowSpec":
        """Shorthand for a ``first``/``after`` window."""
        return cls.from_arguments(first=first, after=after, max_page_size=max_page_size)

    @classmethod
    def backward(cls, last: int, before: Optional[str] = None, max_page_size: Optional[int] = None) -> "WindowSpec":
        """Shorthand for a ``last``/``before`` window."""
        return cls.from_arguments(last=last, before=before, max_page_size=max_page_size)

    @classmethod
    def from_arguments(
        cls,
        first: Optional[int] = None,
        after: Optional[str] = None,
        last: Optional[int] = None,
        before: Optional[str] = None,
        max_page_size: Optional[int] = None
    ) -> "WindowSpec":
        """Build a window spec from raw connection arguments.

        Args:
            first: Number of messages to take walking toward older messages
            after: Cursor the forward window starts after
            last: Number of messages to take walking toward newer messages
            before: Cursor the backward window starts before
            max_page_size: Upper bound for the count, defaults to settings

        Returns:
            Validated window spec

        Raises:
            InvalidArgumentError: If the arguments do not form exactly one window
            InvalidCursorError: If the supplied cursor does not decode
        """
        if max_page_size is None:
            max_page_size = get_settings().max_page_size

        if first is not None and last is not None:
            raise InvalidArgumentError("Supply either 'first' or 'last', not both")
        if first is None and last is None:
            raise InvalidArgumentError("One of 'first' or 'last' is required")

        if first is not None:
            if before is not None:
                raise InvalidArgumentError("'before' cannot be combined with 'first'")
            mode, count, cursor, name = WindowMode.FORWARD, first, after, "first"
        else:
            if after is not None:
                raise InvalidArgumentError("'after' cannot be combined with 'last'")
            mode, count, cursor, name = WindowMode.BACKWARD, last, before, "last"

        if isinstance(count, bool) or not isinstance(count, int):
            raise InvalidArgumentError(f"'{name}' must be an integer")
        if count < 1:
            raise InvalidArgumentError(f"'{name}' must be a positive integer, got {count}")
        if count > max_page_size:
            raise InvalidArgumentError(f"'{name}' must not exceed {max_page_size}, got {count}")

        boundary = decode_cursor(cursor) if cursor is not None else None

        return cls(mode=mode, count=count, cursor=cursor, boundary=boundary)
