"""Error handling module for the Chat Feed API."""

from .problem_details import (
    ProblemDetail,
    ProblemDetailException,
    BadRequestError,
    NotFoundError,
    ConflictError,
    InternalServerError,
    ServiceUnavailableError,
    InvalidArgumentError,
    InvalidCursorError,
    BusyError,
    InvariantViolationError,
    UnavailableError,
    create_problem_response
)
from .handlers import register_exception_handlers

__all__ = [
    "ProblemDetail",
    "ProblemDetailException",
    "BadRequestError",
    "NotFoundError",
    "ConflictError",
    "InternalServerError",
    "ServiceUnavailableError",
    "InvalidArgumentError",
    "InvalidCursorError",
    "BusyError",
    "InvariantViolationError",
    "UnavailableError",
    "create_problem_response",
    "register_exception_handlers"
]
