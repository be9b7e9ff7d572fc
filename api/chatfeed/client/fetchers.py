"""Connection fetchers used by the client feed: in-process and over HTTP."""

import logging
from typing import Any, Dict, Optional, Protocol
from uuid import UUID

import httpx

from ..db.store import MessageStore
from ..errors.problem_details import (
    BusyError,
    InvalidArgumentError,
    InvalidCursorError,
    InvariantViolationError,
    NotFoundError,
    ProblemDetailException,
    UnavailableError,
)
from ..models.connection import Connection
from ..models.messages import Message, MessageCreate
from ..pagination.connection import assemble_connection
from ..pagination.resolver import resolve_window
from ..pagination.window import WindowMode, WindowSpec


logger = logging.getLogger(__name__)

ERRORS_BY_CODE = {
    "not_found": NotFoundError,
    "invalid_argument": InvalidArgumentError,
    "invalid_cursor": InvalidCursorError,
    "busy": BusyError,
    "invariant_violation": InvariantViolationError,
    "unavailable": UnavailableError,
}


class ConnectionFetcher(Protocol):
    """Anything that can resolve a window of a conversation into a connection."""

    async def fetch(self, conversation_id: UUID, spec: WindowSpec) -> Connection:
        ...


class LocalConnectionFetcher:
    """Resolve windows in-process against a message store."""

    def __init__(self, store: MessageStore):
        self.store = store

    async def fetch(self, conversation_id: UUID, spec: WindowSpec) -> Connection:
        result = await resolve_window(self.store, conversation_id, spec)
        return assemble_connection(result.items, result.has_previous_page, result.has_next_page)


class HttpConnectionFetcher:
    """Fetch connections from the Chat Feed HTTP API.

    Handles:
    - Window arguments as query parameters
    - Problem Details responses mapped back onto the error classes
    - Transport failures and 5xx responses reported as ``UnavailableError``
    """

    def __init__(
        self,
        base_url: str,
        client: Optional[httpx.AsyncClient] = None,
        timeout_seconds: float = 10.0
    ) -> None:
        """Initialize the fetcher.

        Args:
            base_url: Root URL of the API, e.g. ``http://localhost:8000``
            client: Optional shared client; one is created per call otherwise
            timeout_seconds: Request timeout when no client is supplied
        """
        self.base_url = base_url.rstrip("/")
        self.client = client
        self.timeout_seconds = timeout_seconds

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        url = f"{self.base_url}{path}"
        try:
            if self.client is not None:
                return await self.client.request(method, url, **kwargs)
            async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
                return await client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            logger.warning(f"Request {method} {url} failed: {e}")
            raise UnavailableError(f"Request failed: {e}") from e

    @staticmethod
    def _raise_for_problem(response: httpx.Response) -> None:
        if response.is_success:
            return

        try:
            problem: Any = response.json()
        except ValueError:
            problem = {}
        if not isinstance(problem, dict):
            problem = {}
        detail = problem.get("detail")
        if not isinstance(detail, str) or not detail:
            detail = response.reason_phrase or "Request failed"
        code = problem.get("code")
        error_class = ERRORS_BY_CODE.get(code) if isinstance(code, str) else None

        if error_class is not None:
            raise error_class(detail)
        if response.status_code == 400:
            raise InvalidArgumentError(detail)
        if response.status_code == 404:
            raise NotFoundError(detail)
        if response.status_code >= 500:
            raise UnavailableError(detail)
        title = problem.get("title")
        raise ProblemDetailException(
            status=response.status_code,
            title=title if isinstance(title, str) else "HTTP Error",
            detail=detail
        )

    async def fetch(self, conversation_id: UUID, spec: WindowSpec) -> Connection:
        if spec.mode is WindowMode.FORWARD:
            params: Dict[str, Any] = {"first": spec.count}
            if spec.cursor is not None:
                params["after"] = spec.cursor
        else:
            params = {"last": spec.count}
            if spec.cursor is not None:
                params["before"] = spec.cursor

        response = await self._request("GET", f"/v1/conversations/{conversation_id}/messages", params=params)
        self._raise_for_problem(response)
        return Connection.model_validate(response.json())

    async def create_message(self, conversation_id: UUID, data: MessageCreate) -> Message:
        """Send a message; the result can be handed to ``ConversationFeed.insert_local``."""
        response = await self._request(
            "POST",
            f"/v1/conversations/{conversation_id}/messages",
            json=data.model_dump(mode="json")
        )
        self._raise_for_problem(response)
        return Message.model_validate(response.json())
