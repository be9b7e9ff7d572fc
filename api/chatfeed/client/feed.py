"""Per-conversation client feed: the single writer of a page cache."""

import logging
from enum import Enum
from typing import Callable, List, Optional, Tuple
from uuid import UUID

from ..config import get_settings
from ..errors.problem_details import BusyError, InvalidArgumentError
from ..models.connection import Connection
from ..models.messages import Message
from ..pagination.window import WindowSpec
from .cache import PageCache
from .fetchers import ConnectionFetcher
from .merge import merge_first_page, merge_local_insert, merge_older, merge_refresh


logger = logging.getLogger(__name__)

Observer = Callable[[PageCache], None]


class FeedState(str, Enum):
    """Lifecycle of a conversation view."""

    EMPTY = "empty"
    LOADED = "loaded"
    CLOSED = "closed"


class FeedClosedError(RuntimeError):
    pass


class ConversationFeed:
    """Infinite-scroll view over one conversation's messages.

    The feed owns its ``PageCache`` and is the only code that replaces it.
    Observers receive each new immutable snapshot.

    Concurrency rules:
    - ``load_first`` and ``load_older`` raise ``BusyError`` while any fetch is
      in flight.
    - ``refresh`` supersedes whatever is in flight; only the most recently
      issued fetch is applied, earlier results are discarded.
    - ``insert_local`` applies immediately and is replayed on top of any fetch
      that completes afterwards, so it commutes with in-flight fetches.
    - A failed fetch leaves the cache untouched and re-raises, unless a newer
      fetch superseded it, in which case the failure is dropped like a stale
      result.
    - An observer that raises is logged and does not stop the others.
    """

    def __init__(
        self,
        conversation_id: UUID,
        fetcher: ConnectionFetcher,
        page_size: Optional[int] = None
    ):
        self.conversation_id = conversation_id
        self.fetcher = fetcher
        self.page_size = get_settings().default_page_size if page_size is None else page_size
        # Rejects page sizes the server would refuse
        WindowSpec.forward(first=self.page_size)

        self._cache = PageCache()
        self._state = FeedState.EMPTY
        self._generation = 0
        self._in_flight: Optional[str] = None
        self._insert_log: List[Message] = []
        self._observers: List[Observer] = []

    @property
    def state(self) -> FeedState:
        return self._state

    @property
    def snapshot(self) -> PageCache:
        return self._cache

    @property
    def in_flight(self) -> Optional[str]:
        """Name of the fetch currently in flight, if any."""
        return self._in_flight

    def subscribe(self, observer: Observer) -> Callable[[], None]:
        """Register an observer; returns a callable that unsubscribes it."""
        self._observers.append(observer)

        def unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    def _publish(self, cache: PageCache) -> None:
        if cache is self._cache:
            return
        self._cache = cache
        for observer in list(self._observers):
            try:
                observer(cache)
            except Exception:
                logger.exception(f"Feed observer failed for conversation {self.conversation_id}")

    def _ensure_open(self) -> None:
        if self._state is FeedState.CLOSED:
            raise FeedClosedError(f"Feed for conversation {self.conversation_id} is closed")

    async def _fetch(self, kind: str, spec: WindowSpec) -> Tuple[Optional[Connection], int]:
        """Run one fetch; returns (None, mark) when a newer fetch superseded it."""
        self._generation += 1
        generation = self._generation
        self._in_flight = kind
        mark = 0 if self._state is FeedState.EMPTY else len(self._insert_log)

        try:
            connection = await self.fetcher.fetch(self.conversation_id, spec)
        except Exception as e:
            if generation != self._generation:
                logger.info(f"Ignoring failure of superseded {kind} for conversation {self.conversation_id}: {e}")
                return None, mark
            logger.warning(f"{kind} failed for conversation {self.conversation_id}, cache left unchanged")
            if self._state is FeedState.LOADED:
                self._insert_log.clear()
            raise
        finally:
            if generation == self._generation:
                self._in_flight = None

        if generation != self._generation:
            logger.info(f"Discarding superseded {kind} result for conversation {self.conversation_id}")
            return None, mark

        return connection, mark

    def _replay_inserts(self, cache: PageCache, mark: int) -> PageCache:
        for message in self._insert_log[mark:]:
            cache = merge_local_insert(cache, message)
        if self._in_flight is None:
            self._insert_log.clear()
        return cache

    async def load_first(self) -> PageCache:
        """Load the newest page; on an already loaded feed this is a refresh."""
        self._ensure_open()
        if self._state is FeedState.LOADED:
            return await self.refresh()
        if self._in_flight is not None:
            raise BusyError(f"A {self._in_flight} is already in flight")

        connection, mark = await self._fetch("load_first", WindowSpec.forward(first=self.page_size))
        if connection is None or self._state is not FeedState.EMPTY:
            return self._cache

        cache = self._replay_inserts(merge_first_page(connection), mark)
        self._state = FeedState.LOADED
        self._publish(cache)
        logger.debug(f"Loaded first page of {len(cache)} messages for conversation {self.conversation_id}")
        return self._cache

    async def load_older(self) -> PageCache:
        """Extend the cache toward older messages.

        A no-op returning the unchanged snapshot once the oldest message is
        cached.
        """
        self._ensure_open()
        if self._in_flight is not None:
            raise BusyError(f"A {self._in_flight} is already in flight")
        if self._state is FeedState.EMPTY:
            return await self.load_first()
        if not self._cache.page_info.has_next_page:
            return self._cache

        after = self._cache.oldest_cursor
        connection, mark = await self._fetch("load_older", WindowSpec.forward(first=self.page_size, after=after))
        if connection is None:
            return self._cache
        if self._cache.oldest_cursor != after:
            logger.info(f"Cache moved while loading older messages for conversation {self.conversation_id}")
            return self._cache

        cache = self._replay_inserts(merge_older(self._cache, connection), mark)
        self._publish(cache)
        return self._cache

    async def refresh(self) -> PageCache:
        """Re-fetch the newest page and merge it over the cached run."""
        self._ensure_open()
        if self._in_flight is not None:
            logger.debug(f"Refresh supersedes in-flight {self._in_flight} for conversation {self.conversation_id}")

        connection, mark = await self._fetch("refresh", WindowSpec.forward(first=self.page_size))
        if connection is None or self._state is FeedState.CLOSED:
            return self._cache

        if self._state is FeedState.EMPTY:
            cache = merge_first_page(connection)
            self._state = FeedState.LOADED
        else:
            cache = merge_refresh(self._cache, connection)
        self._publish(self._replay_inserts(cache, mark))
        return self._cache

    def insert_local(self, message: Message) -> PageCache:
        """Add a message created through a send or a live update."""
        self._ensure_open()
        if message.conversation_id != self.conversation_id:
            raise InvalidArgumentError(
                f"Message belongs to conversation {message.conversation_id}, not {self.conversation_id}"
            )

        if self._state is FeedState.EMPTY or self._in_flight is not None:
            self._insert_log.append(message)
        if self._state is FeedState.LOADED:
            self._publish(merge_local_insert(self._cache, message))
        return self._cache

    def close(self) -> None:
        """Discard the cache; results of fetches still in flight are dropped."""
        self._generation += 1
        self._in_flight = None
        self._state = FeedState.CLOSED
        self._cache = PageCache()
        self._insert_log.clear()
        self._observers.clear()
