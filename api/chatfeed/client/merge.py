"""Merge policy: combine fetched windows and local inserts into a page cache.

Every function here is pure and returns a new ``PageCache``; the feed is the
only writer that swaps the result in.
"""

import logging
from typing import Iterable, Set

from ..errors.problem_details import InvariantViolationError
from ..models.connection import Connection, Edge, PageInfo
from ..models.messages import Message
from ..pagination.cursor import encode_cursor
from .cache import PageCache


logger = logging.getLogger(__name__)


def _checked(edges: Iterable[Edge], page_info: PageInfo) -> PageCache:
    """Build a cache, enforcing unique cursors and newest-first order."""
    edges = tuple(edges)
    seen: Set[str] = set()
    previous = None
    for edge in edges:
        if edge.cursor in seen:
            raise InvariantViolationError(f"Duplicate cursor {edge.cursor!r} in page cache")
        if previous is not None and edge.node.sequence_id >= previous:
            raise InvariantViolationError(
                f"Page cache out of order: sequence id {edge.node.sequence_id} follows {previous}"
            )
        seen.add(edge.cursor)
        previous = edge.node.sequence_id
    return PageCache(edges=edges, page_info=page_info)


def merge_first_page(connection: Connection) -> PageCache:
    """Start a cache from the first window of a conversation."""
    return _checked(connection.edges, connection.page_info)


def merge_older(cache: PageCache, connection: Connection) -> PageCache:
    """Append an older window after the cache's oldest edge.

    The newest end keeps its flag; the oldest end takes the window's.
    """
    known = set(cache.cursors())
    appended = [edge for edge in connection.edges if edge.cursor not in known]
    page_info = PageInfo(
        has_previous_page=cache.page_info.has_previous_page,
        has_next_page=connection.page_info.has_next_page
    )
    return _checked(cache.edges + tuple(appended), page_info)


def merge_refresh(cache: PageCache, connection: Connection) -> PageCache:
    """Replace the newest segment of the cache with a refreshed window.

    The two runs are stitched only when the refreshed window's oldest edge is
    already cached and the refreshed edges that are cached are exactly the
    cache's newest prefix. Anything else drops the cache and keeps only the
    refreshed window, since a stitch could leave a gap.
    """
    if cache.is_empty or not connection.edges:
        return merge_first_page(connection)

    positions = {cursor: i for i, cursor in enumerate(cache.cursors())}
    anchor = positions.get(connection.edges[-1].cursor)

    if anchor is not None:
        overlap = [edge.cursor for edge in connection.edges if edge.cursor in positions]
        if overlap == cache.cursors()[:anchor + 1]:
            page_info = PageInfo(
                has_previous_page=connection.page_info.has_previous_page,
                has_next_page=cache.page_info.has_next_page
            )
            return _checked(connection.edges + cache.edges[anchor + 1:], page_info)
        logger.warning("Refreshed window overlaps the cache unevenly, replacing the cache")
    else:
        logger.info("Refreshed window does not reach the cached run, replacing the cache")

    return merge_first_page(connection)


def merge_local_insert(cache: PageCache, message: Message) -> PageCache:
    """Add a message created out of band (send mutation or live update).

    A message newer than the cached head is prepended; page info is left as
    is. Duplicates are ignored. A late message that falls inside the run is
    placed in order, while one older than the run, or newer than a head that
    is not the conversation's newest, is left for a later fetch.
    """
    cursor = encode_cursor(message.sequence_id)
    if cursor in set(cache.cursors()):
        return cache

    edge = Edge(node=message, cursor=cursor)
    if cache.is_empty:
        return _checked((edge,), cache.page_info)

    newest = cache.edges[0].node.sequence_id
    oldest = cache.edges[-1].node.sequence_id

    if message.sequence_id > newest:
        if cache.page_info.has_previous_page:
            logger.debug(f"Skipping local insert {message.sequence_id}: cached head is not the newest message")
            return cache
        return _checked((edge,) + cache.edges, cache.page_info)

    if message.sequence_id < oldest:
        logger.debug(f"Skipping local insert {message.sequence_id}: older than the cached run")
        return cache

    position = next(i for i, e in enumerate(cache.edges) if e.node.sequence_id < message.sequence_id)
    return _checked(cache.edges[:position] + (edge,) + cache.edges[position:], cache.page_info)
