"""Client-side page cache for conversation views."""

from .cache import PageCache
from .merge import merge_first_page, merge_older, merge_refresh, merge_local_insert
from .fetchers import ConnectionFetcher, LocalConnectionFetcher, HttpConnectionFetcher
from .feed import ConversationFeed, FeedClosedError, FeedState

__all__ = [
    "PageCache",
    "merge_first_page",
    "merge_older",
    "merge_refresh",
    "merge_local_insert",
    "ConnectionFetcher",
    "LocalConnectionFetcher",
    "HttpConnectionFetcher",
    "ConversationFeed",
    "FeedClosedError",
    "FeedState"
]
