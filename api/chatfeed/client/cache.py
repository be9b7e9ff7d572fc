"""Immutable snapshot of a conversation view's fetched messages."""

from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from ..models.connection import Edge, PageInfo
from ..models.messages import Message


class PageCache(BaseModel):
    """Contiguous run of a conversation's messages, newest first.

    ``page_info`` describes the two ends of the run relative to the whole
    conversation. Instances are frozen; every merge produces a new one.
    """

    edges: Tuple[Edge, ...] = ()
    page_info: PageInfo = Field(default_factory=PageInfo)

    model_config = ConfigDict(frozen=True)

    @property
    def is_empty(self) -> bool:
        return not self.edges

    @property
    def newest_cursor(self) -> Optional[str]:
        return self.edges[0].cursor if self.edges else None

    @property
    def oldest_cursor(self) -> Optional[str]:
        return self.edges[-1].cursor if self.edges else None

    def cursors(self) -> List[str]:
        return [edge.cursor for edge in self.edges]

    def messages(self) -> List[Message]:
        return [edge.node for edge in self.edges]

    def __len__(self) -> int:
        return len(self.edges)
