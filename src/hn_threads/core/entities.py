"""
Hacker News item models shared by the crawler and the aggregator
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional, Dict, Any

from pydantic import BaseModel, ConfigDict, Field


class Item(BaseModel):
    """
    One node of a discussion tree: a story, comment, job, poll or pollopt.

    `root_story_id` is never sent by the API. The crawler stamps it with the
    id of the root under which the item was discovered.
    """
    model_config = ConfigDict(frozen=True, extra="ignore")

    id: int
    type: Optional[str] = None
    by: Optional[str] = None
    time: Optional[int] = None
    title: Optional[str] = None
    text: Optional[str] = None
    url: Optional[str] = None
    score: Optional[int] = None
    descendants: Optional[int] = None
    parent: Optional[int] = None
    kids: List[int] = Field(default_factory=list)
    deleted: Optional[bool] = None
    dead: Optional[bool] = None
    root_story_id: Optional[int] = None

    def with_root(self, root_id: int) -> Item:
        return self.model_copy(update={"root_story_id": root_id})

    @property
    def created_at(self) -> Optional[datetime]:
        if self.time is None:
            return None
        return datetime.fromtimestamp(self.time, tz=timezone.utc)


class BasicInfo(BaseModel):
    """
    Reduced view of a story used for list/summary display.
    """
    model_config = ConfigDict(frozen=True)

    id: int
    title: str
    by: str = ""
    time: int = 0
    url: Optional[str] = None
    score: int = 0
    descendants: int = 0

    @classmethod
    def from_item(cls, item: Item) -> Optional[BasicInfo]:
        """Project an item, or return None when it has no title."""
        if not item.title:
            return None

        return cls(
            id=item.id,
            title=item.title,
            by=item.by or "",
            time=item.time or 0,
            url=item.url,
            score=item.score or 0,
            descendants=item.descendants or 0,
        )


class CommentData(BaseModel):
    """
    A comment with its nested replies.
    """
    id: str
    parent_id: Optional[str] = None
    author: str
    content: str
    created_at: Optional[datetime] = None
    score: Optional[int] = None
    replies: List[CommentData] = Field(default_factory=list)


class CommentThread(BaseModel):
    """
    A story together with its comment tree.
    """
    id: str
    title: str
    description: Optional[str] = None
    author: str
    created_at: Optional[datetime] = None
    url: Optional[str] = None
    source_type: str = "HackerNews"
    metadata: Dict[str, Any] = Field(default_factory=dict)
    comments: List[CommentData] = Field(default_factory=list)
