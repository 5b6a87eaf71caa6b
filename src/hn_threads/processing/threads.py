"""
Turn the flat output of a crawl back into comment threads
"""
import logging
from typing import Dict, Iterable, List

from hn_threads.core.entities import CommentData, CommentThread, Item

logger = logging.getLogger(__name__)


def _build_comments(index: Dict[int, Item], kid_ids: List[int]) -> List[CommentData]:
    comments: List[CommentData] = []

    for kid_id in kid_ids:
        item = index.get(kid_id)
        # Not crawled (not found upstream) or removed by moderators
        if item is None or item.deleted:
            continue

        comments.append(
            CommentData(
                id=str(item.id),
                parent_id=str(item.parent) if item.parent is not None else None,
                author=item.by or "Unknown",
                content=item.text or "",
                created_at=item.created_at,
                score=item.score,
                replies=_build_comments(index, item.kids),
            )
        )

    return comments


def build_threads(items: Iterable[Item]) -> List[CommentThread]:
    """
    Build one thread per story found in `items`.

    Order of `items` does not matter, so the unordered output of a crawl can
    be passed in directly. Non-story items only appear as comments.
    """
    items = list(items)
    index = {item.id: item for item in items}
    threads: List[CommentThread] = []

    for story in items:
        if story.deleted or not story.title or story.type != "story":
            continue

        threads.append(
            CommentThread(
                id=str(story.id),
                title=story.title,
                description=story.text,
                author=story.by or "Unknown",
                created_at=story.created_at,
                url=story.url,
                metadata={
                    "score": story.score or 0,
                    "descendants": story.descendants or 0,
                    "type": story.type or "story",
                },
                comments=_build_comments(index, story.kids),
            )
        )

    logger.debug(f"Built {len(threads)} threads from {len(items)} items")
    return threads


def count_comments(comments: List[CommentData]) -> int:
    return sum(1 + count_comments(c.replies) for c in comments)
