"""
Resolve lists of story ids into ordered BasicInfo summaries
"""
import asyncio
import logging
from typing import List, Optional

from hn_threads.core.entities import BasicInfo
from hn_threads.ingestion.base import ItemResolver, ResolverError

logger = logging.getLogger(__name__)


async def _resolve_one(resolver: ItemResolver, item_id: int) -> Optional[BasicInfo]:
    try:
        item = await resolver.resolve_item(item_id)
    except ResolverError as e:
        logger.warning(f"Skipping item {item_id}: {e}")
        return None
    except Exception as e:
        logger.warning(f"Skipping item {item_id}: unexpected {type(e).__name__}: {e}")
        return None

    if item is None:
        logger.debug(f"Skipping item {item_id}: not found")
        return None

    info = BasicInfo.from_item(item)
    if info is None:
        logger.debug(f"Skipping item {item_id}: no title")
    return info


async def resolve_basic_info(resolver: ItemResolver, ids: List[int]) -> List[BasicInfo]:
    """
    Resolve every id concurrently and return the summaries in input order.

    Ids that fail to resolve, do not exist, or have no title are dropped.
    Never raises for per-item problems.
    """
    slots: List[Optional[BasicInfo]] = [None] * len(ids)

    async def fill(index: int, item_id: int) -> None:
        slots[index] = await _resolve_one(resolver, item_id)

    await asyncio.gather(*(fill(i, item_id) for i, item_id in enumerate(ids)))

    results = [info for info in slots if info is not None]
    logger.info(f"Resolved {len(results)} of {len(ids)} items")
    return results


async def fetch_top_basic_info(
    resolver: ItemResolver,
    limit: Optional[int] = None,
) -> List[BasicInfo]:
    """
    Fetch the current top stories as BasicInfo.
    A failure to list the top ids propagates to the caller.
    """
    ids = await resolver.list_top_ids()
    if limit is not None:
        ids = ids[:limit]
    return await resolve_basic_info(resolver, ids)


async def search_top_stories(
    resolver: ItemResolver,
    query: str,
    max_results: int = 20,
) -> List[BasicInfo]:
    """
    Keyword search over the top stories; the API has no search endpoint.

    Checks up to three times `max_results` stories (at most 300) and returns
    the title matches ordered by score.
    """
    ids = await resolver.list_top_ids()
    candidates = ids[:min(300, max_results * 3)]
    stories = await resolve_basic_info(resolver, candidates)

    needle = query.lower()
    matches = [s for s in stories if needle in s.title.lower()]
    matches.sort(key=lambda s: s.score, reverse=True)
    return matches[:max_results]
