"""
Crawl a whole discussion tree concurrently and stream the items as they arrive
"""
import asyncio
import logging
from typing import List, Optional

from hn_threads.core.entities import Item
from hn_threads.ingestion.base import ItemResolver

logger = logging.getLogger(__name__)


class CrawlError(Exception):
    """
    Terminal failure of a crawl, raised to the consumer of the stream.
    """

    def __init__(self, root_id: int, cause: BaseException):
        super().__init__(f"Crawl of item {root_id} failed: {cause}")
        self.root_id = root_id
        self.cause = cause


_COMPLETE = object()


class _Failed:
    def __init__(self, error: BaseException):
        self.error = error


class CrawlStream:
    """
    Single-use async iterator over the items of one crawl.

    Many branches write to the queue, one consumer reads it. The stream ends
    after the completion marker, or raises CrawlError after every item queued
    before the failure has been delivered. Closing the stream cancels the
    background crawl.
    """

    def __init__(self, root_id: int, queue: asyncio.Queue, task: asyncio.Task):
        self.root_id = root_id
        self._queue = queue
        self._task = task
        self._closed = False
        self.received = 0

    def __aiter__(self) -> "CrawlStream":
        return self

    async def __anext__(self) -> Item:
        if self._closed:
            raise StopAsyncIteration

        entry = await self._queue.get()

        if entry is _COMPLETE:
            self._closed = True
            raise StopAsyncIteration

        if isinstance(entry, _Failed):
            self._closed = True
            raise CrawlError(self.root_id, entry.error) from entry.error

        self.received += 1
        return entry

    async def __aenter__(self) -> "CrawlStream":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Stop consuming and cancel every in-flight branch."""
        self._closed = True
        if not self._task.done():
            logger.debug(f"Cancelling crawl of {self.root_id} after {self.received} items")
            self._task.cancel()
        await asyncio.gather(self._task, return_exceptions=True)

    @property
    def done(self) -> bool:
        return self._task.done()


class TreeCrawler:
    """
    Recursive fan-out over the `kids` relation.

    Siblings are resolved one after another, but each child's own subtree is
    spawned as a task as soon as the child is known, so subtrees run
    concurrently with the remaining siblings.
    """

    def __init__(self, resolver: ItemResolver):
        self.resolver = resolver

    def crawl(self, root_id: int) -> CrawlStream:
        """
        Start crawling `root_id` in the background and return the stream.
        Must be called from a running event loop.
        """
        loop = asyncio.get_running_loop()
        queue: asyncio.Queue = asyncio.Queue()
        task = loop.create_task(self._crawl(root_id, queue))
        return CrawlStream(root_id, queue, task)

    async def collect(self, root_id: int) -> List[Item]:
        """Crawl `root_id` and return every item as a list."""
        async with self.crawl(root_id) as stream:
            return [item async for item in stream]

    async def _crawl(self, root_id: int, queue: asyncio.Queue) -> None:
        try:
            root: Optional[Item] = await self.resolver.resolve_item(root_id)
            if root is None:
                logger.info(f"Root item {root_id} not found")
            else:
                queue.put_nowait(root.with_root(root_id))
                await self._descend(root, root_id, queue)
        except Exception as e:
            logger.error(f"Crawl of {root_id} failed: {e}")
            queue.put_nowait(_Failed(e))
            return
        except asyncio.CancelledError as e:
            # A consumer still waiting on the queue must not hang
            queue.put_nowait(_Failed(e))
            raise

        queue.put_nowait(_COMPLETE)
        logger.debug(f"Crawl of {root_id} completed")

    async def _descend(self, item: Item, root_id: int, queue: asyncio.Queue) -> None:
        branches: List[asyncio.Task] = []

        try:
            for kid_id in item.kids:
                child = await self.resolver.resolve_item(kid_id)
                if child is None:
                    continue

                queue.put_nowait(child.with_root(root_id))

                if child.kids:
                    branches.append(
                        asyncio.create_task(self._descend(child, root_id, queue))
                    )

            await asyncio.gather(*branches)

        except BaseException:
            # First failure or cancellation takes the whole subtree down
            for branch in branches:
                branch.cancel()
            await asyncio.gather(*branches, return_exceptions=True)
            raise
