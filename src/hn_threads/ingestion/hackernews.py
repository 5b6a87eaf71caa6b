"""
Resolve items from the Hacker News Firebase API
"""
import asyncio
import logging
from typing import Any, List, Optional

import httpx
from pydantic import ValidationError

from hn_threads.core.entities import Item
from hn_threads.ingestion.base import ItemResolver, ResolverError

logger = logging.getLogger(__name__)


class HackerNewsResolver(ItemResolver):
    BASE_URL = "https://hacker-news.firebaseio.com/v0"

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: float = 30.0,
        max_concurrency: Optional[int] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = (base_url or self.BASE_URL).rstrip("/")
        self.timeout = timeout
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(timeout=timeout)
        # Unbounded unless configured
        self._limiter = asyncio.Semaphore(max_concurrency) if max_concurrency else None

    async def __aenter__(self) -> "HackerNewsResolver":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()

    async def _get_json(self, path: str, item_id: Optional[int] = None) -> Any:
        url = f"{self.base_url}/{path}"
        try:
            if self._limiter is None:
                resp = await self.client.get(url)
            else:
                async with self._limiter:
                    resp = await self.client.get(url)
        except httpx.HTTPError as e:
            raise ResolverError(f"Request to {url} failed: {e}", item_id) from e

        if resp.status_code == 404:
            return None

        try:
            resp.raise_for_status()
            return resp.json()
        except httpx.HTTPStatusError as e:
            raise ResolverError(
                f"Unexpected status {resp.status_code} from {url}", item_id
            ) from e
        except ValueError as e:
            raise ResolverError(f"Invalid JSON from {url}", item_id) from e

    async def resolve_item(self, item_id: int) -> Optional[Item]:
        data = await self._get_json(f"item/{item_id}.json", item_id)

        if data is None:
            logger.debug(f"Item {item_id} not found")
            return None

        try:
            return Item.model_validate(data)
        except ValidationError as e:
            raise ResolverError(f"Malformed item {item_id}: {e}", item_id) from e

    async def _list_ids(self, path: str) -> List[int]:
        data = await self._get_json(path)

        if not isinstance(data, list):
            raise ResolverError(f"Expected a list of ids from {path}")

        try:
            return [int(i) for i in data]
        except (TypeError, ValueError) as e:
            raise ResolverError(f"Non-integer id in {path}") from e

    async def list_top_ids(self) -> List[int]:
        return await self._list_ids("topstories.json")

    async def list_new_ids(self) -> List[int]:
        return await self._list_ids("newstories.json")
