import asyncio
from typing import Dict, Iterable, List, Optional

import pytest

from hn_threads.core.entities import Item
from hn_threads.ingestion.base import ItemResolver, ResolverError


class FakeResolver(ItemResolver):
    """In-memory item store with optional delays, failures and blocked ids."""

    def __init__(
        self,
        items: Dict[int, dict],
        errors: Iterable[int] = (),
        delays: Optional[Dict[int, float]] = None,
        blocked: Iterable[int] = (),
        top_ids: Optional[List[int]] = None,
    ):
        self.items = {item_id: Item(id=item_id, **data) for item_id, data in items.items()}
        self.errors = set(errors)
        self.delays = delays or {}
        self.blocked = set(blocked)
        self.top_ids = top_ids
        self.gate = asyncio.Event()
        self.calls: List[int] = []
        self.cancelled: List[int] = []

    async def resolve_item(self, item_id: int) -> Optional[Item]:
        self.calls.append(item_id)
        try:
            if item_id in self.blocked:
                await self.gate.wait()
            await asyncio.sleep(self.delays.get(item_id, 0))
        except asyncio.CancelledError:
            self.cancelled.append(item_id)
            raise

        if item_id in self.errors:
            raise ResolverError(f"boom {item_id}", item_id)
        return self.items.get(item_id)

    async def list_top_ids(self) -> List[int]:
        if self.top_ids is None:
            raise ResolverError("top stories unavailable")
        return list(self.top_ids)


@pytest.fixture
def make_resolver():
    return FakeResolver
