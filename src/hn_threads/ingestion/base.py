"""
Base classes for item resolution
"""
from abc import ABC, abstractmethod
from typing import List, Optional

from hn_threads.core.entities import Item


class ResolverError(Exception):
    """
    Raised when an item or id list could not be fetched or understood.

    A clean "no such item" is not an error; resolvers return None for it.
    """

    def __init__(self, message: str, item_id: Optional[int] = None):
        super().__init__(message)
        self.item_id = item_id


class ItemResolver(ABC):
    """
    Base interface for anything that turns an id into an Item.

    Implementations must be safe to call concurrently and must not depend on
    call ordering.
    """

    @abstractmethod
    async def resolve_item(self, item_id: int) -> Optional[Item]:
        """
        Fetch a single item.
        Returns None when the item does not exist, raises ResolverError on
        transport or parse failures.
        """
        raise NotImplementedError

    @abstractmethod
    async def list_top_ids(self) -> List[int]:
        """
        Fetch the ordered list of current top story ids.
        """
        raise NotImplementedError

    async def list_new_ids(self) -> List[int]:
        """
        Fetch the ordered list of newest story ids.
        Falls back to the top stories where a store has no such listing.
        """
        return await self.list_top_ids()
