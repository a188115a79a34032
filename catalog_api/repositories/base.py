"""
Storage contract shared by the item backends.

Identifiers are backend-specific: the JSON document uses the 1-based position
of the item in the current snapshot, the SQL backend uses the row id. An id
obtained from one backend means nothing to the other.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from catalog_api.domain.items import Item


class ItemRepository(ABC):
    """Persist and query items."""

    @abstractmethod
    def insert(self, item: Item) -> Item:
        """Persist ``item`` and return it with the identifier the backend assigned.

        Either the item is fully stored or it is not visible at all afterwards.
        """

    @abstractmethod
    def get_all_items(self) -> list[Item]:
        """Return every item; an empty list when nothing was stored yet."""

    @abstractmethod
    def get_item_by_id(self, item_id: Any) -> Item:
        """Return the item for ``item_id``.

        Raises ``InvalidItemId`` when the id is malformed and ``ItemNotFound``
        when no item has it.
        """

    @abstractmethod
    def search_items_by_keyword(self, keyword: str) -> list[Item]:
        """Return items whose name contains ``keyword`` (case-sensitive)."""
