"""Item use cases: add, list, look up, search, fetch image."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, Optional, TypeVar

from sqlalchemy.exc import SQLAlchemyError

from catalog_api.domain.errors import ImageNotFound, StorageError, ValidationError
from catalog_api.domain.items import Item, require_field
from catalog_api.repositories.base import ItemRepository
from catalog_api.repositories.image_store import ImageStore

T = TypeVar("T")

# raw failures the repositories and the image store let through
STORAGE_EXCEPTIONS = (OSError, ValueError, SQLAlchemyError)


def add_item_message(item: Item) -> str:
    return f"item received: name: {item.name},category: {item.category}"


class ItemService:
    """Coordinates the image store and the item repository."""

    def __init__(
        self,
        repository: ItemRepository,
        image_store: ImageStore,
        *,
        logger: Optional[logging.Logger] = None,
        max_upload_bytes: int = 10 << 20,
    ) -> None:
        self.repository = repository
        self.image_store = image_store
        self.logger = logger or logging.getLogger(__name__)
        self.max_upload_bytes = max_upload_bytes

    def _storage_call(self, operation: str, fn: Callable[[], T], **context: Any) -> T:
        try:
            return fn()
        except STORAGE_EXCEPTIONS as exc:
            self.logger.exception("%s failed (%s)", operation, _format_context(context))
            raise StorageError(f"{operation} failed") from exc

    def add_item(self, name: str | None, category: str | None, image: bytes | None) -> tuple[Item, str]:
        """Store the image, then the item. Returns the stored item and the response message."""
        clean_name = require_field(name, "name")
        clean_category = require_field(category, "category")
        if not image:
            raise ValidationError("image is required")
        if len(image) > self.max_upload_bytes:
            raise ValidationError(f"image exceeds {self.max_upload_bytes} bytes")

        filename = self._storage_call("store image", lambda: self.image_store.put(image), size=len(image))
        item = Item(name=clean_name, category=clean_category, image=filename)
        message = add_item_message(item)
        self.logger.info(message)
        stored = self._storage_call(
            "store item",
            lambda: self.repository.insert(item),
            name=clean_name,
            category=clean_category,
        )
        return stored, message

    def list_items(self) -> list[Item]:
        return self._storage_call("list items", self.repository.get_all_items)

    def get_item(self, item_id: Any) -> Item:
        # InvalidItemId / ItemNotFound pass through untouched
        return self._storage_call("get item", lambda: self.repository.get_item_by_id(item_id), item_id=item_id)

    def search_items(self, keyword: str | None) -> list[Item]:
        if not keyword:
            raise ValidationError("keyword is required")
        return self._storage_call(
            "search items",
            lambda: self.repository.search_items_by_keyword(keyword),
            keyword=keyword,
        )

    def image_path(self, filename: str) -> Path:
        """Path of the requested image, or of the default image when it is not stored.

        InvalidImageName propagates; ImageNotFound is raised only when the
        default image is missing too.
        """
        try:
            return self.image_store.resolve(filename)
        except ImageNotFound:
            self.logger.debug("image not found, serving default: %s", filename)
        default = self.image_store.default_image
        if not default.is_file():
            raise ImageNotFound(f"default image missing: {default}")
        return default


def _format_context(context: dict) -> str:
    return ", ".join(f"{key}={value!r}" for key, value in context.items())
