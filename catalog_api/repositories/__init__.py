"""
Persistence adapters.

Services depend on the ItemRepository interface; which backend sits behind it
(JSON document or SQL) is decided once, at construction time.
"""
from __future__ import annotations

from catalog_api.core.config import Settings
from .base import ItemRepository
from .image_store import ImageStore
from .json_storage import JSONItemRepository
from .sql_repository import SQLItemRepository

__all__ = [
    "ItemRepository",
    "ImageStore",
    "JSONItemRepository",
    "SQLItemRepository",
    "build_item_repository",
    "build_image_store",
]


def build_item_repository(settings: Settings) -> ItemRepository:
    if settings.storage_backend == "json":
        return JSONItemRepository(settings.items_file)
    if settings.storage_backend == "sql":
        return SQLItemRepository(settings.database_url)
    raise ValueError(f"unknown storage backend: {settings.storage_backend!r}")


def build_image_store(settings: Settings) -> ImageStore:
    return ImageStore(settings.images_dir, default_image=settings.default_image)
