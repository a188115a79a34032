"""
JSON document persistence adapter.

The whole collection lives in one JSON array and is rewritten on every insert.
Mutations are serialized by a lock per repository instance and the rewrite
goes through a temporary file plus ``os.replace``, so a failed write keeps the
previous snapshot. Separate processes sharing the file are not coordinated.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Any

from catalog_api.domain.errors import ItemNotFound
from catalog_api.domain.items import Item, parse_item_id
from .base import ItemRepository

logger = logging.getLogger(__name__)


def load(path: Path) -> list[dict]:
    """Read the raw entries. Missing or empty file means an empty collection."""
    try:
        with path.open("r", encoding="utf-8") as f:
            raw = f.read()
    except FileNotFoundError:
        return []
    if not raw.strip():
        return []
    data = json.loads(raw)
    # snapshots written as {"items": [...]} are still accepted
    if isinstance(data, dict):
        if not isinstance(data.get("items"), list):
            raise ValueError(f"{path}: JSON object without an \"items\" array")
        data = data["items"]
    if not isinstance(data, list):
        raise ValueError(f"{path}: expected a JSON array of items, got {type(data).__name__}")
    return data


def save(path: Path, entries: list[dict]) -> None:
    """Atomically replace the file with ``entries``."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=str(path.parent))
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(entries, f, ensure_ascii=False, indent=1)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except FileNotFoundError:
            pass
        raise


class JSONItemRepository(ItemRepository):
    """Items stored as a JSON array; ids are 1-based positions in the array."""

    def __init__(self, path: str | os.PathLike) -> None:
        self.path = Path(path)
        self._lock = threading.Lock()

    def _read(self) -> list[Item]:
        return [Item.from_mapping(entry, item_id=idx) for idx, entry in enumerate(load(self.path), start=1)]

    def insert(self, item: Item) -> Item:
        entry = {"name": item.name, "category": item.category, "image": item.image}
        with self._lock:
            entries = load(self.path)
            for existing in entries:
                Item.from_mapping(existing)
            entries.append(entry)
            save(self.path, entries)
            position = len(entries)
        logger.debug("item stored in %s at position %d", self.path, position)
        return item.with_id(position)

    def get_all_items(self) -> list[Item]:
        return self._read()

    def get_item_by_id(self, item_id: Any) -> Item:
        position = parse_item_id(item_id)
        items = self._read()
        if position > len(items):
            raise ItemNotFound(f"item {position} not found")
        return items[position - 1]

    def search_items_by_keyword(self, keyword: str) -> list[Item]:
        return [item for item in self._read() if keyword in item.name]
