"""Item record and field validation helpers."""
from __future__ import annotations

import re
from dataclasses import asdict, dataclass
from typing import Any, Mapping, Optional

from .errors import InvalidItemId, ValidationError

ITEM_ID_PATTERN = re.compile(r"[0-9]+")
# largest value an SQL INTEGER primary key can hold
MAX_ITEM_ID = 2**63 - 1
ITEM_FIELDS = ("name", "category", "image")


@dataclass(frozen=True)
class Item:
    """A catalogued entry. ``id`` is assigned by the backend that stores it."""

    name: str
    category: str
    image: str
    id: Optional[int] = None

    def to_dict(self) -> dict:
        return asdict(self)

    def with_id(self, item_id: int) -> "Item":
        return Item(name=self.name, category=self.category, image=self.image, id=item_id)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], item_id: Optional[int] = None) -> "Item":
        """Build an Item from a stored JSON object; missing keys fail loudly."""
        if not isinstance(data, Mapping):
            raise ValueError(f"item entry must be an object, got {type(data).__name__}")
        missing = [key for key in ITEM_FIELDS if key not in data]
        if missing:
            raise ValueError(f"item entry missing fields: {', '.join(missing)}")
        for key in ITEM_FIELDS:
            value = data[key]
            if not isinstance(value, str) or not value.strip():
                raise ValueError(f"item field {key!r} must be a non-empty string, got {value!r}")
        return cls(name=data["name"], category=data["category"], image=data["image"], id=item_id)


def require_field(value: str | None, field: str) -> str:
    """Return the stripped value or raise ValidationError when it is empty."""
    cleaned = (value or "").strip()
    if not cleaned:
        raise ValidationError(f"{field} is required")
    return cleaned


def parse_item_id(value: Any) -> int:
    """Parse a client-supplied id (``"3"`` or ``3``) into a positive integer."""
    if isinstance(value, int) and not isinstance(value, bool):
        item_id = value
    else:
        text = str(value if value is not None else "").strip()
        if not ITEM_ID_PATTERN.fullmatch(text) or len(text) > len(str(MAX_ITEM_ID)):
            raise InvalidItemId(f"invalid item id: {value!r}")
        item_id = int(text)
    if item_id < 1 or item_id > MAX_ITEM_ID:
        raise InvalidItemId(f"invalid item id: {value!r}")
    return item_id
