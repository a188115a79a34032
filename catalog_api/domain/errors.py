"""Error taxonomy shared by repositories, services and routers."""
from __future__ import annotations


class CatalogError(Exception):
    """Base exception for the catalogue workflow."""


class ValidationError(CatalogError):
    """Raised when a request field is missing or malformed."""


class InvalidItemId(ValidationError):
    """Raised when an item id is not syntactically valid for the backend."""


class InvalidImageName(ValidationError):
    """Raised when an image name escapes the store root or has a bad suffix."""


class NotFound(CatalogError):
    """Raised when the requested entity does not exist."""


class ItemNotFound(NotFound):
    """Raised when no item matches the requested id."""


class ImageNotFound(NotFound):
    """Raised when a valid image name has no blob on disk."""


class StorageError(CatalogError):
    """Raised when persistence fails (I/O, database, malformed stored data)."""
