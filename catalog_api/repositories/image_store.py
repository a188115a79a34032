"""
Content-addressed image storage on the local filesystem.

A blob's filename is the SHA-256 of its bytes plus ``.jpg``: uploading the same
bytes twice resolves to the same file, which is written only once.
"""
from __future__ import annotations

import hashlib
import logging
import os
import tempfile
from pathlib import Path
from typing import Optional

from catalog_api.domain.errors import ImageNotFound, InvalidImageName

logger = logging.getLogger(__name__)

IMAGE_SUFFIX = ".jpg"
ALLOWED_SUFFIXES = (".jpg", ".jpeg")
DEFAULT_IMAGE_NAME = "default.jpg"


def image_filename(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest() + IMAGE_SUFFIX


class ImageStore:
    """Write-once blob store rooted at ``root``."""

    def __init__(self, root: str | os.PathLike, default_image: Optional[str | os.PathLike] = None) -> None:
        self.root = Path(root)
        self.default_image = Path(default_image) if default_image else self.root / DEFAULT_IMAGE_NAME

    def put(self, data: bytes) -> str:
        """Store ``data`` and return its filename.

        An existing blob is left untouched. The bytes go to a temporary file in
        the same directory which is renamed into place, so readers never see a
        partially written blob under the final name.
        """
        filename = image_filename(data)
        target = self.root / filename
        if target.exists():
            logger.debug("image %s already stored", filename)
            return filename
        self.root.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=".upload-", suffix=".tmp", dir=str(self.root))
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            # same content under the same name, so a concurrent rename is harmless
            os.replace(tmp_name, target)
        except BaseException:
            try:
                os.unlink(tmp_name)
            except FileNotFoundError:
                pass
            raise
        logger.info("image stored: %s (%d bytes)", filename, len(data))
        return filename

    def validate_name(self, filename: str) -> Path:
        """Join ``filename`` to the root without touching the filesystem.

        Raises InvalidImageName for names leaving the root or with a suffix
        other than .jpg/.jpeg.
        """
        name = (filename or "").strip()
        if not name:
            raise InvalidImageName("filename is required")
        if "\x00" in name or os.path.isabs(name) or name.startswith(("/", "\\")):
            raise InvalidImageName(f"invalid image path: {filename}")
        root = os.path.normpath(os.path.abspath(self.root))
        candidate = os.path.normpath(os.path.join(root, name.replace("\\", "/")))
        if os.path.commonpath([root, candidate]) != root or candidate == root:
            raise InvalidImageName(f"invalid image path: {filename}")
        if not candidate.lower().endswith(ALLOWED_SUFFIXES):
            raise InvalidImageName(f"image path does not end with .jpg or .jpeg: {filename}")
        return Path(candidate)

    def resolve(self, filename: str) -> Path:
        """Return the path of a stored image or raise ImageNotFound."""
        path = self.validate_name(filename)
        if not path.is_file():
            raise ImageNotFound(f"image not found: {filename}")
        return path
