"""
Configuration helpers for the catalogue backend.

Settings are read once from the environment (front-end origin, storage
backend, paths, upload limits) so routers/services never touch os.environ.
"""

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
import os

DEFAULT_SCHEMA_PATH = Path(__file__).resolve().parents[1] / "db" / "items.sql"
STORAGE_BACKENDS = ("sql", "json")


@dataclass(frozen=True)
class Settings:
    """Typed view of environment variables."""

    app_env: str
    front_url: str
    port: int
    storage_backend: str
    database_url: str
    schema_path: str
    items_file: str
    images_dir: str
    default_image: str
    max_upload_bytes: int
    log_level: str


@lru_cache
def get_settings() -> Settings:
    """Read the current environment and build a Settings instance."""
    def _int(value: str, default: int = 0) -> int:
        try:
            return int(value)
        except (TypeError, ValueError):
            return default

    images_dir = os.getenv("IMAGES_DIR", "images")
    backend = (os.getenv("STORAGE_BACKEND") or "sql").strip().lower()
    if backend not in STORAGE_BACKENDS:
        raise ValueError(f"STORAGE_BACKEND must be one of {STORAGE_BACKENDS}, got {backend!r}")

    return Settings(
        app_env=(os.getenv("APP_ENV") or "dev").lower(),
        front_url=os.getenv("FRONT_URL", "http://localhost:3000").rstrip("/"),
        port=_int(os.getenv("PORT", "9000"), 9000),
        storage_backend=backend,
        database_url=os.getenv("DATABASE_URL", "sqlite:///db/mercari.sqlite3"),
        schema_path=os.getenv("SCHEMA_PATH", str(DEFAULT_SCHEMA_PATH)),
        items_file=os.getenv("ITEMS_FILE", "items.json"),
        images_dir=images_dir,
        default_image=os.getenv("DEFAULT_IMAGE") or os.path.join(images_dir, "default.jpg"),
        max_upload_bytes=_int(os.getenv("MAX_UPLOAD_BYTES", str(10 << 20)), 10 << 20),
        log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
    )
