"""Create the database schema, from the SQL script or from the ORM metadata."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import SQLAlchemyError

from catalog_api.core.config import get_settings
from .session import Base, get_engine
from . import models  # noqa: F401  # ensure models are imported for metadata

logger = logging.getLogger(__name__)


def split_statements(script: str) -> list[str]:
    """Split a schema script into statements, dropping ``--`` comment lines."""
    lines = [line for line in script.splitlines() if not line.strip().startswith("--")]
    return [stmt.strip() for stmt in "\n".join(lines).split(";") if stmt.strip()]


def ensure_sqlite_dir(url: str) -> None:
    """SQLite will not create missing parent directories for a file database."""
    parsed = make_url(url)
    if parsed.get_backend_name() != "sqlite":
        return
    database = parsed.database or ""
    if database and database != ":memory:" and not database.startswith("file:"):
        Path(database).expanduser().parent.mkdir(parents=True, exist_ok=True)


def init_db(engine: Optional[Engine] = None, schema_path: Optional[str] = None) -> None:
    """Run the schema script once (statements are idempotent), or ``create_all`` without one."""
    engine = engine or get_engine()
    if not schema_path:
        Base.metadata.create_all(bind=engine)
        return
    script = Path(schema_path).read_text(encoding="utf-8")
    statements = split_statements(script)
    with engine.begin() as conn:
        for statement in statements:
            conn.exec_driver_sql(statement)
    logger.info("schema applied from %s (%d statements)", schema_path, len(statements))


def create_all() -> None:
    settings = get_settings()
    ensure_sqlite_dir(settings.database_url)
    init_db(get_engine(settings.database_url), settings.schema_path)


if __name__ == "__main__":
    try:
        create_all()
        print("Database tables created successfully.")
    except (SQLAlchemyError, OSError) as exc:
        raise SystemExit(f"Failed to create tables: {exc}") from exc
