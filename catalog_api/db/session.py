"""Engine/session helpers for the SQL backend."""
from __future__ import annotations

from contextlib import contextmanager
from functools import lru_cache
from typing import Iterator, Optional

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session

from catalog_api.core.config import get_settings

Base = declarative_base()


def _resolve_url(url: Optional[str]) -> str:
    value = (url if url is not None else get_settings().database_url) or ""
    value = value.strip()
    if not value:
        raise RuntimeError("DATABASE_URL must be configured to use the SQL backend.")
    return value


@lru_cache
def get_engine(url: Optional[str] = None):
    """Return the (cached) engine for ``url``, defaulting to DATABASE_URL."""
    return create_engine(_resolve_url(url), future=True, pool_pre_ping=True)


@lru_cache
def _get_sessionmaker(url: Optional[str] = None):
    return sessionmaker(
        bind=get_engine(url),
        autoflush=False,
        autocommit=False,
        expire_on_commit=False,
        future=True,
    )


@contextmanager
def get_session(url: Optional[str] = None) -> Iterator[Session]:
    session: Session = _get_sessionmaker(url)()
    try:
        yield session
    finally:
        session.close()
