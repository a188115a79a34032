"""Item persistence backed by SQLAlchemy (items joined to categories)."""
from __future__ import annotations

import logging
from typing import Any, Callable, ContextManager, Optional

from sqlalchemy import exists, insert, literal, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session

from catalog_api.db.models import Category, Item as ItemModel
from catalog_api.db.session import get_session
from catalog_api.domain.errors import ItemNotFound
from catalog_api.domain.items import Item, parse_item_id
from .base import ItemRepository

logger = logging.getLogger(__name__)

SessionFactory = Callable[[], ContextManager[Session]]

# dialects with INSERT ... ON CONFLICT DO NOTHING
_UPSERT_INSERTS = {
    "sqlite": sqlite.insert,
    "postgresql": postgresql.insert,
}


def _category_insert_stmt(dialect_name: str, name: str):
    """Single statement inserting the category only when the name is new."""
    dialect_insert = _UPSERT_INSERTS.get(dialect_name)
    if dialect_insert is not None:
        return dialect_insert(Category).values(name=name).on_conflict_do_nothing(index_elements=["name"])
    return insert(Category).from_select(
        ["name"],
        select(literal(name)).where(~exists().where(Category.name == name)),
    )


def _to_item(row: ItemModel, category_name: str) -> Item:
    return Item(name=row.name, category=category_name, image=row.image_name, id=row.id)


class SQLItemRepository(ItemRepository):
    """Items in the ``items`` table, categories deduplicated in ``categories``."""

    def __init__(self, database_url: Optional[str] = None, session_factory: Optional[SessionFactory] = None) -> None:
        self.database_url = database_url
        self._session_factory = session_factory

    def _session(self) -> ContextManager[Session]:
        if self._session_factory is not None:
            return self._session_factory()
        return get_session(self.database_url)

    def _select_items(self):
        return select(ItemModel, Category.name).join(Category, ItemModel.category_id == Category.id)

    # -------------------------- categories --------------------------
    def get_or_create_category(self, session: Session, name: str) -> int:
        """Return the id for ``name``, inserting the category when it is missing.

        Runs inside the caller's transaction; the unique constraint on
        ``categories.name`` keeps concurrent first inserts from duplicating it.
        """
        dialect_name = session.get_bind().dialect.name
        session.execute(_category_insert_stmt(dialect_name, name))
        return session.execute(select(Category.id).where(Category.name == name)).scalar_one()

    # -------------------------- items --------------------------
    def insert(self, item: Item) -> Item:
        with self._session() as session:
            try:
                category_id = self.get_or_create_category(session, item.category)
                row = ItemModel(name=item.name, category_id=category_id, image_name=item.image)
                session.add(row)
                session.flush()
                session.commit()
            except Exception:
                session.rollback()
                raise
            logger.debug("item row %d stored (category_id=%d)", row.id, category_id)
            return item.with_id(row.id)

    def get_all_items(self) -> list[Item]:
        with self._session() as session:
            rows = session.execute(self._select_items().order_by(ItemModel.id)).all()
            return [_to_item(row, category_name) for row, category_name in rows]

    def get_item_by_id(self, item_id: Any) -> Item:
        row_id = parse_item_id(item_id)
        with self._session() as session:
            result = session.execute(self._select_items().where(ItemModel.id == row_id)).first()
            if result is None:
                raise ItemNotFound(f"item {row_id} not found")
            row, category_name = result
            return _to_item(row, category_name)

    def search_items_by_keyword(self, keyword: str) -> list[Item]:
        # LIKE is case-insensitive on SQLite, so it only narrows the rows;
        # the case-sensitive check happens below.
        stmt = (
            self._select_items()
            .where(ItemModel.name.contains(keyword, autoescape=True))
            .order_by(ItemModel.id)
        )
        with self._session() as session:
            rows = session.execute(stmt).all()
            return [_to_item(row, category_name) for row, category_name in rows if keyword in row.name]
