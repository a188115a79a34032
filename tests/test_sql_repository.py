"""
Tests for the SQLItemRepository against a temporary SQLite database.
"""
from __future__ import annotations

import sys
import threading
from pathlib import Path

import pytest
from sqlalchemy import func, inspect, select
from sqlalchemy.exc import SQLAlchemyError

# Garante que o pacote catalog_api seja importável durante os testes locais
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from catalog_api.core import config as core_config
from catalog_api.db import create_tables
from catalog_api.db import models
from catalog_api.db import session as db_session
from catalog_api.domain.errors import InvalidItemId, ItemNotFound
from catalog_api.domain.items import Item
from catalog_api.repositories.sql_repository import SQLItemRepository


@pytest.fixture()
def temp_db(tmp_path, monkeypatch):
    """Configura um SQLite temporário e garante teardown completo para não deixar o arquivo bloqueado no Windows."""
    db_file = tmp_path / "test.db"
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{db_file}")
    # limpa caches para forçar re-leitura de envs
    core_config.get_settings.cache_clear()
    db_session.get_engine.cache_clear()
    db_session._get_sessionmaker.cache_clear()  # type: ignore[attr-defined]

    engine = db_session.get_engine()
    models.Base.metadata.drop_all(bind=engine)
    models.Base.metadata.create_all(bind=engine)

    yield db_file

    try:
        models.Base.metadata.drop_all(bind=engine)
    except SQLAlchemyError:
        pass
    engine.dispose()
    core_config.get_settings.cache_clear()
    db_session.get_engine.cache_clear()
    db_session._get_sessionmaker.cache_clear()  # type: ignore[attr-defined]


def _category_count() -> int:
    with db_session.get_session() as session:
        return session.execute(select(func.count()).select_from(models.Category)).scalar_one()


def test_insert_then_list_returns_item(temp_db):
    repo = SQLItemRepository()
    stored = repo.insert(Item(name="iPhone", category="phone", image="abc.jpg"))

    assert stored.id == 1
    items = repo.get_all_items()
    assert [(i.name, i.category, i.image) for i in items] == [("iPhone", "phone", "abc.jpg")]
    assert items[0].id == stored.id


def test_empty_database_lists_nothing(temp_db):
    assert SQLItemRepository().get_all_items() == []


def test_category_is_created_once_and_reused(temp_db):
    repo = SQLItemRepository()
    first = repo.insert(Item(name="iPhone", category="phone", image="a.jpg"))
    second = repo.insert(Item(name="Pixel", category="phone", image="b.jpg"))
    repo.insert(Item(name="Desk", category="furniture", image="c.jpg"))

    assert second.id > first.id
    assert _category_count() == 2
    with db_session.get_session() as session:
        category_ids = session.execute(
            select(models.Item.category_id).where(models.Item.name.in_(["iPhone", "Pixel"]))
        ).scalars().all()
    assert len(set(category_ids)) == 1


def test_get_item_by_id(temp_db):
    repo = SQLItemRepository()
    repo.insert(Item(name="iPhone", category="phone", image="a.jpg"))
    desk = repo.insert(Item(name="Desk", category="furniture", image="b.jpg"))

    found = repo.get_item_by_id(str(desk.id))
    assert found == Item(name="Desk", category="furniture", image="b.jpg", id=desk.id)

    with pytest.raises(ItemNotFound):
        repo.get_item_by_id("99")
    with pytest.raises(InvalidItemId):
        repo.get_item_by_id("abc")
    with pytest.raises(InvalidItemId):
        repo.get_item_by_id("0")
    # larger than an INTEGER column can hold
    with pytest.raises(InvalidItemId):
        repo.get_item_by_id("9" * 30)
    with pytest.raises(InvalidItemId):
        repo.get_item_by_id(str(2**63))
    with pytest.raises(ItemNotFound):
        repo.get_item_by_id(str(2**63 - 1))


def test_search_is_case_sensitive_substring(temp_db):
    repo = SQLItemRepository()
    for name in ("Phone", "Drone", "Tablet"):
        repo.insert(Item(name=name, category="gadget", image=f"{name}.jpg"))

    assert {i.name for i in repo.search_items_by_keyword("one")} == {"Phone", "Drone"}
    assert [i.name for i in repo.search_items_by_keyword("Ph")] == ["Phone"]
    # LIKE would match "Phone" on SQLite here
    assert repo.search_items_by_keyword("PHONE") == []


def test_search_treats_wildcards_literally(temp_db):
    repo = SQLItemRepository()
    repo.insert(Item(name="50% off", category="deal", image="a.jpg"))
    repo.insert(Item(name="500 pieces", category="deal", image="b.jpg"))

    assert [i.name for i in repo.search_items_by_keyword("0%")] == ["50% off"]
    assert repo.search_items_by_keyword("_") == []


def test_failed_insert_leaves_no_item_and_no_category(temp_db):
    repo = SQLItemRepository()
    with pytest.raises(SQLAlchemyError):
        # image_name is NOT NULL
        repo.insert(Item(name="broken", category="new-category", image=None))  # type: ignore[arg-type]

    assert repo.get_all_items() == []
    assert _category_count() == 0


def test_init_db_runs_schema_script(tmp_path):
    url = f"sqlite:///{tmp_path / 'nested' / 'schema.db'}"
    create_tables.ensure_sqlite_dir(url)
    engine = db_session.get_engine(url)
    try:
        create_tables.init_db(engine, str(core_config.DEFAULT_SCHEMA_PATH))
        # running it twice is harmless
        create_tables.init_db(engine, str(core_config.DEFAULT_SCHEMA_PATH))
        assert set(inspect(engine).get_table_names()) >= {"items", "categories"}

        repo = SQLItemRepository(url)
        repo.insert(Item(name="iPhone", category="phone", image="a.jpg"))
        assert [i.name for i in repo.get_all_items()] == ["iPhone"]
    finally:
        engine.dispose()
        db_session.get_engine.cache_clear()
        db_session._get_sessionmaker.cache_clear()  # type: ignore[attr-defined]


def test_split_statements_ignores_comments():
    script = "-- header\nCREATE TABLE a (id INTEGER);\n\n-- other\nCREATE TABLE b (id INTEGER);\n"
    assert create_tables.split_statements(script) == [
        "CREATE TABLE a (id INTEGER)",
        "CREATE TABLE b (id INTEGER)",
    ]


def test_concurrent_first_inserts_share_one_category(temp_db):
    repo = SQLItemRepository()
    workers, per_worker = 6, 5
    barrier = threading.Barrier(workers)
    errors: list[Exception] = []

    def work(n: int) -> None:
        barrier.wait()
        try:
            for i in range(per_worker):
                repo.insert(Item(name=f"item-{n}-{i}", category="brand-new", image=f"{n}-{i}.jpg"))
        except Exception as exc:  # surfaced by the assertion below
            errors.append(exc)

    threads = [threading.Thread(target=work, args=(n,)) for n in range(workers)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert errors == []
    assert _category_count() == 1
    items = repo.get_all_items()
    assert len(items) == workers * per_worker
    assert {i.category for i in items} == {"brand-new"}
