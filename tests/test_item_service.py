from __future__ import annotations

import hashlib
import logging
import sys
from pathlib import Path

import pytest
from sqlalchemy.exc import OperationalError

# Garante que o pacote catalog_api seja importável durante os testes locais
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from catalog_api.domain.errors import (
    ImageNotFound,
    InvalidImageName,
    InvalidItemId,
    ItemNotFound,
    StorageError,
    ValidationError,
)
from catalog_api.domain.items import Item
from catalog_api.repositories.base import ItemRepository
from catalog_api.repositories.image_store import ImageStore
from catalog_api.repositories.json_storage import JSONItemRepository
from catalog_api.services.item_service import ItemService


class BrokenRepository(ItemRepository):
    """Every call fails the way a dead database would."""

    def _fail(self, *args, **kwargs):
        raise OperationalError("SELECT 1", {}, Exception("database is locked"))

    insert = get_all_items = get_item_by_id = search_items_by_keyword = _fail


@pytest.fixture()
def store(tmp_path):
    return ImageStore(tmp_path / "images")


@pytest.fixture()
def service(tmp_path, store):
    return ItemService(
        JSONItemRepository(tmp_path / "items.json"),
        store,
        logger=logging.getLogger("tests.items"),
        max_upload_bytes=64,
    )


def test_add_item_stores_image_then_item(service, store):
    item, message = service.add_item("iPhone", "phone", b"image-bytes")

    assert message == "item received: name: iPhone,category: phone"
    assert item == Item(
        name="iPhone",
        category="phone",
        image=hashlib.sha256(b"image-bytes").hexdigest() + ".jpg",
        id=1,
    )
    assert (store.root / item.image).read_bytes() == b"image-bytes"
    assert service.list_items() == [item]


@pytest.mark.parametrize(
    "name, category, image, field",
    [
        ("", "phone", b"x", "name"),
        ("   ", "phone", b"x", "name"),
        ("iPhone", None, b"x", "category"),
        ("iPhone", "phone", b"", "image"),
        ("iPhone", "phone", None, "image"),
    ],
)
def test_add_item_requires_every_field(service, store, name, category, image, field):
    with pytest.raises(ValidationError, match=field):
        service.add_item(name, category, image)
    assert service.list_items() == []
    assert not store.root.exists()


def test_add_item_rejects_oversized_upload(service):
    with pytest.raises(ValidationError):
        service.add_item("Big", "misc", b"x" * 65)


def test_storage_failures_are_wrapped_and_logged(tmp_path, store, caplog):
    svc = ItemService(BrokenRepository(), store, logger=logging.getLogger("tests.broken"))

    with caplog.at_level(logging.ERROR, logger="tests.broken"):
        with pytest.raises(StorageError) as excinfo:
            svc.add_item("iPhone", "phone", b"bytes")
    assert isinstance(excinfo.value.__cause__, OperationalError)
    assert any("store item failed" in r.getMessage() for r in caplog.records)

    for call in (svc.list_items, lambda: svc.get_item("1"), lambda: svc.search_items("x")):
        with pytest.raises(StorageError):
            call()


def test_malformed_document_becomes_storage_error(tmp_path, store):
    path = tmp_path / "items.json"
    path.write_text("[{]", encoding="utf-8")
    svc = ItemService(JSONItemRepository(path), store)
    with pytest.raises(StorageError):
        svc.list_items()


def test_image_write_failure_stores_no_item(service, store, monkeypatch):
    def boom(data):
        raise OSError("disk full")

    monkeypatch.setattr(store, "put", boom)
    with pytest.raises(StorageError):
        service.add_item("iPhone", "phone", b"bytes")
    assert service.list_items() == []


def test_lookup_errors_pass_through(service):
    service.add_item("iPhone", "phone", b"bytes")
    assert service.get_item("1").name == "iPhone"
    with pytest.raises(ItemNotFound):
        service.get_item("2")
    with pytest.raises(InvalidItemId):
        service.get_item("one")


def test_search_requires_keyword(service):
    with pytest.raises(ValidationError):
        service.search_items("")
    with pytest.raises(ValidationError):
        service.search_items(None)


def test_image_path_falls_back_to_default(service, store):
    store.root.mkdir(parents=True)
    store.default_image.write_bytes(b"default")
    name = store.put(b"real")

    assert service.image_path(name) == store.root / name
    assert service.image_path("f" * 64 + ".jpg") == store.default_image
    with pytest.raises(InvalidImageName):
        service.image_path("../default.jpg/../../x.jpg")


def test_image_path_without_default_is_not_found(service):
    with pytest.raises(ImageNotFound):
        service.image_path("missing.jpg")
