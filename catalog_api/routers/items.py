from __future__ import annotations

import logging

from fastapi import APIRouter, File, Form, HTTPException, Request, UploadFile

from catalog_api.domain.errors import NotFound, StorageError, ValidationError
from catalog_api.services.item_service import ItemService

router = APIRouter(tags=["items"])
logger = logging.getLogger(__name__)

INTERNAL_ERROR = "internal server error"


def _get_item_service(request: Request) -> ItemService:
    svc = getattr(getattr(request.app, "state", None), "item_service", None)
    if not svc:
        raise RuntimeError("ItemService not configured")
    return svc


def _items_payload(items) -> dict:
    return {"items": [item.to_dict() for item in items]}


@router.post("/items")
def add_item(
    request: Request,
    name: str = Form(""),
    category: str = Form(""),
    image: UploadFile | None = File(None),
):
    svc = _get_item_service(request)
    # one byte past the limit is enough for add_item to reject the upload
    data = image.file.read(svc.max_upload_bytes + 1) if image is not None else b""
    try:
        _, message = svc.add_item(name, category, data)
    except ValidationError as exc:
        logger.warning("invalid add item request: %s", exc)
        raise HTTPException(400, str(exc))
    except StorageError:
        raise HTTPException(500, INTERNAL_ERROR)
    return {"message": message}


@router.get("/items")
def list_items(request: Request):
    svc = _get_item_service(request)
    try:
        items = svc.list_items()
    except StorageError:
        raise HTTPException(500, INTERNAL_ERROR)
    return _items_payload(items)


@router.get("/items/{item_id}")
def get_item(item_id: str, request: Request):
    svc = _get_item_service(request)
    try:
        item = svc.get_item(item_id)
    except ValidationError as exc:
        logger.warning("invalid get item request: %s", exc)
        raise HTTPException(400, str(exc))
    except NotFound as exc:
        raise HTTPException(404, str(exc))
    except StorageError:
        raise HTTPException(500, INTERNAL_ERROR)
    return _items_payload([item])


@router.get("/search")
def search_items(request: Request, keyword: str = ""):
    svc = _get_item_service(request)
    try:
        items = svc.search_items(keyword)
    except ValidationError as exc:
        raise HTTPException(400, str(exc))
    except StorageError:
        raise HTTPException(500, INTERNAL_ERROR)
    return _items_payload(items)
