from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import FileResponse

from catalog_api.domain.errors import ImageNotFound, InvalidImageName
from catalog_api.services.item_service import ItemService

router = APIRouter(prefix="/images", tags=["images"])
logger = logging.getLogger(__name__)


def _get_item_service(request: Request) -> ItemService:
    svc = getattr(getattr(request.app, "state", None), "item_service", None)
    if not svc:
        raise RuntimeError("ItemService not configured")
    return svc


@router.get("/{filename}")
def get_image(filename: str, request: Request):
    """Serve a stored image; unknown names fall back to the default image."""
    svc = _get_item_service(request)
    try:
        path = svc.image_path(filename)
    except InvalidImageName as exc:
        logger.warning("invalid image request: %s", exc)
        raise HTTPException(400, str(exc))
    except ImageNotFound as exc:
        logger.error("%s", exc)
        raise HTTPException(404, "image not found")
    logger.info("returned image %s", path)
    return FileResponse(path, media_type="image/jpeg")
