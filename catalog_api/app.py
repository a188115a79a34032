import logging
import time
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from catalog_api.core.config import Settings, get_settings
from catalog_api.core.logging import configure_logging
from catalog_api.db.create_tables import ensure_sqlite_dir, init_db
from catalog_api.db.session import get_engine
from catalog_api.repositories import (
    ImageStore,
    ItemRepository,
    SQLItemRepository,
    build_image_store,
    build_item_repository,
)
from catalog_api.routers import images as images_router
from catalog_api.routers import items as items_router
from catalog_api.services.item_service import ItemService

logger = logging.getLogger(__name__)

CORS_METHODS = ["GET", "HEAD", "POST", "OPTIONS"]


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log method, path, status and duration of every request."""

    def __init__(self, app, *, logger: logging.Logger) -> None:
        super().__init__(app)
        self._logger = logger

    async def dispatch(self, request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000
        self._logger.info(
            "%s %s -> %d (%.1f ms)",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
        )
        return response


def _prepare_storage(settings: Settings, repository: ItemRepository) -> None:
    # an injected repository without its own URL is expected to be initialized already
    if isinstance(repository, SQLItemRepository) and repository.database_url:
        ensure_sqlite_dir(repository.database_url)
        init_db(get_engine(repository.database_url), settings.schema_path)


def create_app(
    settings: Optional[Settings] = None,
    *,
    repository: Optional[ItemRepository] = None,
    image_store: Optional[ImageStore] = None,
) -> FastAPI:
    """Build the API. Backends are picked from settings unless injected."""
    settings = settings or get_settings()
    app_logger = configure_logging(settings.log_level)

    repository = repository or build_item_repository(settings)
    image_store = image_store or build_image_store(settings)
    _prepare_storage(settings, repository)
    image_store.root.mkdir(parents=True, exist_ok=True)

    app = FastAPI(title="Catalogue API")
    app.add_middleware(RequestLoggingMiddleware, logger=app_logger.getChild("http"))
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.front_url],
        allow_credentials=False,
        allow_methods=CORS_METHODS,
        allow_headers=["*"],
    )

    app.state.settings = settings
    app.state.item_service = ItemService(
        repository,
        image_store,
        logger=app_logger.getChild("items"),
        max_upload_bytes=settings.max_upload_bytes,
    )

    @app.get("/")
    def hello():
        return {"message": "Hello, world!"}

    app.include_router(items_router.router)
    app.include_router(images_router.router)

    logger.info(
        "app ready (backend=%s, images=%s, front_url=%s)",
        type(repository).__name__,
        image_store.root,
        settings.front_url,
    )
    return app
