"""
FastAPI routers grouped by resource (items, images).

Each module exposes an APIRouter included by ``catalog_api.app.create_app``.
"""
