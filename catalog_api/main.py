"""Process entry point: ``catalog-api`` (or ``python -m catalog_api.main``)."""
from __future__ import annotations

import argparse
import logging
import sys

import uvicorn

from catalog_api.app import create_app
from catalog_api.core.config import get_settings


def main(argv: list[str] | None = None) -> int:
    settings = get_settings()
    ap = argparse.ArgumentParser(description="Run the catalogue API")
    ap.add_argument("--host", default="0.0.0.0", help="Interface to bind (default: 0.0.0.0)")
    ap.add_argument("--port", type=int, default=settings.port, help=f"Port (default: {settings.port})")
    args = ap.parse_args(argv)

    try:
        app = create_app(settings)
    except Exception:  # pragma: no cover - startup failures
        logging.getLogger("catalog_api").exception("failed to start server")
        return 1
    uvicorn.run(app, host=args.host, port=args.port, log_level=settings.log_level.lower())
    return 0


if __name__ == "__main__":
    sys.exit(main())
