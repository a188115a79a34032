"""Logging setup for the ``catalog_api`` logger namespace."""

from __future__ import annotations

import logging
import sys

LOGGER_NAME = "catalog_api"
_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def configure_logging(level: str = "INFO") -> logging.Logger:
    """Attach a stream handler to the package logger (only once) and set its level."""
    logger = logging.getLogger(LOGGER_NAME)
    if not any(getattr(h, "_catalog_api", False) for h in logger.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(_FORMAT))
        handler._catalog_api = True  # type: ignore[attr-defined]
        logger.addHandler(handler)
        # records are printed by this handler only, not again by root or uvicorn handlers
        logger.propagate = False
    logger.setLevel(getattr(logging, (level or "INFO").upper(), logging.INFO))
    return logger
