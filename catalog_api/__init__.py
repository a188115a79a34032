"""Catalogue API: items with a category and a content-addressed image."""

__version__ = "0.1.0"
