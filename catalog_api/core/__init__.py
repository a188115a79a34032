"""
Core utilities shared across the catalogue API.

This package hosts configuration helpers (env vars, paths, backend selection)
and cross-cutting services such as logging. Routers/services should depend on
these primitives instead of reading os.environ directly.
"""
