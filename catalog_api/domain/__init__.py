"""Domain types and validation helpers (items, image names, errors)."""
