"""
Error types shared by the store, the query engine and the outer surfaces.

Every error is local to one operation and surfaced synchronously; nothing here
is retried. The API layer maps them to HTTP status codes:
- `NotFoundError` -> 404
- `ValidationFailure` -> 400
- `DuplicateTagNameError` -> 409
"""

from __future__ import annotations


class GeoPinError(Exception):
    """Base class for domain errors."""

    code = "GEOPIN_ERROR"


class NotFoundError(GeoPinError, LookupError):
    code = "NOT_FOUND"

    def __init__(self, kind: str, key: str):
        self.kind = kind
        self.key = key
        super().__init__(f"{kind} not found with id: {key}")


class ValidationFailure(GeoPinError, ValueError):
    code = "VALIDATION_ERROR"


class DuplicateTagNameError(GeoPinError):
    code = "DUPLICATE_TAG_NAME"

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Tag name already exists: '{name}'")


class CatalogError(GeoPinError):
    """A catalog file is missing, unreadable or not a list of valid POI entries."""

    code = "CATALOG_ERROR"
