"""Error hierarchy for catalog building."""
from __future__ import annotations


class CatalogError(RuntimeError):
    """Base exception for catalog related failures."""


class DatabaseOpenError(CatalogError):
    """Raised when the catalog database cannot be opened."""


class QueryCompileError(CatalogError):
    """Raised when the database engine rejects a query."""


class CursorOpenError(CatalogError):
    """Raised when a cursor cannot be opened over the database."""


class CursorReadError(CatalogError):
    """Raised when the database fails while records are being read."""


class CatalogAllocationError(CatalogError):
    """Raised when the catalog could not grow to hold another entry."""


__all__ = [
    "CatalogAllocationError",
    "CatalogError",
    "CursorOpenError",
    "CursorReadError",
    "DatabaseOpenError",
    "QueryCompileError",
]
