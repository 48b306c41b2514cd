"""Typed content catalogs read from a catalog database."""
from __future__ import annotations

from .builder import CatalogList, build_catalog, materialize, release_catalog
from .entry import CatalogEntry, TriState, project_record
from .errors import (
    CatalogAllocationError,
    CatalogError,
    CursorOpenError,
    CursorReadError,
    DatabaseOpenError,
    QueryCompileError,
)
from .query import CompiledQuery, RecordCursor, compile_query, database_open_cursor, open_cursor, open_database
from .values import GenericValue, ValueKind

__all__ = [
    "CatalogAllocationError",
    "CatalogEntry",
    "CatalogError",
    "CatalogList",
    "CompiledQuery",
    "CursorOpenError",
    "CursorReadError",
    "DatabaseOpenError",
    "GenericValue",
    "QueryCompileError",
    "RecordCursor",
    "TriState",
    "ValueKind",
    "build_catalog",
    "compile_query",
    "database_open_cursor",
    "materialize",
    "open_cursor",
    "open_database",
    "project_record",
    "release_catalog",
]
