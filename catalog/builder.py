"""Build typed catalogs from a database query."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Optional

from .entry import CatalogEntry, project_record
from .errors import CatalogAllocationError
from .query import database_open_cursor, open_database
from .store import DEFAULT_TABLE
from .values import GenericValue

LOGGER = logging.getLogger("contentcatalog.catalog")


class CatalogList:
    """Owned sequence of catalog entries.

    ``count`` always matches the number of entries held. Releasing the list
    drops every entry and leaves an empty list behind, so releasing an empty
    or partially built list is harmless.
    """

    def __init__(self, entries: Optional[List[CatalogEntry]] = None) -> None:
        self.entries: List[CatalogEntry] = list(entries or [])

    @property
    def count(self) -> int:
        return len(self.entries)

    def append(self, entry: CatalogEntry) -> None:
        self.entries.append(entry)

    def release(self) -> None:
        for entry in self.entries:
            entry.release()
        self.entries.clear()

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[CatalogEntry]:
        return iter(self.entries)

    def __getitem__(self, index: int) -> CatalogEntry:
        return self.entries[index]

    def __enter__(self) -> "CatalogList":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()


def release_catalog(catalog: Optional[CatalogList]) -> None:
    if catalog is None:
        return
    catalog.release()


def _resolve_table(table: Optional[str], settings: Optional[Dict[str, Any]]) -> str:
    if table:
        return table
    block = (settings or {}).get("database")
    if isinstance(block, dict) and block.get("table"):
        return str(block["table"])
    return DEFAULT_TABLE


def materialize(cursor: Iterable[GenericValue]) -> CatalogList:
    """Drain *cursor* into a new :class:`CatalogList`.

    Records that are not maps are skipped. If the list cannot grow, what was
    built so far is released and :class:`CatalogAllocationError` is raised.
    """

    catalog = CatalogList()
    try:
        for record in cursor:
            entry = project_record(record)
            if entry is None:
                continue
            catalog.append(entry)
    except MemoryError as exc:
        built = catalog.count
        catalog.release()
        raise CatalogAllocationError(f"out of memory after {built} entries") from exc
    except Exception:
        catalog.release()
        raise
    return catalog


def build_catalog(
    db_path: str | Path,
    query: Optional[str] = None,
    *,
    table: Optional[str] = None,
    settings: Optional[Dict[str, Any]] = None,
) -> CatalogList:
    """Open *db_path*, run *query* and return the matching entries.

    Raises a :class:`~catalog.errors.CatalogError` subclass when the database,
    the query or the cursor cannot be opened. The cursor and the database are
    closed before returning in every case.
    """

    table_name = _resolve_table(table, settings)
    conn = open_database(db_path)
    try:
        with database_open_cursor(conn, query, table=table_name) as cursor:
            catalog = materialize(cursor)
    finally:
        conn.close()
    LOGGER.info("Built catalog from %s (%s): %d entries", db_path, query or "*", catalog.count)
    return catalog


__all__ = ["CatalogList", "build_catalog", "materialize", "release_catalog"]
