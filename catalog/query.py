"""Compile queries and read records from a catalog database.

Query text is an SQL boolean expression over record keys, for example
``name = 'Foo' AND users >= 2``; the engine compiles it against the table's
schema. No query text means every record matches.
"""

from __future__ import annotations

import logging
import sqlite3
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, Optional

from core.db import connect

from .errors import CursorOpenError, CursorReadError, DatabaseOpenError, QueryCompileError
from .store import DEFAULT_TABLE, quote_identifier
from .values import GenericValue

LOGGER = logging.getLogger("contentcatalog.catalog")

# Python < 3.12 reports multi-statement input as sqlite3.Warning.
_ENGINE_ERRORS = (sqlite3.Error, sqlite3.Warning)


def open_database(db_path: str | Path) -> sqlite3.Connection:
    """Open *db_path* read-only, raising :class:`DatabaseOpenError` on failure."""

    try:
        conn = connect(db_path, read_only=True)
    except _ENGINE_ERRORS as exc:
        raise DatabaseOpenError(f"cannot open database {db_path}: {exc}") from exc
    try:
        conn.execute("PRAGMA schema_version").fetchone()
    except _ENGINE_ERRORS as exc:
        conn.close()
        raise DatabaseOpenError(f"cannot open database {db_path}: {exc}") from exc
    return conn


@dataclass(frozen=True, slots=True)
class CompiledQuery:
    sql: str
    table: str
    text: Optional[str] = None

    @property
    def match_all(self) -> bool:
        return self.text is None


def compile_query(conn: sqlite3.Connection, text: Optional[str], *, table: str = DEFAULT_TABLE) -> CompiledQuery:
    try:
        source = f"SELECT * FROM {quote_identifier(table)}"
    except ValueError as exc:
        raise QueryCompileError(str(exc)) from exc
    if text is None or not text.strip():
        return CompiledQuery(sql=source, table=table)
    sql = f"{source} WHERE (\n{text}\n)"
    try:
        conn.execute(f"EXPLAIN {sql}").close()
    except _ENGINE_ERRORS as exc:
        raise QueryCompileError(f"{exc} (query: {text})") from exc
    return CompiledQuery(sql=sql, table=table, text=text)


class RecordCursor:
    """Pull records one at a time from an executed query."""

    def __init__(self, cursor: sqlite3.Cursor, query: CompiledQuery) -> None:
        self._cursor: Optional[sqlite3.Cursor] = cursor
        self.query = query
        self.columns: List[str] = [str(item[0]) for item in (cursor.description or ())]

    @property
    def closed(self) -> bool:
        return self._cursor is None

    def next(self) -> Optional[GenericValue]:
        """Return the next record, or ``None`` at the end of the stream."""

        if self._cursor is None:
            return None
        try:
            row = self._cursor.fetchone()
        except _ENGINE_ERRORS as exc:
            raise CursorReadError(f"reading {self.query.table} failed: {exc}") from exc
        if row is None:
            return None
        return GenericValue.from_row(self.columns, row)

    def __iter__(self) -> Iterator[GenericValue]:
        while True:
            record = self.next()
            if record is None:
                return
            yield record

    def close(self) -> None:
        if self._cursor is None:
            return
        try:
            self._cursor.close()
        finally:
            self._cursor = None

    def __enter__(self) -> "RecordCursor":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def open_cursor(
    conn: sqlite3.Connection,
    query: Optional[CompiledQuery] = None,
    *,
    table: str = DEFAULT_TABLE,
) -> RecordCursor:
    if query is None:
        query = compile_query(conn, None, table=table)
    try:
        cursor = conn.execute(query.sql)
    except _ENGINE_ERRORS as exc:
        raise CursorOpenError(f"cannot open cursor on {query.table}: {exc}") from exc
    return RecordCursor(cursor, query)


def database_open_cursor(
    conn: sqlite3.Connection,
    text: Optional[str] = None,
    *,
    table: str = DEFAULT_TABLE,
) -> RecordCursor:
    """Compile *text* and open a cursor over its matches."""

    query = compile_query(conn, text, table=table)
    LOGGER.debug("Opening cursor: %s", query.sql)
    return open_cursor(conn, query, table=table)


__all__ = [
    "CompiledQuery",
    "RecordCursor",
    "compile_query",
    "database_open_cursor",
    "open_cursor",
    "open_database",
]
