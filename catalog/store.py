"""Persistence helpers for catalog databases."""
from __future__ import annotations

import logging
import re
import sqlite3
from typing import Any, Dict, List, Mapping

from core.db import transaction

LOGGER = logging.getLogger("contentcatalog.catalog.store")

DEFAULT_TABLE = "content"

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

_CONTENT_COLUMNS: Dict[str, str] = {
    "name": "TEXT",
    "description": "TEXT",
    "publisher": "TEXT",
    "developer": "TEXT",
    "origin": "TEXT",
    "franchise": "TEXT",
    "bbfc_rating": "TEXT",
    "elspa_rating": "TEXT",
    "esrb_rating": "TEXT",
    "pegi_rating": "TEXT",
    "cero_rating": "TEXT",
    "enhancement_hw": "TEXT",
    "edge_review": "TEXT",
    "edge_rating": "INTEGER",
    "edge_issue": "INTEGER",
    "famitsu_rating": "INTEGER",
    "users": "INTEGER",
    "releasemonth": "INTEGER",
    "releaseyear": "INTEGER",
    "rumble": "INTEGER",
    "analog": "INTEGER",
    "serial": "TEXT",
    "rom_name": "TEXT",
    "size": "INTEGER",
    "crc": "BLOB",
    "sha1": "BLOB",
    "md5": "BLOB",
}


def quote_identifier(name: str) -> str:
    if not _IDENTIFIER.match(name or ""):
        raise ValueError(f"invalid table name: {name!r}")
    return f'"{name}"'


def ensure_tables(conn: sqlite3.Connection, table: str = DEFAULT_TABLE) -> None:
    columns = ",\n    ".join(f"{column} {kind}" for column, kind in _CONTENT_COLUMNS.items())
    conn.executescript(f"CREATE TABLE IF NOT EXISTS {quote_identifier(table)} (\n    {columns}\n);")
    conn.commit()


def table_columns(conn: sqlite3.Connection, table: str = DEFAULT_TABLE) -> List[str]:
    rows = conn.execute(f"PRAGMA table_info({quote_identifier(table)})").fetchall()
    return [str(row[1]) for row in rows]


class ContentStore:
    """Batched writer for content records.

    Records are plain mappings keyed by column name; keys the table does not
    know are dropped with a debug log.
    """

    def __init__(self, conn: sqlite3.Connection, *, table: str = DEFAULT_TABLE, batch_size: int = 256) -> None:
        self._conn = conn
        self._table = table
        self._quoted = quote_identifier(table)
        self._batch: List[Mapping[str, Any]] = []
        self._batch_size = max(1, int(batch_size))
        self._columns = set(table_columns(conn, table))
        self.written = 0

    def add(self, record: Mapping[str, Any]) -> None:
        self._batch.append(record)
        if len(self._batch) >= self._batch_size:
            self.flush()

    def flush(self) -> None:
        if not self._batch:
            return
        with transaction(self._conn):
            cur = self._conn.cursor()
            for record in self._batch:
                known = {key: value for key, value in record.items() if key in self._columns}
                dropped = set(record) - set(known)
                if dropped:
                    LOGGER.debug("Dropping unknown columns %s for %s", sorted(dropped), self._table)
                if not known:
                    continue
                names = ", ".join(known)
                marks = ", ".join("?" for _ in known)
                cur.execute(
                    f"INSERT INTO {self._quoted}({names}) VALUES({marks})",
                    tuple(known.values()),
                )
                self.written += 1
        self._batch.clear()


__all__ = ["DEFAULT_TABLE", "ContentStore", "ensure_tables", "quote_identifier", "table_columns"]
