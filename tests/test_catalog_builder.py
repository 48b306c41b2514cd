import sqlite3
from pathlib import Path

import pytest

import catalog.builder as builder_module
from catalog import (
    CatalogAllocationError,
    CatalogList,
    CursorOpenError,
    DatabaseOpenError,
    GenericValue,
    QueryCompileError,
    TriState,
    build_catalog,
    compile_query,
    materialize,
    open_cursor,
    open_database,
    release_catalog,
)
from catalog.entry import CatalogEntry
from catalog.store import ContentStore, ensure_tables
from core.db import connect

RECORDS = [
    {"name": "Foo", "users": 2, "rumble": 1, "crc": bytes.fromhex("deadbeef"), "releaseyear": 1991},
    {"name": "Bar", "users": 1, "analog": 0, "md5": bytes.fromhex("00ff"), "serial": "SNS-BR"},
    {"name": "Baz", "publisher": "Acme", "releaseyear": 1995},
]


def _make_db(path: Path, records=RECORDS, *, table: str = "content") -> Path:
    conn = connect(path)
    try:
        ensure_tables(conn, table)
        store = ContentStore(conn, table=table, batch_size=2)
        for record in records:
            store.add(record)
        store.flush()
        assert store.written == len(records)
    finally:
        conn.close()
    return path


def _tracking_open(monkeypatch):
    opened = []
    real = builder_module.open_database

    def _open(path):
        conn = real(path)
        opened.append(conn)
        return conn

    monkeypatch.setattr(builder_module, "open_database", _open)
    return opened


def test_build_catalog_materializes_all_records(tmp_path: Path) -> None:
    db_path = _make_db(tmp_path / "catalog.db")

    catalog = build_catalog(db_path)

    assert catalog.count == 3
    assert [entry.name for entry in catalog] == ["Foo", "Bar", "Baz"]
    foo = catalog[0]
    assert foo.max_users == 2
    assert foo.rumble_supported is TriState.SUPPORTED
    assert foo.crc32 == "DEADBEEF"
    assert foo.releaseyear == 1991
    bar = catalog[1]
    assert bar.analog_supported is TriState.UNSUPPORTED
    assert bar.md5 == "00FF"
    assert bar.crc32 is None
    assert catalog[2].publisher == "Acme"
    assert catalog[2].max_users == 0


def test_query_filters_records(tmp_path: Path) -> None:
    db_path = _make_db(tmp_path / "catalog.db")

    catalog = build_catalog(db_path, "releaseyear >= 1991 AND name <> 'Baz'")

    assert [entry.name for entry in catalog] == ["Foo"]


def test_zero_matches_is_an_empty_catalog(tmp_path: Path) -> None:
    db_path = _make_db(tmp_path / "catalog.db")

    catalog = build_catalog(db_path, "name = 'Nothing'")

    assert isinstance(catalog, CatalogList)
    assert catalog.count == 0
    assert catalog.entries == []


def test_compile_failure_closes_database(tmp_path: Path, monkeypatch) -> None:
    db_path = _make_db(tmp_path / "catalog.db")
    opened = _tracking_open(monkeypatch)

    with pytest.raises(QueryCompileError):
        build_catalog(db_path, "name = = 'Foo'")

    assert len(opened) == 1
    with pytest.raises(sqlite3.ProgrammingError):
        opened[0].execute("SELECT 1")


def test_unknown_column_in_query_is_a_compile_error(tmp_path: Path) -> None:
    db_path = _make_db(tmp_path / "catalog.db")

    with pytest.raises(QueryCompileError):
        build_catalog(db_path, "no_such_column = 1")


def test_multiple_statements_are_rejected(tmp_path: Path) -> None:
    db_path = _make_db(tmp_path / "catalog.db")

    with pytest.raises(QueryCompileError):
        build_catalog(db_path, "1); DELETE FROM content; SELECT (1")

    assert build_catalog(db_path).count == 3


def test_missing_database_fails_to_open(tmp_path: Path) -> None:
    with pytest.raises(DatabaseOpenError):
        build_catalog(tmp_path / "absent.db")


def test_non_database_file_fails_to_open(tmp_path: Path) -> None:
    bogus = tmp_path / "bogus.db"
    bogus.write_bytes(b"this is not a sqlite database" * 10)

    with pytest.raises(DatabaseOpenError):
        open_database(bogus)


def test_missing_table_fails_cursor_open(tmp_path: Path, monkeypatch) -> None:
    db_path = _make_db(tmp_path / "catalog.db", table="games")
    opened = _tracking_open(monkeypatch)

    with pytest.raises(CursorOpenError):
        build_catalog(db_path)
    with pytest.raises(QueryCompileError):
        build_catalog(db_path, "users = 2")

    for conn in opened:
        with pytest.raises(sqlite3.ProgrammingError):
            conn.execute("SELECT 1")


def test_table_comes_from_settings(tmp_path: Path) -> None:
    db_path = _make_db(tmp_path / "catalog.db", table="games")

    catalog = build_catalog(db_path, settings={"database": {"table": "games"}})

    assert catalog.count == 3


def test_allocation_failure_releases_partial_catalog(tmp_path: Path, monkeypatch) -> None:
    db_path = _make_db(tmp_path / "catalog.db")
    appended = []
    released = []
    real_release = CatalogList.release

    def _append(self, entry):
        if len(appended) == 2:
            raise MemoryError
        appended.append(entry)
        self.entries.append(entry)

    def _release(self):
        released.append(self.count)
        real_release(self)

    monkeypatch.setattr(CatalogList, "append", _append)
    monkeypatch.setattr(CatalogList, "release", _release)

    with pytest.raises(CatalogAllocationError):
        build_catalog(db_path)

    assert released == [2]
    assert all(entry.name is None for entry in appended)


def test_materialize_skips_records_that_are_not_maps() -> None:
    records = [
        GenericValue.from_python({"name": "Foo"}),
        GenericValue.string("stray"),
        GenericValue.nil(),
        GenericValue.from_python({"name": "Bar"}),
    ]

    catalog = materialize(records)

    assert catalog.count == 2
    assert [entry.name for entry in catalog] == ["Foo", "Bar"]


def test_cursor_pulls_until_end_of_stream(tmp_path: Path) -> None:
    db_path = _make_db(tmp_path / "catalog.db")
    conn = open_database(db_path)
    try:
        query = compile_query(conn, "users >= 1")
        assert not query.match_all
        assert compile_query(conn, "   ").match_all
        with open_cursor(conn, query) as cursor:
            first = cursor.next()
            second = cursor.next()
            assert cursor.next() is None
            assert cursor.next() is None
        assert cursor.closed
        assert cursor.next() is None
    finally:
        conn.close()

    assert first.to_python()["name"] == "Foo"
    assert second.to_python()["serial"] == "SNS-BR"


def test_release_is_safe_on_empty_and_partial_lists() -> None:
    empty = CatalogList()
    empty.release()
    assert empty.count == 0

    partial = CatalogList([CatalogEntry(name="Foo"), CatalogEntry()])
    partial.release()
    assert partial.count == 0
    assert partial.entries == []

    release_catalog(None)
    release_catalog(CatalogList())


def test_catalog_context_manager_releases(tmp_path: Path) -> None:
    db_path = _make_db(tmp_path / "catalog.db")

    with build_catalog(db_path) as catalog:
        first = catalog[0]
        assert len(catalog) == 3

    assert catalog.count == 0
    assert first.name is None


@pytest.mark.parametrize("folder", ["plain", "sets #1", "a?b", "100%"])
def test_database_path_with_uri_characters_opens(tmp_path: Path, folder: str) -> None:
    directory = tmp_path / folder
    directory.mkdir()
    db_path = _make_db(directory / "catalog.db", RECORDS[:1])

    catalog = build_catalog(db_path)

    assert [entry.name for entry in catalog] == ["Foo"]


def test_query_may_end_with_line_comment(tmp_path: Path) -> None:
    db_path = _make_db(tmp_path / "catalog.db")

    catalog = build_catalog(db_path, "users = 2 -- two players")

    assert [entry.name for entry in catalog] == ["Foo"]
