"""Command line driver for directory scans and catalog queries."""
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from tqdm import tqdm

from catalog import CatalogError, build_catalog
from core.logging_utils import configure_json_logging
from core.paths import ensure_working_dir_structure, get_catalog_db_path, resolve_working_dir
from core.settings import load_settings
from scanner import ScanError, ScanHandle, ScanKind, StepOutcome, open_scan, run_scan

LOGGER = logging.getLogger("contentcatalog.cli")

_KINDS = {"build": ScanKind.BUILD_CATALOG, "none": ScanKind.NONE}


def _parse_args(argv: Optional[Sequence[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Scan content directories and query catalog databases")
    parser.add_argument("--working-dir", dest="working_dir", default=None, help="Override the working directory")
    sub = parser.add_subparsers(dest="command", required=True)

    scan = sub.add_parser("scan", help="Identify candidate content files in a directory")
    scan.add_argument("directory", help="Directory to scan")
    scan.add_argument("--kind", choices=sorted(_KINDS), default="build", help="Scan operation")
    scan.add_argument("--recursive", action="store_true", default=None, help="Descend into subdirectories")
    scan.add_argument("--ext", dest="extensions", action="append", default=None, help="Extension to include (repeatable)")
    scan.add_argument("--no-progress", action="store_true", help="Disable the progress bar")

    query = sub.add_parser("query", help="List catalog entries matching a query")
    query.add_argument("database", nargs="?", default=None, help="Catalog database path")
    query.add_argument("--where", default=None, help="Query expression, e.g. \"name = 'Foo'\"")
    query.add_argument("--table", default=None, help="Table holding the records")
    return parser.parse_args(argv)


def _run_scan(args: argparse.Namespace, settings: dict) -> int:
    overrides = {}
    if args.recursive is not None:
        overrides["recursive"] = args.recursive
    try:
        handle = open_scan(
            args.directory,
            _KINDS[args.kind],
            extensions=args.extensions,
            settings=settings,
            overrides=overrides,
        )
    except ScanError as exc:
        LOGGER.error("Scan failed: %s", exc)
        print(f"error: {exc}", file=sys.stderr)
        return 1

    with handle, tqdm(total=handle.total, unit="file", disable=args.no_progress) as bar:

        def _advance(current: ScanHandle, outcome: StepOutcome) -> None:
            bar.n = current.index
            bar.refresh()

        outcome = run_scan(handle, on_step=_advance)
        summary = handle.summary()
    print(json.dumps(summary, indent=2))
    return 0 if outcome is StepOutcome.FINISHED else 1


def _run_query(args: argparse.Namespace, settings: dict, working_dir: Path) -> int:
    db_path = args.database
    if db_path is None:
        configured = (settings.get("database") or {}).get("path")
        db_path = configured or str(get_catalog_db_path(working_dir))
    try:
        catalog = build_catalog(db_path, args.where, table=args.table, settings=settings)
    except CatalogError as exc:
        LOGGER.error("Query failed: %s", exc)
        print(f"error: {exc}", file=sys.stderr)
        return 1
    with catalog:
        for entry in catalog:
            print(json.dumps(entry.to_dict(), ensure_ascii=False))
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _parse_args(argv)
    working_dir = Path(args.working_dir).expanduser().resolve() if args.working_dir else resolve_working_dir()
    ensure_working_dir_structure(working_dir)
    settings = load_settings(working_dir)
    configure_json_logging(level=(settings.get("logging") or {}).get("level", "INFO"), working_dir=working_dir)

    if args.command == "scan":
        return _run_scan(args, settings)
    return _run_query(args, settings, working_dir)


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
