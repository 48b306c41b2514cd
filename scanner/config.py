"""Resolve the ``scan`` and ``status`` settings blocks into typed options."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

from core.settings import DEFAULT_SETTINGS

from .checksum import SUPPORTED_CHECKSUMS
from .types import normalize_extensions


@dataclass(slots=True)
class ScanSettings:
    extensions: Sequence[str] = field(default_factory=tuple)
    archive_extensions: Sequence[str] = ("zip",)
    recursive: bool = False
    skip_hidden: bool = False
    ignore: Sequence[str] = field(default_factory=tuple)
    checksums: Sequence[str] = tuple(DEFAULT_SETTINGS["scan"]["checksums"])
    load_archive_data: bool = False
    status_priority: int = 1
    status_duration: int = 180
    status_max_messages: int = 64

    def as_log_line(self) -> str:
        exts = ",".join(self.extensions) if self.extensions else "*"
        ignore = ",".join(self.ignore) if self.ignore else "-"
        return (
            "extensions=%s, archives=%s, recursive=%s, skip_hidden=%s, "
            "ignore=%s, checksums=%s"
            % (
                exts,
                ",".join(self.archive_extensions),
                str(bool(self.recursive)).lower(),
                str(bool(self.skip_hidden)).lower(),
                ignore,
                ",".join(self.checksums),
            )
        )


def resolve_scan_settings(raw: dict | None, overrides: dict | None = None) -> ScanSettings:
    """Build :class:`ScanSettings` from a full settings payload.

    *raw* is the whole settings mapping (``scan`` and ``status`` blocks are
    read from it); missing blocks fall back to :data:`DEFAULT_SETTINGS`.
    *overrides* are applied last, keyed by :class:`ScanSettings` field name.
    """

    data = dict(raw or {})
    scan = data.get("scan") if isinstance(data.get("scan"), dict) else DEFAULT_SETTINGS["scan"]
    status = data.get("status") if isinstance(data.get("status"), dict) else DEFAULT_SETTINGS["status"]
    override = dict(overrides or {})

    cfg = ScanSettings()
    for key in ("extensions", "archive_extensions", "recursive", "skip_hidden", "ignore", "checksums", "load_archive_data"):
        if key in scan:
            setattr(cfg, key, scan[key])
    if "priority" in status:
        cfg.status_priority = status["priority"]
    if "duration" in status:
        cfg.status_duration = status["duration"]
    if "max_messages" in status:
        cfg.status_max_messages = status["max_messages"]
    for key, value in override.items():
        if hasattr(cfg, key) and value is not None:
            setattr(cfg, key, value)

    cfg.extensions = normalize_extensions(cfg.extensions)
    cfg.archive_extensions = normalize_extensions(cfg.archive_extensions)
    cfg.ignore = tuple(str(p).strip() for p in (cfg.ignore or ()) if str(p).strip())
    kinds = [str(kind).strip().lower() for kind in (cfg.checksums or ()) if str(kind).strip()]
    kinds = [kind for kind in kinds if kind in SUPPORTED_CHECKSUMS]
    if "crc32" not in kinds:
        kinds.insert(0, "crc32")
    cfg.checksums = tuple(dict.fromkeys(kinds))
    cfg.recursive = bool(cfg.recursive)
    cfg.skip_hidden = bool(cfg.skip_hidden)
    cfg.load_archive_data = bool(cfg.load_archive_data)
    cfg.status_priority = int(cfg.status_priority)
    cfg.status_duration = max(0, int(cfg.status_duration))
    cfg.status_max_messages = max(1, int(cfg.status_max_messages))
    return cfg


__all__ = ["ScanSettings", "resolve_scan_settings"]
