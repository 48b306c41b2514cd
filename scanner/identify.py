"""Identify one candidate file by checksum."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, List, Optional, Sequence

from core.paths import to_long_path

from .archive import EntryCallback, parse_archive
from .checksum import compute_checksums
from .config import ScanSettings
from .status import StatusQueue
from .types import ArchiveEntry, ContentKind, IdentifyResult

LOGGER = logging.getLogger("contentcatalog.identify")


def accept_entry(entry: ArchiveEntry, valid_exts: Sequence[str], userdata: Any) -> bool:
    """Default archive inspection: log the stored CRC and accept the member.

    No comparison against any expected value takes place.
    """

    LOGGER.info("CRC32: 0x%x", entry.crc32)
    return True


class ContentIdentifier:
    """Compute checksums for plain files and inspect archive members."""

    def __init__(
        self,
        settings: Optional[ScanSettings] = None,
        *,
        status: Optional[StatusQueue] = None,
        callback: EntryCallback = accept_entry,
    ) -> None:
        self.settings = settings or ScanSettings()
        self.status = status if status is not None else StatusQueue(self.settings.status_max_messages)
        self.callback = callback

    def is_archive(self, path: str) -> bool:
        suffix = os.path.splitext(path)[1].lstrip(".").lower()
        return bool(suffix) and suffix in self.settings.archive_extensions

    def identify(self, path: str, *, position: int = 0, total: int = 0) -> IdentifyResult:
        self.status.push(
            f"{position}/{total}: Scanning {path}...",
            self.settings.status_priority,
            self.settings.status_duration,
            True,
        )
        if self.is_archive(path):
            return self._identify_archive(path)
        return self._identify_file(path)

    def _identify_archive(self, path: str) -> IdentifyResult:
        LOGGER.info("[ZIP]: name: %s", path)
        entries: List[ArchiveEntry] = []

        def _collect(entry: ArchiveEntry, valid_exts: Sequence[str], userdata: Any) -> bool:
            entries.append(entry)
            return self.callback(entry, valid_exts, userdata)

        ok = parse_archive(
            to_long_path(path),
            self.settings.extensions,
            _collect,
            os.path.dirname(path),
            load_data=self.settings.load_archive_data,
        )
        if not ok:
            LOGGER.warning("Could not process ZIP file.")
        return IdentifyResult(path=path, kind=ContentKind.ARCHIVE, ok=ok, entries=entries)

    def _identify_file(self, path: str) -> IdentifyResult:
        try:
            data = Path(to_long_path(path)).read_bytes()
        except OSError as exc:
            LOGGER.debug("Cannot read %s: %s", path, exc)
            return IdentifyResult(path=path, kind=ContentKind.FILE, ok=False)
        if not data:
            return IdentifyResult(path=path, kind=ContentKind.FILE, ok=False)
        checksums = compute_checksums(data, self.settings.checksums)
        size = len(data)
        del data
        LOGGER.info("CRC32: 0x%s .", checksums.crc32)
        return IdentifyResult(
            path=path,
            kind=ContentKind.FILE,
            ok=True,
            bytes_read=size,
            checksums=checksums,
        )


__all__ = ["ContentIdentifier", "accept_entry"]
