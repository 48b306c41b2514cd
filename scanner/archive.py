"""Walk the members of a zip container through an inspection callback."""

from __future__ import annotations

import logging
import zipfile
from pathlib import Path
from typing import Any, Callable, Sequence

from .types import ArchiveEntry

LOGGER = logging.getLogger("contentcatalog.archive")

EntryCallback = Callable[[ArchiveEntry, Sequence[str], Any], bool]


def parse_archive(
    path: str | Path,
    valid_exts: Sequence[str],
    callback: EntryCallback,
    userdata: Any = None,
    *,
    load_data: bool = False,
) -> bool:
    """Invoke *callback* once per member of the zip at *path*.

    Members are visited in central-directory order. The callback receives the
    member descriptor, *valid_exts* and *userdata*; returning a falsy value
    stops the walk and makes the whole call report failure. Member bytes are
    only read when *load_data* is set.
    """

    try:
        archive = zipfile.ZipFile(path, "r")
    except (OSError, zipfile.BadZipFile) as exc:
        LOGGER.warning("Cannot open archive %s: %s", path, exc)
        return False
    with archive:
        for info in archive.infolist():
            data = None
            if load_data and not info.is_dir():
                try:
                    data = archive.read(info)
                except (OSError, zipfile.BadZipFile, RuntimeError, NotImplementedError) as exc:
                    LOGGER.warning("Cannot read %s from %s: %s", info.filename, path, exc)
                    return False
            entry = ArchiveEntry(
                name=info.filename,
                compress_type=info.compress_type,
                compressed_size=info.compress_size,
                size=info.file_size,
                crc32=info.CRC & 0xFFFFFFFF,
                data=data,
            )
            if not callback(entry, valid_exts, userdata):
                LOGGER.debug("Callback rejected %s in %s", entry.name, path)
                return False
    return True


__all__ = ["EntryCallback", "parse_archive"]
