"""Enumerate candidate content files under a directory."""

from __future__ import annotations

import logging
import os
import sys
import unicodedata
from fnmatch import fnmatch
from pathlib import Path
from typing import List, Sequence

from core.paths import to_long_path

from .errors import ScanError
from .types import normalize_extensions

LOGGER = logging.getLogger("contentcatalog.scan")

_WINDOWS = sys.platform.startswith("win")


def normalize_path(path: str) -> str:
    return unicodedata.normalize("NFC", path)


def is_hidden(entry: os.DirEntry[str]) -> bool:
    if entry.name.startswith("."):
        return True
    if not _WINDOWS:
        return False
    try:
        attrs = entry.stat(follow_symlinks=False).st_file_attributes  # type: ignore[attr-defined]
    except (OSError, AttributeError):
        return False
    FILE_ATTRIBUTE_HIDDEN = 0x2
    FILE_ATTRIBUTE_SYSTEM = 0x4
    return bool(attrs & (FILE_ATTRIBUTE_HIDDEN | FILE_ATTRIBUTE_SYSTEM))


def should_ignore(path: str, *, patterns: Sequence[str]) -> bool:
    if not patterns:
        return False
    for pattern in patterns:
        if fnmatch(os.path.basename(path), pattern) or fnmatch(path, pattern):
            return True
    return False


def matches_extension(path: str, extensions: Sequence[str]) -> bool:
    if not extensions:
        return True
    suffix = os.path.splitext(path)[1].lstrip(".").lower()
    return bool(suffix) and suffix in extensions


def list_content_files(
    root: str | Path,
    extensions: Sequence[str],
    *,
    recursive: bool = False,
    skip_hidden: bool = False,
    ignore: Sequence[str] = (),
) -> List[str]:
    """Return the files under *root* whose extension is in *extensions*.

    An empty *extensions* accepts every file. The result is sorted
    case-insensitively so repeated scans visit files in the same order.
    Raises :class:`ScanError` when *root* itself cannot be listed.
    """

    exts = normalize_extensions(extensions)
    base = str(root)
    found: List[str] = []
    pending = [base]
    while pending:
        display_dir = pending.pop()
        try:
            iterator = os.scandir(to_long_path(display_dir))
        except OSError as exc:
            if display_dir == base:
                raise ScanError(f"cannot list directory {base}: {exc}") from exc
            LOGGER.warning("Skipping unreadable directory %s: %s", display_dir, exc)
            continue
        with iterator:
            for entry in iterator:
                display_path = os.path.join(display_dir, entry.name)
                if skip_hidden and is_hidden(entry):
                    continue
                if should_ignore(display_path, patterns=ignore):
                    continue
                try:
                    is_dir = entry.is_dir(follow_symlinks=False)
                    is_file = not is_dir and entry.is_file()
                except OSError:
                    continue
                if is_dir:
                    if recursive:
                        pending.append(display_path)
                    continue
                if is_file and matches_extension(entry.name, exts):
                    found.append(normalize_path(display_path))
    found.sort(key=lambda item: (item.casefold(), item))
    return found


__all__ = ["is_hidden", "list_content_files", "matches_extension", "normalize_path", "should_ignore"]
