"""Content checksums used to identify scanned files."""

from __future__ import annotations

import hashlib
import zlib
from typing import Iterable

from blake3 import blake3

from .types import ContentChecksums

SUPPORTED_CHECKSUMS = ("crc32", "md5", "sha1", "blake3")


def crc32(data: bytes) -> int:
    return zlib.crc32(data) & 0xFFFFFFFF


def compute_checksums(data: bytes, kinds: Iterable[str] = ("crc32",)) -> ContentChecksums:
    """Return the CRC-32 of *data* plus every extra digest named in *kinds*."""

    wanted = set()
    for kind in kinds:
        key = str(kind).lower()
        if key not in SUPPORTED_CHECKSUMS:
            raise ValueError(f"unsupported checksum kind: {kind}")
        wanted.add(key)
    value = crc32(data)
    result = ContentChecksums(crc32=f"{value:08x}", crc32_int=value)
    if "md5" in wanted:
        result.md5 = hashlib.md5(data).hexdigest()
    if "sha1" in wanted:
        result.sha1 = hashlib.sha1(data).hexdigest()
    if "blake3" in wanted:
        result.blake3 = blake3(data).hexdigest()
    return result


__all__ = ["SUPPORTED_CHECKSUMS", "compute_checksums", "crc32"]
