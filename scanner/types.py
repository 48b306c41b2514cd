"""Common types shared across scanner modules."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence


class ScanStatus(Enum):
    ITERATING = "iterating"
    DONE = "done"


class ScanKind(Enum):
    NONE = "none"
    BUILD_CATALOG = "build_catalog"


class StepOutcome(Enum):
    CONTINUE = "continue"
    FINISHED = "finished"
    ERROR = "error"


class ContentKind(Enum):
    FILE = "file"
    ARCHIVE = "archive"


@dataclass(slots=True)
class ContentChecksums:
    """Digests computed over the full content of one file."""

    crc32: str
    crc32_int: int
    md5: Optional[str] = None
    sha1: Optional[str] = None
    blake3: Optional[str] = None

    def as_dict(self) -> dict:
        payload = {"crc32": self.crc32}
        for kind in ("md5", "sha1", "blake3"):
            value = getattr(self, kind)
            if value is not None:
                payload[kind] = value
        return payload


@dataclass(slots=True)
class ArchiveEntry:
    """Descriptor of one member of a container file."""

    name: str
    compress_type: int
    compressed_size: int
    size: int
    crc32: int
    data: Optional[bytes] = None

    def as_dict(self) -> dict:
        return {
            "name": self.name,
            "compress_type": self.compress_type,
            "compressed_size": self.compressed_size,
            "size": self.size,
            "crc32": f"{self.crc32:08x}",
        }


@dataclass(slots=True)
class IdentifyResult:
    path: str
    kind: ContentKind
    ok: bool
    bytes_read: int = 0
    checksums: Optional[ContentChecksums] = None
    entries: List[ArchiveEntry] = field(default_factory=list)

    def as_dict(self) -> dict:
        payload: dict = {
            "path": self.path,
            "kind": self.kind.value,
            "ok": self.ok,
            "bytes_read": self.bytes_read,
        }
        if self.checksums is not None:
            payload["checksums"] = self.checksums.as_dict()
        if self.entries:
            payload["entries"] = [entry.as_dict() for entry in self.entries]
        return payload


def normalize_extensions(values: Sequence[str] | None) -> tuple[str, ...]:
    """Lower-case extensions without their leading dot, duplicates removed."""

    seen: list[str] = []
    for value in values or ():
        ext = str(value).strip().lstrip(".").lower()
        if ext and ext not in seen:
            seen.append(ext)
    return tuple(seen)


__all__ = [
    "ArchiveEntry",
    "ContentChecksums",
    "ContentKind",
    "IdentifyResult",
    "ScanKind",
    "ScanStatus",
    "StepOutcome",
    "normalize_extensions",
]
