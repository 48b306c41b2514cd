"""Typed catalog entries projected from generic database records."""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields
from enum import IntEnum
from typing import Any, Callable, Dict, Optional, Tuple

from .values import GenericValue, ValueKind

LOGGER = logging.getLogger("contentcatalog.catalog")


class TriState(IntEnum):
    UNKNOWN = -1
    UNSUPPORTED = 0
    SUPPORTED = 1


@dataclass(slots=True)
class CatalogEntry:
    name: Optional[str] = None
    description: Optional[str] = None
    publisher: Optional[str] = None
    developer: Optional[str] = None
    origin: Optional[str] = None
    franchise: Optional[str] = None
    bbfc_rating: Optional[str] = None
    elspa_rating: Optional[str] = None
    esrb_rating: Optional[str] = None
    pegi_rating: Optional[str] = None
    cero_rating: Optional[str] = None
    enhancement_hw: Optional[str] = None
    edge_magazine_review: Optional[str] = None
    crc32: Optional[str] = None
    sha1: Optional[str] = None
    md5: Optional[str] = None
    famitsu_magazine_rating: int = 0
    edge_magazine_rating: int = 0
    edge_magazine_issue: int = 0
    max_users: int = 0
    releasemonth: int = 0
    releaseyear: int = 0
    analog_supported: TriState = TriState.UNKNOWN
    rumble_supported: TriState = TriState.UNKNOWN

    @property
    def title(self) -> Optional[str]:
        return self.name

    def release(self) -> None:
        """Drop every owned text field; already-empty fields are left alone."""

        for attr in OWNED_FIELDS:
            setattr(self, attr, None)

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {}
        for item in fields(self):
            value = getattr(self, item.name)
            payload[item.name] = int(value) if isinstance(value, TriState) else value
        return payload


OWNED_FIELDS: Tuple[str, ...] = (
    "name",
    "description",
    "publisher",
    "developer",
    "origin",
    "franchise",
    "bbfc_rating",
    "elspa_rating",
    "esrb_rating",
    "pegi_rating",
    "cero_rating",
    "enhancement_hw",
    "edge_magazine_review",
    "crc32",
    "sha1",
    "md5",
)


class _Skip:
    pass


_SKIP = _Skip()


def bin_to_hex(data: bytes) -> str:
    return bytes(data).hex().upper()


def _text(value: GenericValue) -> Any:
    if value.kind is ValueKind.STRING:
        return value.value
    return _SKIP


def _number(value: GenericValue) -> Any:
    if value.kind in (ValueKind.UINT, ValueKind.INT):
        return int(value.value)
    return _SKIP


def _tristate(value: GenericValue) -> Any:
    number = _number(value)
    if number is _SKIP:
        return _SKIP
    return TriState.UNSUPPORTED if number == 0 else TriState.SUPPORTED


def _hex(value: GenericValue) -> Any:
    if value.kind is ValueKind.BINARY:
        return bin_to_hex(value.value)
    return _SKIP


Converter = Callable[[GenericValue], Any]

# record key -> (entry attribute, converter)
FIELD_TABLE: Dict[str, Tuple[str, Converter]] = {
    "name": ("name", _text),
    "description": ("description", _text),
    "publisher": ("publisher", _text),
    "developer": ("developer", _text),
    "origin": ("origin", _text),
    "franchise": ("franchise", _text),
    "bbfc_rating": ("bbfc_rating", _text),
    "esrb_rating": ("esrb_rating", _text),
    "elspa_rating": ("elspa_rating", _text),
    "cero_rating": ("cero_rating", _text),
    "pegi_rating": ("pegi_rating", _text),
    "enhancement_hw": ("enhancement_hw", _text),
    "edge_review": ("edge_magazine_review", _text),
    "edge_rating": ("edge_magazine_rating", _number),
    "edge_issue": ("edge_magazine_issue", _number),
    "famitsu_rating": ("famitsu_magazine_rating", _number),
    "users": ("max_users", _number),
    "releasemonth": ("releasemonth", _number),
    "releaseyear": ("releaseyear", _number),
    "rumble": ("rumble_supported", _tristate),
    "analog": ("analog_supported", _tristate),
    "crc": ("crc32", _hex),
    "sha1": ("sha1", _hex),
    "md5": ("md5", _hex),
}


def project_record(record: GenericValue) -> Optional[CatalogEntry]:
    """Return a :class:`CatalogEntry` for a map record, ``None`` otherwise.

    Pairs are applied in order, so a repeated key overwrites the value set by
    its earlier occurrence. Keys missing from :data:`FIELD_TABLE` are ignored,
    as are values whose kind does not suit the target field.
    """

    if not record.is_map:
        return None
    entry = CatalogEntry()
    for key, value in record.items():
        if key.kind is not ValueKind.STRING:
            continue
        target = FIELD_TABLE.get(key.value)
        if target is None:
            continue
        attr, convert = target
        converted = convert(value)
        if converted is _SKIP:
            LOGGER.debug("Ignoring %s value for %r", value.kind.value, key.value)
            continue
        setattr(entry, attr, converted)
    return entry


__all__ = [
    "FIELD_TABLE",
    "OWNED_FIELDS",
    "CatalogEntry",
    "TriState",
    "bin_to_hex",
    "project_record",
]
