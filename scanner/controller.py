"""Cooperative, one-file-per-call directory scan.

A :class:`ScanHandle` owns the list of candidate paths found when the scan was
opened and a cursor into it. Each call to :func:`step` handles at most one
path and returns a :class:`StepOutcome`, so the caller decides how scanning is
interleaved with other work (a timer, an event-loop tick or a plain loop such
as :func:`run_scan`).
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence

from .config import ScanSettings, resolve_scan_settings
from .errors import ScanError
from .identify import ContentIdentifier
from .listing import list_content_files
from .status import StatusQueue
from .types import IdentifyResult, ScanKind, ScanStatus, StepOutcome, normalize_extensions

LOGGER = logging.getLogger("contentcatalog.scan")

FINISHED_MESSAGE = "Scanning of directory finished."


class ScanHandle:
    def __init__(
        self,
        paths: Sequence[Optional[str]],
        kind: ScanKind = ScanKind.BUILD_CATALOG,
        *,
        root: Optional[str] = None,
        identifier: Optional[ContentIdentifier] = None,
        status: Optional[StatusQueue] = None,
        settings: Optional[ScanSettings] = None,
    ) -> None:
        self.paths: Optional[tuple] = tuple(paths)
        self.kind = kind
        self.root = root
        self.index = 0
        self.status = ScanStatus.ITERATING
        self.settings = settings or ScanSettings()
        if identifier is None:
            queue = status if status is not None else StatusQueue(self.settings.status_max_messages)
            identifier = ContentIdentifier(self.settings, status=queue)
        self.identifier = identifier
        self.messages = status if status is not None else identifier.status
        self.results: List[IdentifyResult] = []

    @property
    def total(self) -> int:
        return len(self.paths) if self.paths is not None else 0

    @property
    def closed(self) -> bool:
        return self.paths is None

    @property
    def at_malformed_entry(self) -> bool:
        return self.paths is not None and self.index < len(self.paths) and not self.paths[self.index]

    def step(self) -> StepOutcome:
        return step(self)

    def skip(self) -> None:
        """Move the cursor past the current entry without processing it."""

        if self.paths is not None and self.index < len(self.paths):
            self.index += 1

    def close(self) -> None:
        self.paths = None

    def __enter__(self) -> "ScanHandle":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def summary(self) -> Dict[str, object]:
        return {
            "root": self.root,
            "kind": self.kind.value,
            "status": self.status.value,
            "processed": self.index,
            "total": self.total,
            "results": [result.as_dict() for result in self.results],
        }


def step(handle: Optional[ScanHandle]) -> StepOutcome:
    """Advance *handle* by at most one path."""

    if handle is None or handle.paths is None:
        return StepOutcome.ERROR

    if handle.index >= len(handle.paths):
        if handle.status is ScanStatus.ITERATING:
            handle.messages.push(
                FINISHED_MESSAGE,
                handle.settings.status_priority,
                handle.settings.status_duration,
                True,
            )
            handle.status = ScanStatus.DONE
        return StepOutcome.FINISHED

    name = handle.paths[handle.index]
    if not name:
        # Malformed entry: the cursor stays put.
        return StepOutcome.CONTINUE

    if handle.kind is ScanKind.BUILD_CATALOG:
        result = handle.identifier.identify(name, position=handle.index, total=len(handle.paths))
        handle.results.append(result)
    handle.index += 1
    return StepOutcome.CONTINUE


def open_scan(
    directory: str | Path,
    kind: ScanKind = ScanKind.BUILD_CATALOG,
    *,
    extensions: Optional[Sequence[str]] = None,
    settings: Optional[dict] = None,
    overrides: Optional[dict] = None,
    identifier: Optional[ContentIdentifier] = None,
    status: Optional[StatusQueue] = None,
) -> ScanHandle:
    """List *directory* and return a handle positioned on its first file.

    *settings* is a full settings payload (see :mod:`core.settings`);
    *extensions*, when given, replaces the configured extension list.
    Archive extensions are always listed alongside content extensions.
    """

    if extensions is not None:
        overrides = dict(overrides or {}, extensions=list(extensions))
    cfg = resolve_scan_settings(settings, overrides)
    listed = cfg.extensions
    if listed:
        listed = normalize_extensions(list(listed) + list(cfg.archive_extensions))
    root = str(directory)
    if not Path(root).is_dir():
        raise ScanError(f"not a directory: {root}")
    paths = list_content_files(
        root,
        listed,
        recursive=cfg.recursive,
        skip_hidden=cfg.skip_hidden,
        ignore=cfg.ignore,
    )
    LOGGER.info("Opened scan of %s (%d candidates; %s)", root, len(paths), cfg.as_log_line())
    return ScanHandle(paths, kind, root=root, identifier=identifier, status=status, settings=cfg)


def run_scan(
    handle: ScanHandle,
    *,
    on_step: Optional[Callable[[ScanHandle, StepOutcome], None]] = None,
) -> StepOutcome:
    """Call :func:`step` until the scan finishes or fails."""

    while True:
        outcome = step(handle)
        if on_step is not None:
            on_step(handle, outcome)
        if outcome is not StepOutcome.CONTINUE:
            return outcome
        if handle.at_malformed_entry:
            LOGGER.warning("Skipping empty path entry at index %d", handle.index)
            handle.skip()


__all__ = ["FINISHED_MESSAGE", "ScanHandle", "open_scan", "run_scan", "step"]
