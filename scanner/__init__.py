"""Incremental directory scanning and content identification."""
from __future__ import annotations

from .config import ScanSettings, resolve_scan_settings
from .controller import ScanHandle, open_scan, run_scan, step
from .errors import ScanError
from .identify import ContentIdentifier, accept_entry
from .status import StatusMessage, StatusQueue
from .types import ContentKind, IdentifyResult, ScanKind, ScanStatus, StepOutcome

__all__ = [
    "ContentIdentifier",
    "ContentKind",
    "IdentifyResult",
    "ScanError",
    "ScanHandle",
    "ScanKind",
    "ScanSettings",
    "ScanStatus",
    "StatusMessage",
    "StatusQueue",
    "StepOutcome",
    "accept_entry",
    "open_scan",
    "resolve_scan_settings",
    "run_scan",
    "step",
]
