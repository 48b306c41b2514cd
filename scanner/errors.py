"""Error hierarchy for directory scanning."""
from __future__ import annotations


class ScanError(RuntimeError):
    """Raised when a scan session cannot be created."""


__all__ = ["ScanError"]
