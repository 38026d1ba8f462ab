"""Error taxonomy for scan benchmark runs.

Setup and engine failures are fatal to a run and propagate as exceptions.
A verification mismatch is an outcome, not a fault; `VerificationMismatch`
only exists for callers that choose to escalate it.
"""

from __future__ import annotations

from typing import Any


class ScanBenchError(Exception):
    """Base class for every fatal harness failure."""


class ConfigurationError(ScanBenchError, ValueError):
    """Problem or config is inconsistent (e.g. reference length != N)."""


class AllocationError(ScanBenchError):
    """Device memory exhausted or the allocator failed."""


class TransferError(ScanBenchError):
    """Host/device copy could not complete."""


class EngineError(ScanBenchError):
    """The external scan engine reported a failure on invocation."""


class VerificationMismatch(ScanBenchError):
    """Engine output diverged from the reference sequence."""

    def __init__(self, index: int, actual: Any, expected: Any) -> None:
        super().__init__(
            f"INCORRECT: [{index}]: {actual} (reference: {expected})"
        )
        self.index = index
        self.actual = actual
        self.expected = expected


__all__ = [
    "ScanBenchError",
    "ConfigurationError",
    "AllocationError",
    "TransferError",
    "EngineError",
    "VerificationMismatch",
]
