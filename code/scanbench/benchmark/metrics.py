"""Latency and throughput metrics for timed scan runs.

Throughput follows a fixed reporting convention: bytes/sec counts each
element three times (one read, one write, one extra pass attributed to the
scan's access pattern). It is not a measured quantity.

Usage:
    stats = compute_run_statistics(
        times_ms=[0.21, 0.20, 0.22],
        num_elements=1 << 20,
        element_size=4,
    )
    stats.gelements_per_sec
"""

from __future__ import annotations

import statistics
from dataclasses import dataclass, field
from typing import Dict, List, Sequence

# Reads + writes + one additional algorithmic pass
SCAN_BYTES_PER_ELEMENT_FACTOR = 3


@dataclass
class RunStatistics:
    """Statistics for one run. Computed once, never persisted."""
    iterations: int
    num_elements: int
    element_size: int
    total_elapsed_ms: float
    avg_latency_ms: float
    elements_per_sec: float
    bytes_per_sec: float
    min_ms: float = 0.0
    max_ms: float = 0.0
    median_ms: float = 0.0
    std_ms: float = 0.0
    raw_times_ms: List[float] = field(default_factory=list)

    @property
    def gelements_per_sec(self) -> float:
        return self.elements_per_sec / 1e9

    @property
    def gbytes_per_sec(self) -> float:
        return self.bytes_per_sec / 1e9

    def to_metrics(self) -> Dict[str, float]:
        return {
            "scan.iterations": float(self.iterations),
            "scan.elements": float(self.num_elements),
            "scan.element_size": float(self.element_size),
            "scan.total_elapsed_ms": self.total_elapsed_ms,
            "scan.avg_latency_ms": self.avg_latency_ms,
            "scan.median_ms": self.median_ms,
            "scan.min_ms": self.min_ms,
            "scan.max_ms": self.max_ms,
            "scan.std_ms": self.std_ms,
            "scan.gelements_per_sec": self.gelements_per_sec,
            "scan.gbytes_per_sec": self.gbytes_per_sec,
        }


def compute_scan_throughput(
    num_elements: int,
    element_size: int,
    total_elapsed_ms: float,
    iterations: int,
) -> Dict[str, float]:
    """Average latency and throughput from accumulated elapsed time.

    With zero iterations, or a zero average latency, latency and both
    throughput figures are reported as 0.0.

    Returns:
        Dict with avg_latency_ms, elements_per_sec, bytes_per_sec
    """
    if iterations <= 0:
        return {"avg_latency_ms": 0.0, "elements_per_sec": 0.0, "bytes_per_sec": 0.0}

    avg_latency_ms = total_elapsed_ms / iterations
    if avg_latency_ms <= 0.0:
        return {"avg_latency_ms": avg_latency_ms, "elements_per_sec": 0.0, "bytes_per_sec": 0.0}

    elements_per_sec = num_elements / (avg_latency_ms / 1000.0)
    bytes_per_sec = elements_per_sec * element_size * SCAN_BYTES_PER_ELEMENT_FACTOR
    return {
        "avg_latency_ms": avg_latency_ms,
        "elements_per_sec": elements_per_sec,
        "bytes_per_sec": bytes_per_sec,
    }


def compute_run_statistics(
    times_ms: Sequence[float],
    num_elements: int,
    element_size: int,
) -> RunStatistics:
    """Build RunStatistics from per-iteration elapsed times."""
    times = [float(t) for t in times_ms]
    n = len(times)
    total = sum(times)
    throughput = compute_scan_throughput(num_elements, element_size, total, n)
    return RunStatistics(
        iterations=n,
        num_elements=num_elements,
        element_size=element_size,
        total_elapsed_ms=total,
        avg_latency_ms=throughput["avg_latency_ms"],
        elements_per_sec=throughput["elements_per_sec"],
        bytes_per_sec=throughput["bytes_per_sec"],
        min_ms=min(times) if times else 0.0,
        max_ms=max(times) if times else 0.0,
        median_ms=statistics.median(times) if times else 0.0,
        std_ms=statistics.stdev(times) if n > 1 else 0.0,
        raw_times_ms=times,
    )


__all__ = [
    "SCAN_BYTES_PER_ELEMENT_FACTOR",
    "RunStatistics",
    "compute_scan_throughput",
    "compute_run_statistics",
]
