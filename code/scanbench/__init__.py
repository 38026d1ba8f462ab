"""Correctness and throughput harness for parallel scan engines."""

from scanbench.benchmark.problems import ScanProblem, make_problem, reference_scan
from scanbench.errors import (
    AllocationError,
    ConfigurationError,
    EngineError,
    ScanBenchError,
    TransferError,
    VerificationMismatch,
)
from scanbench.harness.engine import ProblemSizeGenre, ScanEngine, TorchScanEngine
from scanbench.harness.scan_harness import ScanConfig, ScanHarness, ScanRunResult, timed_scan
from scanbench.operators import ScanOperator, max_operator, sum_operator

__version__ = "0.1.0"

__all__ = [
    "AllocationError",
    "ConfigurationError",
    "EngineError",
    "ProblemSizeGenre",
    "ScanBenchError",
    "ScanConfig",
    "ScanEngine",
    "ScanHarness",
    "ScanOperator",
    "ScanProblem",
    "ScanRunResult",
    "TorchScanEngine",
    "TransferError",
    "VerificationMismatch",
    "make_problem",
    "max_operator",
    "reference_scan",
    "sum_operator",
    "timed_scan",
]
