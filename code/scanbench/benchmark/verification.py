"""Result verification and the human-readable run summary.

Verification is exact: no tolerance is applied, so floating-point callers
must supply bit-reproducible references. A mismatch is reported as an
outcome and never aborts the run.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass
from typing import Any, Callable, Optional, Sequence, TextIO, Union

import torch

from scanbench.benchmark.metrics import RunStatistics
from scanbench.errors import ConfigurationError, VerificationMismatch

ValuePrinter = Callable[[Any], str]
SequenceLike = Union[torch.Tensor, Sequence[Any]]


@dataclass(frozen=True)
class VerificationOutcome:
    """Pass/fail plus the first divergence, if any."""
    passed: bool
    num_compared: int
    index: Optional[int] = None
    actual: Any = None
    expected: Any = None

    def describe(self) -> str:
        if self.passed:
            return "CORRECT"
        return f"INCORRECT: [{self.index}]: {self.actual} (reference: {self.expected})"

    def raise_for_mismatch(self) -> None:
        if not self.passed:
            raise VerificationMismatch(self.index, self.actual, self.expected)


def _as_host_vector(values: SequenceLike) -> torch.Tensor:
    tensor = values if isinstance(values, torch.Tensor) else torch.as_tensor(values)
    return tensor.detach().reshape(-1).cpu()


def compare_results(actual: SequenceLike, expected: SequenceLike) -> VerificationOutcome:
    """Compare element by element and stop at the first mismatch.

    Raises:
        ConfigurationError: if the two sequences differ in length
    """
    actual_vec = _as_host_vector(actual)
    expected_vec = _as_host_vector(expected)
    n = actual_vec.numel()
    if expected_vec.numel() != n:
        raise ConfigurationError(
            f"Reference has {expected_vec.numel()} elements, output has {n}"
        )
    if n == 0:
        return VerificationOutcome(passed=True, num_compared=0)

    mismatches = torch.nonzero(actual_vec != expected_vec, as_tuple=False)
    if mismatches.numel() == 0:
        return VerificationOutcome(passed=True, num_compared=n)

    index = int(mismatches[0, 0])
    return VerificationOutcome(
        passed=False,
        num_compared=index + 1,
        index=index,
        actual=actual_vec[index].item(),
        expected=expected_vec[index].item(),
    )


def format_summary(stats: RunStatistics, exclusive: bool, operator_name: str = "Scan") -> str:
    direction = "exclusive" if exclusive else "inclusive"
    return (
        f"{operator_name} {direction} scan: {stats.iterations} iterations, "
        f"{stats.num_elements} elements, "
        f"{stats.avg_latency_ms:f} GPU ms, "
        f"{stats.gelements_per_sec:f} x10^9 elts/sec, "
        f"{stats.gbytes_per_sec:f} x10^9 B/sec, "
    )


def print_values(values: SequenceLike, value_printer: ValuePrinter = str, stream: Optional[TextIO] = None) -> None:
    stream = stream or sys.stdout
    print("\nData:", file=stream)
    print("".join(f"{value_printer(v)}, " for v in _as_host_vector(values).tolist()), file=stream)
    print(file=stream)


def report(
    stats: RunStatistics,
    outcome: VerificationOutcome,
    exclusive: bool,
    output: Optional[SequenceLike] = None,
    verbose: bool = False,
    value_printer: ValuePrinter = str,
    operator_name: str = "Scan",
    stream: Optional[TextIO] = None,
) -> str:
    """Print the summary line (and every output element when verbose).

    Purely observational. Returns the summary line that was printed.
    """
    stream = stream or sys.stdout
    if verbose and output is not None:
        print_values(output, value_printer=value_printer, stream=stream)
    line = format_summary(stats, exclusive, operator_name) + outcome.describe()
    print(line, file=stream)
    stream.flush()
    return line


__all__ = [
    "VerificationOutcome",
    "compare_results",
    "format_summary",
    "print_values",
    "report",
]
