"""Tests for result comparison and the summary report."""

from __future__ import annotations

import io

import pytest
import torch

from scanbench.benchmark.metrics import compute_run_statistics
from scanbench.benchmark.verification import (
    VerificationOutcome,
    compare_results,
    format_summary,
    report,
)
from scanbench.errors import ConfigurationError, VerificationMismatch


def test_first_mismatch_is_reported() -> None:
    outcome = compare_results([1, 2, 3, 5], [1, 2, 3, 4])
    assert not outcome.passed
    assert outcome.index == 3
    assert outcome.actual == 5
    assert outcome.expected == 4


def test_stops_at_first_of_several_mismatches() -> None:
    outcome = compare_results(torch.tensor([0, 9, 9, 9]), torch.tensor([0, 1, 2, 3]))
    assert outcome.index == 1
    assert outcome.num_compared == 2


def test_matching_sequences_pass() -> None:
    outcome = compare_results(torch.arange(10), torch.arange(10))
    assert outcome.passed
    assert outcome.num_compared == 10
    assert outcome.index is None
    outcome.raise_for_mismatch()


def test_empty_sequences_pass() -> None:
    assert compare_results([], []).passed


def test_exact_equality_for_floats() -> None:
    outcome = compare_results(torch.tensor([1.0, 2.0]), torch.tensor([1.0, 2.0 + 1e-6]))
    assert not outcome.passed
    assert outcome.index == 1


def test_length_mismatch_is_configuration_error() -> None:
    with pytest.raises(ConfigurationError):
        compare_results([1, 2, 3], [1, 2])


def test_raise_for_mismatch() -> None:
    outcome = VerificationOutcome(passed=False, num_compared=4, index=3, actual=5, expected=4)
    with pytest.raises(VerificationMismatch) as excinfo:
        outcome.raise_for_mismatch()
    assert excinfo.value.index == 3
    assert "INCORRECT: [3]: 5 (reference: 4)" in str(excinfo.value)


def test_summary_line_fields() -> None:
    stats = compute_run_statistics([2.0, 2.0], num_elements=1_000_000, element_size=4)
    line = format_summary(stats, exclusive=True, operator_name="sum")
    assert line.startswith("sum exclusive scan: 2 iterations, 1000000 elements, ")
    assert "2.000000 GPU ms" in line
    assert "0.500000 x10^9 elts/sec" in line
    assert "6.000000 x10^9 B/sec" in line


def test_report_verbose_prints_values_before_summary() -> None:
    stats = compute_run_statistics([1.0], num_elements=3, element_size=4)
    outcome = compare_results([1, 2, 3], [1, 2, 3])
    stream = io.StringIO()
    line = report(
        stats,
        outcome,
        exclusive=False,
        output=torch.tensor([1, 2, 3]),
        verbose=True,
        value_printer=lambda v: f"<{v}>",
        stream=stream,
    )
    text = stream.getvalue()
    assert "Data:" in text
    assert "<1>, <2>, <3>, " in text
    assert text.index("Data:") < text.index(line)
    assert line.endswith("CORRECT")


def test_report_mismatch_does_not_raise() -> None:
    stats = compute_run_statistics([1.0], num_elements=4, element_size=4)
    outcome = compare_results([1, 2, 3, 5], [1, 2, 3, 4])
    stream = io.StringIO()
    line = report(stats, outcome, exclusive=False, stream=stream)
    assert line.endswith("INCORRECT: [3]: 5 (reference: 4)")
    assert "Data:" not in stream.getvalue()
