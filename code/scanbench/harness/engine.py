"""Scan engine capability interface and a torch reference engine.

The harness treats the engine as an opaque service: it is handed the
destination and source buffers, the element count, a parallelism hint, the
operator and the inclusive/exclusive flag, and must fill `destination` with
N results without touching `source`. Any object with a matching `execute`
method can be benchmarked.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional, Protocol

import torch

from scanbench.common.logger import get_logger
from scanbench.operators import ScanOperator

logger = get_logger(__name__)


class ProblemSizeGenre(Enum):
    """Expected input scale, forwarded to the engine unchanged."""
    UNKNOWN = "unknown"
    SMALL = "small"
    LARGE = "large"


class ScanEngine(Protocol):
    """Capability interface for anything that can perform a scan."""

    def execute(
        self,
        destination: torch.Tensor,
        source: torch.Tensor,
        num_elements: int,
        max_ctas: int,
        operator: ScanOperator,
        exclusive: bool,
        problem_size: ProblemSizeGenre = ProblemSizeGenre.UNKNOWN,
        debug: bool = False,
    ) -> Optional[bool]:
        """Run one scan. Return False (or raise) to report failure."""
        ...


class TorchScanEngine:
    """Reference engine built on torch cumulative ops.

    Uses the operator's vectorized `accumulate` when present, otherwise an
    ordered fold over `combine`. `max_ctas` and `problem_size` are accepted
    for interface compatibility and only reported in debug mode.
    """

    def execute(
        self,
        destination: torch.Tensor,
        source: torch.Tensor,
        num_elements: int,
        max_ctas: int,
        operator: ScanOperator,
        exclusive: bool,
        problem_size: ProblemSizeGenre = ProblemSizeGenre.UNKNOWN,
        debug: bool = False,
    ) -> Optional[bool]:
        if debug:
            logger.info(
                f"TorchScanEngine: {operator.name} {'exclusive' if exclusive else 'inclusive'} scan, "
                f"{num_elements} elements, max_ctas={max_ctas}, genre={problem_size.value}, "
                f"device={source.device}, dtype={source.dtype}"
            )
        if num_elements == 0:
            return True

        values = source[:num_elements]
        if operator.accumulate is not None:
            inclusive = operator.accumulate(values)
        else:
            inclusive = self._fold(values, operator)

        if exclusive:
            destination[0] = operator.identity()
            destination[1:num_elements].copy_(inclusive[:-1])
        else:
            destination[:num_elements].copy_(inclusive)
        return True

    @staticmethod
    def _fold(values: torch.Tensor, operator: ScanOperator) -> torch.Tensor:
        items = values.tolist()
        running = items[0]
        results = [running]
        for value in items[1:]:
            running = operator.combine(running, value)
            results.append(running)
        return torch.tensor(results, dtype=values.dtype, device=values.device)


__all__ = ["ProblemSizeGenre", "ScanEngine", "TorchScanEngine"]
