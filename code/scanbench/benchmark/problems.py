"""Scan problem construction and the sequential host reference."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Optional, Sequence, Union

import numpy as np
import torch

from scanbench.errors import ConfigurationError
from scanbench.operators import ScanOperator

INPUT_KINDS = ("ones", "random", "sequence")


@dataclass
class ScanProblem:
    """Input, expected output and scan direction for one benchmark run."""
    values: torch.Tensor
    reference: torch.Tensor
    operator: ScanOperator
    exclusive: bool = False

    def __post_init__(self) -> None:
        if self.values.dim() != 1 or self.reference.dim() != 1:
            raise ConfigurationError("values and reference must be 1-D")
        if self.reference.numel() != self.values.numel():
            raise ConfigurationError(
                f"Reference length {self.reference.numel()} != input length {self.values.numel()}"
            )
        _check_operator_dtype(self.operator, self.values.dtype)

    @property
    def num_elements(self) -> int:
        return self.values.numel()

    @property
    def dtype(self) -> torch.dtype:
        return self.values.dtype

    @property
    def element_size(self) -> int:
        return self.values.element_size()


def _check_operator_dtype(operator: ScanOperator, dtype: torch.dtype) -> None:
    if operator.dtype is not None and operator.dtype != dtype:
        raise ConfigurationError(
            f"Operator '{operator.name}' was built for {operator.dtype}, input is {dtype}"
        )


def reference_scan(values: Sequence[Any], operator: ScanOperator, exclusive: bool = False) -> List[Any]:
    """Sequential scan on the host; the ground truth for verification.

    Inclusive: out[i] = combine over values[0..i].
    Exclusive: out[0] = identity, out[i] = combine over values[0..i-1].

    Tensor input is folded in its own fixed-width element type, so integer
    sums wrap on overflow exactly like a device scan does. Plain sequences
    are folded with Python values.
    """
    if isinstance(values, torch.Tensor):
        items = values.detach().reshape(-1).cpu().numpy()
        identity = torch.tensor(operator.identity(), dtype=values.dtype).numpy()[()]
    else:
        items = list(values)
        identity = operator.identity()
    out: List[Any] = []
    running = None
    with np.errstate(over="ignore"):
        for i, value in enumerate(items):
            if exclusive:
                out.append(identity if i == 0 else running)
            running = value if i == 0 else operator.combine(running, value)
            if not exclusive:
                out.append(running)
    return [item.item() if isinstance(item, np.generic) else item for item in out]


def generate_input(
    num_elements: int,
    dtype: torch.dtype = torch.int32,
    kind: str = "ones",
    seed: Optional[int] = None,
) -> torch.Tensor:
    """Host-resident input data.

    kind:
        "ones": every element is 1
        "sequence": 0, 1, 2, ...
        "random": uniform integers in [-128, 128), cast to dtype
    """
    if num_elements < 0:
        raise ConfigurationError(f"num_elements must be non-negative, got {num_elements}")
    if kind == "ones":
        return torch.ones(num_elements, dtype=dtype)
    if kind == "sequence":
        return torch.arange(num_elements).to(dtype)
    if kind == "random":
        rng = np.random.default_rng(seed)
        data = rng.integers(-128, 128, size=num_elements, dtype=np.int64)
        return torch.from_numpy(data).to(dtype)
    raise ConfigurationError(f"Unknown input kind '{kind}' (available: {', '.join(INPUT_KINDS)})")


def make_problem(
    values: Union[torch.Tensor, Sequence[Any]],
    operator: ScanOperator,
    exclusive: bool = False,
    reference: Optional[Union[torch.Tensor, Sequence[Any]]] = None,
) -> ScanProblem:
    """Build a problem, computing the reference on the host when not supplied.

    Raises:
        ConfigurationError: operator built for another element type, or
            values/reference that cannot be represented in that type.
    """
    try:
        if isinstance(values, torch.Tensor):
            host_values = values.detach().reshape(-1).cpu()
        else:
            host_values = torch.as_tensor(values, dtype=operator.dtype)
        _check_operator_dtype(operator, host_values.dtype)
        if reference is None:
            reference = reference_scan(host_values, operator, exclusive)
        host_reference = torch.as_tensor(reference, dtype=host_values.dtype).reshape(-1)
    except (RuntimeError, OverflowError, TypeError) as exc:
        raise ConfigurationError(f"Cannot build {operator.name} scan problem: {exc}") from exc
    return ScanProblem(
        values=host_values,
        reference=host_reference,
        operator=operator,
        exclusive=exclusive,
    )


__all__ = ["INPUT_KINDS", "ScanProblem", "reference_scan", "generate_input", "make_problem"]
