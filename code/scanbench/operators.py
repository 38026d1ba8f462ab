"""Associative binary operators that parameterize a scan.

An operator is a pure `combine(a, b)` plus an identity value such that
`combine(identity, x) == x` for every x in the element domain. Operators
optionally carry a vectorized `accumulate` (inclusive cumulative form over
a 1-D tensor) that engines can use instead of an element-by-element fold.

Usage:
    from scanbench.operators import max_operator, sum_operator

    op = max_operator(torch.int32)
    op.combine(3, 5)   # 5
    op.identity()      # -2147483648
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

import torch

from scanbench.errors import ConfigurationError


@dataclass(frozen=True)
class ScanOperator:
    """Stateless operator descriptor, resolved once at construction time."""
    name: str
    combine: Callable[[Any, Any], Any]
    identity_value: Any
    dtype: Optional[torch.dtype] = None
    accumulate: Optional[Callable[[torch.Tensor], torch.Tensor]] = None

    def identity(self) -> Any:
        return self.identity_value

    def is_identity_for(self, values: torch.Tensor) -> bool:
        """Return True if the identity is neutral for every element of `values`.

        A fixed sentinel (e.g. zero for max) is only an identity when no real
        input is smaller than it. This detects that case on the actual data.
        """
        if values.numel() == 0:
            return True
        identity = torch.full_like(values, self.identity_value)
        combined = self.combine(identity, values)
        return bool(torch.equal(combined, values))


def _add(a: Any, b: Any) -> Any:
    return a + b


def _maximum(a: Any, b: Any) -> Any:
    if isinstance(a, torch.Tensor) and isinstance(b, torch.Tensor):
        return torch.maximum(a, b)
    return a if a > b else b


def _cumsum(values: torch.Tensor) -> torch.Tensor:
    # Integer cumsum promotes to int64 by default; keep the element type.
    return torch.cumsum(values, dim=0, dtype=values.dtype)


def _cummax(values: torch.Tensor) -> torch.Tensor:
    return torch.cummax(values, dim=0).values


def dtype_minimum(dtype: torch.dtype) -> Any:
    """Smallest value of `dtype`, usable as the identity of max."""
    if dtype == torch.bool:
        return False
    if dtype.is_complex:
        raise ConfigurationError(f"max is not defined for complex dtype {dtype}")
    if dtype.is_floating_point:
        return float("-inf")
    return torch.iinfo(dtype).min


def sum_operator(dtype: torch.dtype = torch.int32) -> ScanOperator:
    """Summation; identity 0."""
    zero = 0.0 if dtype.is_floating_point else 0
    return ScanOperator(
        name="sum",
        combine=_add,
        identity_value=zero,
        dtype=dtype,
        accumulate=_cumsum,
    )


def max_operator(dtype: torch.dtype = torch.int32, identity: Optional[Any] = None) -> ScanOperator:
    """Maximum; identity is the minimum of `dtype` unless given explicitly.

    An explicit identity is taken as-is, even one that is larger than some
    real inputs. The harness flags that case at run time rather than
    correcting it.
    """
    resolved = dtype_minimum(dtype) if identity is None else identity
    return ScanOperator(
        name="max",
        combine=_maximum,
        identity_value=resolved,
        dtype=dtype,
        accumulate=_cummax,
    )


OPERATOR_FACTORIES: Dict[str, Callable[..., ScanOperator]] = {
    "sum": sum_operator,
    "max": max_operator,
}


def get_operator(name: str, dtype: torch.dtype = torch.int32) -> ScanOperator:
    """Look up a standard operator by name."""
    try:
        factory = OPERATOR_FACTORIES[name]
    except KeyError:
        raise ConfigurationError(
            f"Unknown scan operator '{name}' (available: {', '.join(sorted(OPERATOR_FACTORIES))})"
        ) from None
    return factory(dtype)


__all__ = [
    "ScanOperator",
    "dtype_minimum",
    "sum_operator",
    "max_operator",
    "get_operator",
    "OPERATOR_FACTORIES",
]
