"""Helper utilities for conditional NVTX range markers.

Ranges are only pushed when explicitly enabled and CUDA is present, so pure
timing runs pay no marker overhead.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, Optional

import torch


@contextmanager
def nvtx_range(name: str, enable: Optional[bool] = None) -> Iterator[None]:
    """Conditionally add an NVTX range marker.

    Args:
        name: Name for the NVTX range
        enable: If True, add NVTX range; if False or None, no-op

    Example:
        with nvtx_range("scan_timed", enable=True):
            engine.execute(...)
    """
    if enable and torch.cuda.is_available():
        torch.cuda.nvtx.range_push(name)
        try:
            yield
        finally:
            torch.cuda.nvtx.range_pop()
    else:
        yield


def get_nvtx_enabled(config) -> bool:
    """Get NVTX enabled status from a ScanConfig (False when unset)."""
    return bool(getattr(config, "enable_nvtx", False))


__all__ = ["nvtx_range", "get_nvtx_enabled"]
