"""Lightweight device helpers shared across the harness."""

from __future__ import annotations

from typing import Optional, Tuple, Union

import torch


def get_preferred_device() -> Tuple[torch.device, Optional[str]]:
    """Return the best available device and an error message if CUDA is absent."""
    if torch.cuda.is_available():
        return torch.device("cuda"), None
    return torch.device("cpu"), "CUDA not available"


def cuda_supported() -> bool:
    """Convenience helper to check CUDA availability."""
    return torch.cuda.is_available()


def resolve_device(device: Optional[Union[str, torch.device]] = None) -> torch.device:
    """Normalize a user-supplied device, defaulting to the preferred one."""
    if device is None:
        return get_preferred_device()[0]
    return torch.device(device)


def synchronize(device: torch.device) -> None:
    """Block until all queued work on `device` has completed."""
    if device.type == "cuda":
        torch.cuda.synchronize(device)


__all__ = ["get_preferred_device", "cuda_supported", "resolve_device", "synchronize"]
