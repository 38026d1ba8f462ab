"""Device buffer lifecycle for a single scan benchmark run.

The manager owns exactly two equal-length device buffers (source and
destination). Every failure path releases whatever was already allocated
before the error propagates, and `release()` is safe to call any number of
times.

Usage:
    with DeviceBufferManager(device) as buffers:
        buffers.acquire(num_elements, torch.int32)
        buffers.stage(host_values)
        engine.execute(buffers.destination, buffers.source, ...)
        host_out = buffers.retrieve()
"""

from __future__ import annotations

from typing import Optional, Protocol, Tuple

import torch

from scanbench.common.logger import get_logger
from scanbench.errors import AllocationError, ConfigurationError, TransferError

logger = get_logger(__name__)


class DeviceAllocator(Protocol):
    """Allocation backend used by the buffer manager."""

    def allocate(self, num_elements: int, dtype: torch.dtype, device: torch.device) -> torch.Tensor:
        ...

    def free(self, buffer: torch.Tensor) -> None:
        ...


class TorchAllocator:
    """Allocate through the torch caching allocator.

    Freeing drops the manager's reference; the caching allocator reclaims the
    block once no other reference remains.
    """

    def allocate(self, num_elements: int, dtype: torch.dtype, device: torch.device) -> torch.Tensor:
        return torch.empty(num_elements, dtype=dtype, device=device)

    def free(self, buffer: torch.Tensor) -> None:
        del buffer


class DeviceBufferManager:
    """Owns the source/destination buffer pair for the duration of one run."""

    def __init__(self, device: torch.device, allocator: Optional[DeviceAllocator] = None) -> None:
        self.device = device
        self.allocator: DeviceAllocator = allocator or TorchAllocator()
        self._source: Optional[torch.Tensor] = None
        self._destination: Optional[torch.Tensor] = None
        self.num_elements = 0
        self.dtype: Optional[torch.dtype] = None

    def __enter__(self) -> "DeviceBufferManager":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()

    @property
    def acquired(self) -> bool:
        return self._source is not None or self._destination is not None

    @property
    def source(self) -> torch.Tensor:
        if self._source is None:
            raise RuntimeError("Source buffer not acquired")
        return self._source

    @property
    def destination(self) -> torch.Tensor:
        if self._destination is None:
            raise RuntimeError("Destination buffer not acquired")
        return self._destination

    def acquire(self, num_elements: int, dtype: torch.dtype) -> Tuple[torch.Tensor, torch.Tensor]:
        """Allocate two buffers of `num_elements` elements of `dtype`."""
        if num_elements < 0:
            raise ConfigurationError(f"num_elements must be non-negative, got {num_elements}")
        if self.acquired:
            raise RuntimeError("Buffers already acquired; release them before acquiring again")

        self.num_elements = num_elements
        self.dtype = dtype
        self._source = self._allocate("source", num_elements, dtype)
        self._destination = self._allocate("destination", num_elements, dtype)
        element_size = torch.empty((), dtype=dtype).element_size()
        logger.debug(
            f"Acquired 2 x {num_elements * element_size} bytes on {self.device} ({dtype})"
        )
        return self._source, self._destination

    def _allocate(self, label: str, num_elements: int, dtype: torch.dtype) -> torch.Tensor:
        try:
            return self.allocator.allocate(num_elements, dtype, self.device)
        except Exception as exc:
            self.release()
            raise AllocationError(
                f"Allocation of {label} buffer ({num_elements} x {dtype}) on {self.device} failed: {exc}"
            ) from exc

    def stage(self, host_data: torch.Tensor) -> None:
        """Copy the host-resident input into the source buffer."""
        source = self.source
        if host_data.numel() != self.num_elements:
            self.release()
            raise ConfigurationError(
                f"Host input has {host_data.numel()} elements, buffers hold {self.num_elements}"
            )
        try:
            source.copy_(host_data.reshape(-1))
        except RuntimeError as exc:
            self.release()
            raise TransferError(f"Host-to-device copy into source failed: {exc}") from exc

    def retrieve(self) -> torch.Tensor:
        """Copy the destination buffer into a freshly allocated host tensor."""
        destination = self.destination
        try:
            host = torch.empty(self.num_elements, dtype=destination.dtype, device="cpu")
            host.copy_(destination)
        except RuntimeError as exc:
            self.release()
            raise TransferError(f"Device-to-host copy from destination failed: {exc}") from exc
        return host

    def release(self) -> None:
        """Free both buffers. No-op if nothing is held."""
        if self._source is None and self._destination is None:
            return
        source, self._source = self._source, None
        destination, self._destination = self._destination, None
        if source is not None:
            self.allocator.free(source)
        if destination is not None:
            self.allocator.free(destination)
        logger.debug(f"Released scan buffers on {self.device}")


__all__ = ["DeviceAllocator", "TorchAllocator", "DeviceBufferManager"]
