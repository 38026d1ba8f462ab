"""Global pytest configuration.

We explicitly disable auto-loading of external pytest plugins to prevent
environment-provided plugins from interfering with test discovery and capture
in this repository's harness. Shared fixtures for the scan harness tests live
here as well; everything runs on CPU.
"""

import os
import sys
from pathlib import Path

# Guard against site-wide plugins that can change stdout handling (causing
# Illegal seek/OSError on teardown in CI and local shells).
os.environ.setdefault("PYTEST_DISABLE_PLUGIN_AUTOLOAD", "1")

REPO_ROOT = Path(__file__).resolve().parent
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

import pytest
import torch


class TrackingAllocator:
    """Allocator double that counts live buffers and can fail on demand.

    Args:
        fail_on: 1-based allocation number that raises (None = never)
    """

    def __init__(self, fail_on=None):
        self.fail_on = fail_on
        self.allocations = 0
        self.frees = 0
        self._live = {}

    @property
    def live(self) -> int:
        return len(self._live)

    def allocate(self, num_elements, dtype, device):
        self.allocations += 1
        if self.fail_on == self.allocations:
            raise RuntimeError("CUDA out of memory (simulated)")
        buffer = torch.empty(num_elements, dtype=dtype, device=device)
        self._live[id(buffer)] = buffer
        return buffer

    def free(self, buffer):
        if id(buffer) not in self._live:
            raise AssertionError("free() called on a buffer that is not live (double free?)")
        del self._live[id(buffer)]
        self.frees += 1


@pytest.fixture
def cpu_device() -> torch.device:
    return torch.device("cpu")


@pytest.fixture
def tracking_allocator() -> TrackingAllocator:
    return TrackingAllocator()


@pytest.fixture
def allocator_factory():
    return TrackingAllocator
