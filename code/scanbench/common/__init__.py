"""Shared logging, device and NVTX helpers."""
