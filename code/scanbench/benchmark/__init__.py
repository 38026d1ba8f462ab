"""Metrics, problems and verification for scan runs."""
