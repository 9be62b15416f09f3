"""Tibber Pulse local HTTP API to Prometheus metrics bridge."""

__version__ = "0.1.0"
