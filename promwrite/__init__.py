"""Prometheus remote-write encoder and push client."""

__version__ = "1.0.0"
