"""Collectors that turn Junos XML command output into Prometheus-style metrics."""

__version__ = "0.1.0"