"""Autodiscovery engine that turns workspace scans into update pipelines."""

__version__ = "0.4.0"
