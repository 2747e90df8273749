"""Utility functions for identity hashing and time handling."""

from .hashing import compute_pipeline_id, hash_string
from .timestamps import format_timestamp_for_log, utc_now

__all__ = [
    # Hashing
    "compute_pipeline_id",
    "hash_string",
    # Timestamps
    "utc_now",
    "format_timestamp_for_log",
]
