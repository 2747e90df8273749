"""Hashing utilities for stable pipeline identities.

A generated pipeline must keep the same id from one run to the next so that
actions it triggers (pull requests...) are recognized instead of duplicated.
Ids are therefore derived only from stable inputs: the parent pipeline id and
the discovered manifest name, never from version filters or other fields that
change between runs.
"""

import hashlib

PIPELINE_ID_SEPARATOR = "/"


def compute_pipeline_id(parent_pipeline_id: str, manifest_name: str) -> str:
    """Compute the id of a pipeline discovered under ``parent_pipeline_id``.

    The id is the SHA256 of ``parent_pipeline_id + "/" + manifest_name``.
    Prefixing with the parent id keeps children of different parents apart.

    Args:
        parent_pipeline_id: Pipeline id of the autodiscovery pipeline
        manifest_name: Name of the discovered manifest

    Returns:
        Hexadecimal SHA256 digest (64 characters)

    Example:
        >>> compute_pipeline_id("local", "service-a") == compute_pipeline_id("local", "service-a")
        True
    """
    hash_obj = hashlib.sha256()
    hash_obj.update(
        f"{parent_pipeline_id}{PIPELINE_ID_SEPARATOR}{manifest_name}".encode("utf-8")
    )
    return hash_obj.hexdigest()


def hash_string(value: str) -> str:
    """Compute SHA256 hash of a string value.

    Args:
        value: String to hash

    Returns:
        Hexadecimal string representation of SHA256 hash (64 characters)
    """
    return hashlib.sha256(value.encode("utf-8")).hexdigest()
