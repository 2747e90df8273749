"""Additional validation utilities for manifests."""

import warnings
from typing import Any, Dict, List


def check_for_warnings(manifest_dict: Dict[str, Any]) -> List[str]:
    """
    Check a raw manifest for potential issues and return warnings.

    Args:
        manifest_dict: Raw manifest dictionary

    Returns:
        List of warning messages
    """
    warning_messages = []
    name = manifest_dict.get("name") or "<unnamed>"

    if not manifest_dict.get("name"):
        warning_messages.append("Manifest has no name")

    autodiscovery = manifest_dict.get("autodiscovery")
    if isinstance(autodiscovery, dict):
        if autodiscovery.get("pullrequestid"):
            warning_messages.append(
                f"Manifest '{name}' uses the deprecated autodiscovery.pullrequestid, "
                "use autodiscovery.actionid instead"
            )

        if autodiscovery.get("crawlers") is None:
            warning_messages.append(
                f"Manifest '{name}' declares autodiscovery without crawlers; it will be skipped"
            )

        group_by = autodiscovery.get("groupby")
        if isinstance(group_by, str) and group_by and group_by != group_by.strip().lower():
            warning_messages.append(
                f"Manifest '{name}' groupby '{group_by}' will be read as "
                f"'{group_by.strip().lower()}'"
            )

    return warning_messages


def emit_warnings(warning_messages: List[str]) -> None:
    """
    Emit warning messages using Python's warnings module.

    Args:
        warning_messages: List of warning messages to emit
    """
    for message in warning_messages:
        warnings.warn(message, UserWarning, stacklevel=2)
