"""Manifest loading and decoding.

Hand-authored manifests are read from YAML files with ``load_manifest``.
Manifests emitted by crawlers arrive as raw bytes and go through
``decode_manifest``; both end up as the same ``ManifestSpec`` model.
"""

from pathlib import Path
from typing import List, Union

import yaml
from pydantic import ValidationError

from .exceptions import ConfigurationError, ManifestDecodeError
from .models import ManifestSpec
from .validators import check_for_warnings, emit_warnings


def load_manifest(manifest_path: Path) -> ManifestSpec:
    """
    Load and validate a hand-authored manifest from a YAML file.

    Args:
        manifest_path: Path to the manifest file

    Returns:
        Validated ManifestSpec

    Raises:
        ConfigurationError: If the file is missing, unreadable or invalid
    """
    try:
        with open(manifest_path, "r", encoding="utf-8") as f:
            manifest_dict = yaml.safe_load(f)
    except FileNotFoundError:
        raise ConfigurationError(
            f"Manifest file not found: {manifest_path}",
            suggestions=[
                f"Ensure {manifest_path} exists and is readable",
                "Check the path passed with --config",
            ],
        )
    except yaml.YAMLError as e:
        raise ConfigurationError(
            f"Failed to parse YAML manifest {manifest_path}: {e}",
            suggestions=[
                "Check YAML syntax in your manifest",
                "Ensure proper indentation (use spaces, not tabs)",
            ],
        )
    except OSError as e:
        raise ConfigurationError(
            f"Failed to read manifest file {manifest_path}: {e}",
            suggestions=[
                f"Ensure {manifest_path} is readable",
                "Check file permissions",
            ],
        )

    if not manifest_dict:
        raise ConfigurationError(
            f"Manifest file is empty: {manifest_path}",
            suggestions=["Add at least a name and a stage or autodiscovery block"],
        )

    if not isinstance(manifest_dict, dict):
        raise ConfigurationError(
            f"Manifest {manifest_path} must be a YAML mapping, got {type(manifest_dict).__name__}",
        )

    warnings = check_for_warnings(manifest_dict)
    if warnings:
        emit_warnings(warnings)

    try:
        return ManifestSpec.model_validate(manifest_dict)
    except ValidationError as e:
        raise ConfigurationError(
            f"Manifest validation failed: {manifest_path}",
            errors=format_validation_errors(e),
            suggestions=[
                "Check that all required fields are present",
                "Verify field types match the expected schema",
            ],
        )


def decode_manifest(raw: Union[bytes, str], origin: str = "") -> ManifestSpec:
    """
    Decode a manifest emitted by a crawler.

    Only the document structure is checked here; a structurally valid manifest
    with missing stage kinds is rejected later by ``Pipeline.init``.

    Args:
        raw: YAML document as bytes (or text)
        origin: Label used in error messages to locate the manifest

    Returns:
        Decoded ManifestSpec

    Raises:
        ManifestDecodeError: If the bytes are not a valid manifest document
    """
    label = origin or "discovered manifest"
    try:
        text = raw.decode("utf-8") if isinstance(raw, bytes) else raw
        manifest_dict = yaml.safe_load(text)
    except UnicodeDecodeError as e:
        raise ManifestDecodeError(f"{label} is not valid UTF-8: {e}", origin=origin)
    except yaml.YAMLError as e:
        raise ManifestDecodeError(f"Failed to parse YAML of {label}: {e}", origin=origin)

    if not isinstance(manifest_dict, dict):
        kind = "empty" if manifest_dict is None else type(manifest_dict).__name__
        raise ManifestDecodeError(
            f"{label} must be a YAML mapping, got {kind} document", origin=origin
        )

    try:
        return ManifestSpec.model_validate(manifest_dict)
    except ValidationError as e:
        raise ManifestDecodeError(
            f"Failed to decode {label}",
            origin=origin,
            errors=format_validation_errors(e),
        )


def dump_manifest(manifest: ManifestSpec) -> str:
    """Serialize a manifest back to its YAML wire format."""
    return yaml.safe_dump(manifest.to_wire(), sort_keys=False)


def format_validation_errors(error: ValidationError) -> List[str]:
    """Convert Pydantic validation errors to human-readable messages."""
    errors = []
    for item in error.errors():
        field_path = " -> ".join(str(loc) for loc in item["loc"]) or "<root>"
        error_msg = item["msg"]
        error_type = item["type"]

        if error_type == "missing":
            errors.append(f"Missing required field: {field_path}")
        elif error_type in ["string_type", "int_type", "bool_type", "list_type", "dict_type"]:
            expected_type = error_type.replace("_type", "")
            errors.append(
                f"Invalid type for '{field_path}': expected {expected_type}, got {item.get('input')!r}"
            )
        else:
            errors.append(f"{field_path}: {error_msg}")
    return errors


def validate_manifest_file(manifest_path: Path) -> bool:
    """
    Validate a manifest file without instantiating a pipeline.

    Args:
        manifest_path: Path to manifest file

    Returns:
        True if valid, False otherwise (errors printed to stdout)
    """
    try:
        load_manifest(manifest_path)
    except ConfigurationError as e:
        print(f"✗ Manifest validation failed:\n{e}")
        return False

    print(f"✓ Manifest {manifest_path} is valid")
    return True

