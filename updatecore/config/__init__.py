"""Manifest and settings management for updatecore."""

from .environment import EnvironmentConfig, load_environment_config
from .exceptions import ConfigurationError, ManifestDecodeError
from .loader import (
    decode_manifest,
    dump_manifest,
    load_manifest,
    validate_manifest_file,
)
from .models import (
    ActionConfig,
    AutoDiscoverySpec,
    GroupBy,
    LogFormat,
    LogLevel,
    ManifestSpec,
    ScmConfig,
    StageConfig,
)

__all__ = [
    # Loader functions
    "load_manifest",
    "decode_manifest",
    "dump_manifest",
    "validate_manifest_file",
    "load_environment_config",
    # Models
    "ManifestSpec",
    "AutoDiscoverySpec",
    "ScmConfig",
    "ActionConfig",
    "StageConfig",
    "EnvironmentConfig",
    # Enums
    "GroupBy",
    "LogLevel",
    "LogFormat",
    # Exceptions
    "ConfigurationError",
    "ManifestDecodeError",
]
