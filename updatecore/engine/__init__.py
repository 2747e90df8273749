"""Engine and autodiscovery-to-pipeline synthesis."""

from .autodiscovery import LOCAL_AUTODISCOVERY_NAME, DiscoveryOrchestrator
from .engine import Engine
from .grouping import resolve_pipeline_id
from .merger import DEFAULT_ACTION_TITLE, merge_parent_config
from .models import DiscoveryRunResult, DiscoveryStats

__all__ = [
    "Engine",
    "DiscoveryOrchestrator",
    "DiscoveryRunResult",
    "DiscoveryStats",
    "resolve_pipeline_id",
    "merge_parent_config",
    "DEFAULT_ACTION_TITLE",
    "LOCAL_AUTODISCOVERY_NAME",
]
