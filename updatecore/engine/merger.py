"""Inject a parent pipeline's SCM and action settings into discovered manifests."""

from typing import TYPE_CHECKING, Optional

from updatecore.config.models import ActionConfig, AutoDiscoverySpec, GroupBy, ManifestSpec
from updatecore.logging import get_logger

if TYPE_CHECKING:
    from updatecore.pipeline import Pipeline

logger = get_logger(__name__, component="autodiscovery")

DEFAULT_ACTION_TITLE = "deps: bumping various version"


def default_action_title(parent_name: str, action_id: str) -> str:
    """Title used when an ``all``-grouped action has none.

    Every run regenerates the same grouped pipeline, so the title has to be
    stable: the parent name, or a generic title when the parent has no name.
    """
    if parent_name:
        return parent_name

    logger.warning(
        f"action title {action_id!r} used by autodiscovery is empty, "
        f"fallback to generic:\n\t=> {DEFAULT_ACTION_TITLE}",
        extra={"event": "discovery.action.default_title", "action_id": action_id},
    )
    return DEFAULT_ACTION_TITLE


def merge_parent_config(
    manifest: ManifestSpec,
    parent: "Pipeline",
    action_config: Optional[ActionConfig],
    autodiscovery: AutoDiscoverySpec,
    engine_version: str,
) -> ManifestSpec:
    """Return a copy of ``manifest`` carrying the parent's configuration.

    - ``scms`` is replaced by copies of every parent SCM, under the same ids.
    - When ``action_config`` is given, ``actions`` holds a single copy of it,
      keyed by the autodiscovery ``scmid``.
    - A non-empty ``version`` is replaced with ``engine_version``.

    None of the inputs are modified.

    Args:
        manifest: Decoded discovered manifest
        parent: Pipeline that declared the autodiscovery block
        action_config: Parent action resolved from ``actionid``, if any
        autodiscovery: Parent autodiscovery block (after deprecated field migration)
        engine_version: Version string of this engine

    Returns:
        The merged manifest
    """
    update = {
        "scms": {scm_id: scm.config.model_copy(deep=True) for scm_id, scm in parent.scms.items()},
    }

    if action_config is not None:
        action = action_config.model_copy(deep=True)
        if autodiscovery.effective_group_by == GroupBy.ALL and not action.title:
            action.title = default_action_title(parent.name, autodiscovery.action_id)
        # TODO: key by action_id once consumers stop looking actions up by scmid
        update["actions"] = {autodiscovery.scm_id: action}

    if manifest.version:
        update["version"] = engine_version

    return manifest.model_copy(update=update, deep=True)
