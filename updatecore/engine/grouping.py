"""Identity of pipelines generated by autodiscovery."""

from typing import Union

from updatecore.config.models import GroupBy
from updatecore.logging import get_logger
from updatecore.utils.hashing import compute_pipeline_id, hash_string

logger = get_logger(__name__, component="autodiscovery")


def resolve_pipeline_id(
    group_by: Union[GroupBy, str, None], parent_pipeline_id: str, manifest_name: str
) -> str:
    """Compute the pipeline id of a discovered manifest.

    ``all`` (also the default for an empty mode) reuses the parent id, so every
    manifest found by one parent lands in a single logical pipeline and a run
    produces at most one pull request. ``individual`` gives each discovered
    manifest its own id, derived from the parent id and the manifest name only.

    Args:
        group_by: Grouping mode of the parent's autodiscovery block
        parent_pipeline_id: Pipeline id of the parent
        manifest_name: Name of the discovered manifest

    Returns:
        The pipeline id to assign to the discovered manifest
    """
    mode = GroupBy(group_by) if group_by else GroupBy.ALL

    if mode == GroupBy.ALL:
        return parent_pipeline_id

    try:
        return compute_pipeline_id(parent_pipeline_id, manifest_name)
    except UnicodeEncodeError as e:
        logger.error(
            f"Failed to hash pipeline id of {manifest_name!r}: {e}",
            extra={"event": "discovery.pipeline_id.hash_failed", "parent_pipeline_id": parent_pipeline_id},
        )
        return hash_string("")
