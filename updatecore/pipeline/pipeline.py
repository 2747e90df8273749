"""Runnable pipeline built from a manifest."""

import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List

from updatecore.config.models import ActionConfig, ManifestSpec
from updatecore.logging import get_logger
from updatecore.utils.hashing import hash_string

from .exceptions import PipelineInitError
from .models import Report
from .scm import Scm

logger = get_logger(__name__, component="pipeline")


@dataclass
class PipelineOptions:
    """Options shared by every pipeline of an engine.

    Attributes:
        workdir: Root directory of managed SCM working copies
    """

    workdir: Path = field(default_factory=lambda: Path(tempfile.gettempdir()) / "updatecore")


@dataclass
class Action:
    """An action (pull request...) attached to a pipeline."""

    action_id: str
    config: ActionConfig


@dataclass
class Pipeline:
    """
    A named, independently reportable unit of work.

    Build instances with ``Pipeline.init`` so that the manifest is validated
    and its SCM and action bindings are wired.

    Attributes:
        name: Display name
        pipeline_id: Stable identity
        config: Manifest the pipeline was built from (with pipeline_id filled in)
        scms: SCM bindings keyed by SCM id
        actions: Action bindings keyed by action id
        report: Mutable outcome
    """

    name: str
    pipeline_id: str
    config: ManifestSpec
    scms: Dict[str, Scm] = field(default_factory=dict)
    actions: Dict[str, Action] = field(default_factory=dict)
    report: Report = field(default_factory=Report)

    @classmethod
    def init(cls, config: ManifestSpec, options: PipelineOptions) -> "Pipeline":
        """Validate a manifest and build the pipeline it describes.

        An empty ``pipelineid`` defaults to the SHA256 of the manifest name.

        Args:
            config: Manifest to build from (left untouched)
            options: Engine-wide pipeline options

        Returns:
            The constructed pipeline

        Raises:
            PipelineInitError: With every problem found, if the manifest is invalid
        """
        problems: List[str] = []

        pipeline_id = config.pipeline_id or hash_string(config.name)
        config = config.model_copy(update={"pipeline_id": pipeline_id}, deep=True)

        problems.extend(_schema_problems(config))

        scms: Dict[str, Scm] = {}
        for scm_id, scm_config in config.scms.items():
            if not scm_config.kind.strip():
                continue
            try:
                scms[scm_id] = Scm(scm_config, options.workdir)
            except ValueError as e:
                problems.append(f"scms.{scm_id}: {e}")

        problems.extend(_reference_problems(config))

        if problems:
            raise PipelineInitError(config.name, problems)

        actions = {
            action_id: Action(action_id=action_id, config=action_config)
            for action_id, action_config in config.actions.items()
        }

        logger.debug(
            f"Pipeline initialized: {config.name}",
            extra={
                "event": "pipeline.initialized",
                "pipeline_id": pipeline_id,
                "scm_count": len(scms),
                "action_count": len(actions),
            },
        )

        return cls(
            name=config.name,
            pipeline_id=pipeline_id,
            config=config,
            scms=scms,
            actions=actions,
            report=Report(name=config.name, pipeline_id=pipeline_id),
        )


def _schema_problems(config: ManifestSpec) -> List[str]:
    """Check required fields the manifest models leave optional."""
    problems = []
    sections = {
        "scms": config.scms,
        "actions": config.actions,
        "sources": config.sources,
        "conditions": config.conditions,
        "targets": config.targets,
    }

    for section, entries in sections.items():
        for entry_id, entry in entries.items():
            if not entry.kind.strip():
                problems.append(f"{section}.{entry_id}: kind is required")

    autodiscovery = config.autodiscovery
    if autodiscovery is not None and not autodiscovery.group_by_is_valid:
        problems.append(
            f"autodiscovery.groupby must be one of 'all' or 'individual', "
            f"got '{autodiscovery.group_by}'"
        )

    return problems


def _reference_problems(config: ManifestSpec) -> List[str]:
    """Check that stages and actions only reference things that exist."""
    problems = []
    stage_groups = {
        "sources": config.sources,
        "conditions": config.conditions,
        "targets": config.targets,
    }

    for group, stages in stage_groups.items():
        for stage_id, stage in stages.items():
            where = f"{group}.{stage_id}"

            if stage.scm_id and stage.scm_id not in config.scms:
                problems.append(f"{where}: scmid '{stage.scm_id}' does not exist")

            if group != "sources" and stage.source_id and stage.source_id not in config.sources:
                problems.append(f"{where}: sourceid '{stage.source_id}' does not exist")

            for dependency in stage.depends_on:
                # "id" or "id:and"/"id:or" operators
                dependency_id = dependency.split(":", 1)[0]
                if dependency_id not in stages:
                    problems.append(f"{where}: dependson '{dependency}' does not exist in {group}")
                elif dependency_id == stage_id:
                    problems.append(f"{where}: stage cannot depend on itself")

    for action_id, action in config.actions.items():
        if action.scm_id and action.scm_id not in config.scms:
            problems.append(f"actions.{action_id}: scmid '{action.scm_id}' does not exist")

    return problems
