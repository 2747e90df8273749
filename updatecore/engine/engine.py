"""Engine: owner of every pipeline of a run."""

from pathlib import Path
from typing import Iterable, List, Optional, Union

from updatecore.config.exceptions import ConfigurationError
from updatecore.config.loader import load_manifest
from updatecore.config.models import ManifestSpec
from updatecore.logging import get_logger
from updatecore.pipeline import Pipeline, PipelineInitError, PipelineOptions

from .autodiscovery import DiscoveryOrchestrator, RunnerFactory
from .models import DiscoveryRunResult

logger = get_logger(__name__, component="engine")


class Engine:
    """
    Process-wide owner of the pipeline collection.

    ``pipelines`` and ``configurations`` are parallel lists: entry ``i`` of
    ``configurations`` is the manifest pipeline ``i`` was built from. Both are
    only ever appended to.
    """

    def __init__(self, options: Optional[PipelineOptions] = None):
        self.options = options or PipelineOptions()
        self.pipelines: List[Pipeline] = []
        self.configurations: List[ManifestSpec] = []

    def instantiate(self, manifest: ManifestSpec) -> Pipeline:
        """
        Build a pipeline from a manifest and append it to the engine.

        Nothing is appended if construction fails.

        Args:
            manifest: Hand-authored or discovered manifest

        Returns:
            The appended pipeline

        Raises:
            PipelineInitError: If the manifest does not describe a valid pipeline;
                the message starts with the quoted manifest name
        """
        pipeline = Pipeline.init(manifest, self.options)
        self.pipelines.append(pipeline)
        self.configurations.append(pipeline.config)
        return pipeline

    def load_manifests(self, paths: Iterable[Union[str, Path]]) -> List[Exception]:
        """
        Load hand-authored manifests and append their pipelines.

        A manifest that fails to load or build is logged and skipped; the
        remaining ones are still loaded.

        Returns:
            The errors encountered, one per failed manifest
        """
        errors: List[Exception] = []

        for path in paths:
            try:
                pipeline = self.instantiate(load_manifest(Path(path)))
            except (ConfigurationError, PipelineInitError) as e:
                logger.error(
                    f"Failed to load manifest {path}: {e}",
                    extra={"event": "manifest.load.failed", "path": str(path)},
                )
                errors.append(e)
                continue

            logger.debug(
                f"Loaded manifest {path}",
                extra={
                    "event": "manifest.loaded",
                    "path": str(path),
                    "pipeline_id": pipeline.pipeline_id,
                },
            )

        return errors

    def load_autodiscovery(
        self,
        default_enabled: bool,
        experimental: bool,
        working_dir: Optional[Union[str, Path]] = None,
        runner_factory: Optional[RunnerFactory] = None,
    ) -> DiscoveryRunResult:
        """
        Run autodiscovery and append the pipelines it generates.

        See ``DiscoveryOrchestrator.run`` for the error contract.
        """
        orchestrator = (
            DiscoveryOrchestrator(self, runner_factory=runner_factory)
            if runner_factory
            else DiscoveryOrchestrator(self)
        )
        return orchestrator.run(
            bootstrap_enabled=default_enabled,
            experimental=experimental,
            working_dir=working_dir,
        )

    def generated_pipelines(self, since: int) -> List[Pipeline]:
        """Pipelines appended after the first ``since`` ones."""
        return self.pipelines[since:]
