"""Autodiscovery: turn crawler output into pipelines of the engine."""

import time
from pathlib import Path
from typing import TYPE_CHECKING, Callable, List, Optional, Union
from uuid import uuid4

from updatecore import __version__
from updatecore.config.exceptions import ConfigurationError, ManifestDecodeError
from updatecore.config.loader import decode_manifest
from updatecore.config.models import ActionConfig, AutoDiscoverySpec, ManifestSpec
from updatecore.crawlers import DEFAULT_CRAWLER_SPECS, CrawlerRunner
from updatecore.logging import get_logger
from updatecore.logging.context import log_context
from updatecore.pipeline import PipelineInitError, Result
from updatecore.utils.timestamps import format_timestamp_for_log, utc_now

from .grouping import resolve_pipeline_id
from .merger import merge_parent_config
from .models import DiscoveryRunResult, DiscoveryStats

if TYPE_CHECKING:
    from .engine import Engine

logger = get_logger(__name__, component="autodiscovery")

LOCAL_AUTODISCOVERY_NAME = "Local AutoDiscovery"

EXPERIMENTAL_HINT = (
    "The 'autodiscovery' feature requires the experimental flag to work, such as:\n"
    "\t`updatecore --experimental` or UPDATECORE_EXPERIMENTAL=true"
)

# Anything built from (autodiscovery spec, directory) exposing run() -> List[bytes]
RunnerFactory = Callable[[AutoDiscoverySpec, Path], CrawlerRunner]


class DiscoveryOrchestrator:
    """
    Runs autodiscovery for every pipeline of an engine that declares it.

    Parents are visited one at a time, in engine order, and each parent's
    discovered manifests are processed in discovery order. Pipelines appended
    during the pass are not visited.

    Every write to a parent pipeline goes through ``engine.pipelines[index]``.
    """

    def __init__(
        self,
        engine: "Engine",
        runner_factory: RunnerFactory = CrawlerRunner,
        engine_version: str = __version__,
    ):
        """
        Args:
            engine: Engine owning the pipeline collection
            runner_factory: Builds the crawler runner of a parent pipeline
            engine_version: Version stamped on discovered manifests that declare one
        """
        self.engine = engine
        self.runner_factory = runner_factory
        self.engine_version = engine_version

    def run(
        self,
        bootstrap_enabled: bool,
        experimental: bool,
        working_dir: Optional[Union[str, Path]] = None,
    ) -> DiscoveryRunResult:
        """
        Discover and append pipelines for every autodiscovery parent.

        Args:
            bootstrap_enabled: Add the implicit "Local AutoDiscovery" pipeline first
            experimental: Experimental features gate; autodiscovery is a no-op without it
            working_dir: Directory scanned by parents without an SCM (default: cwd)

        Returns:
            DiscoveryRunResult with per-parent statistics

        Raises:
            ConfigurationError: If a parent sets both actionid and pullrequestid
            ManifestDecodeError: If crawler output cannot be decoded
            CrawlerError: If a crawler cannot be built or fails
        """
        run_started_at = utc_now()
        scan_dir = Path(working_dir) if working_dir else Path.cwd()
        stats: List[DiscoveryStats] = []

        with log_context(run_id=uuid4().hex):
            if bootstrap_enabled:
                logger.debug("Default autodiscovery crawlers enabled")
                self._add_bootstrap_pipeline()

            logger.info(
                "Auto Discovery",
                extra={
                    "event": "discovery.run.started",
                    "pipeline_count": len(self.engine.pipelines),
                    "working_dir": str(scan_dir),
                },
            )

            for index in range(len(self.engine.pipelines)):
                if not self.engine.pipelines[index].config.has_autodiscovery:
                    continue

                if not experimental:
                    logger.warning(
                        EXPERIMENTAL_HINT, extra={"event": "discovery.run.skipped"}
                    )
                    return DiscoveryRunResult(
                        run_started_at=run_started_at,
                        run_finished_at=utc_now(),
                        skipped=True,
                    )

                stats.append(self._discover(index, scan_dir))

            result = DiscoveryRunResult(
                run_started_at=run_started_at,
                run_finished_at=utc_now(),
                pipeline_stats=stats,
            )

            logger.info(
                "Auto Discovery completed",
                extra={
                    "event": "discovery.run.completed",
                    "run_started_at": format_timestamp_for_log(result.run_started_at),
                    "duration_ms": int(result.total_duration_seconds * 1000),
                    "total_discovered": result.total_discovered,
                    "total_generated": result.total_generated,
                    "total_errors": result.total_errors,
                },
            )

            return result

    def _add_bootstrap_pipeline(self) -> None:
        manifest = ManifestSpec(
            name=LOCAL_AUTODISCOVERY_NAME, autodiscovery=DEFAULT_CRAWLER_SPECS
        )
        try:
            self.engine.instantiate(manifest)
        except PipelineInitError as e:
            logger.error(
                f"Failed to create the local autodiscovery pipeline: {e}",
                extra={"event": "discovery.bootstrap.failed"},
            )

    def _discover(self, index: int, working_dir: Path) -> DiscoveryStats:
        """Run one parent's discovery pass and append the pipelines it yields."""
        parent = self.engine.pipelines[index]
        started = time.time()
        stats = DiscoveryStats(pipeline_id=parent.pipeline_id, pipeline_name=parent.name)
        self.engine.pipelines[index].report.started_at = utc_now()

        with log_context(pipeline_id=parent.pipeline_id, pipeline_name=parent.name):
            logger.info(parent.name, extra={"event": "discovery.pipeline.started"})

            try:
                autodiscovery = self._migrate_deprecated_fields(index)
            except ConfigurationError as e:
                self._mark_failure(index, str(e))
                logger.error(
                    f"Invalid autodiscovery block in {parent.name}: {e.message}",
                    extra={"event": "discovery.pipeline.invalid"},
                )
                raise

            parent = self.engine.pipelines[index]
            scan_dir = self._resolve_working_dir(index, autodiscovery, working_dir)
            action_config = self._resolve_action_config(index, autodiscovery)
            stats.working_dir = str(scan_dir)

            try:
                runner = self.runner_factory(autodiscovery, scan_dir)
                raw_manifests = list(runner.run())
            except Exception as e:
                self._mark_failure(index, str(e))
                logger.error(
                    f"Autodiscovery failed for {parent.name}: {e}",
                    extra={
                        "event": "discovery.pipeline.failed",
                        "error_type": type(e).__name__,
                    },
                )
                raise

            stats.discovered_count = len(raw_manifests)
            if not raw_manifests:
                logger.info("nothing detected", extra={"event": "discovery.pipeline.empty"})

            errors: List[PipelineInitError] = []
            for position, raw_manifest in enumerate(raw_manifests, 1):
                try:
                    manifest = decode_manifest(
                        raw_manifest, origin=f"manifest #{position} discovered by {parent.name!r}"
                    )
                except ManifestDecodeError as e:
                    self._mark_failure(index, str(e))
                    logger.error(
                        f"Failed to decode discovered manifest: {e}",
                        extra={"event": "discovery.manifest.decode_failed", "position": position},
                    )
                    raise

                manifest = manifest.model_copy(
                    update={
                        "pipeline_id": resolve_pipeline_id(
                            autodiscovery.effective_group_by, parent.config.pipeline_id, manifest.name
                        )
                    }
                )
                manifest = merge_parent_config(
                    manifest, parent, action_config, autodiscovery, self.engine_version
                )

                try:
                    self.engine.instantiate(manifest)
                    stats.generated_count += 1
                except PipelineInitError as e:
                    # The pipeline is not added; siblings are still processed
                    self._mark_failure(index, str(e))
                    errors.append(e)
                    stats.errors.append(str(e))

                if errors:
                    logger.error(
                        "Error(s) happened while generating pipeline manifest",
                        extra={"event": "discovery.manifest.failed", "error_count": len(errors)},
                    )
                    for error in errors:
                        logger.error(str(error))

            if self.engine.pipelines[index].report.result != Result.FAILURE:
                self.engine.pipelines[index].report.result = Result.SUCCESS

            self.engine.pipelines[index].report.finished_at = utc_now()
            stats.duration_seconds = time.time() - started

            logger.info(
                f"Discovered {stats.generated_count} pipeline(s) for {parent.name}",
                extra={
                    "event": "discovery.pipeline.completed",
                    "discovered": stats.discovered_count,
                    "generated": stats.generated_count,
                    "error_count": len(stats.errors),
                    "result": self.engine.pipelines[index].report.result.value,
                },
            )

        return stats

    def _migrate_deprecated_fields(self, index: int) -> AutoDiscoverySpec:
        """Move ``pullrequestid`` into ``actionid``, writing the result back.

        Raises:
            ConfigurationError: If both keywords are set
        """
        config = self.engine.pipelines[index].config
        autodiscovery = config.autodiscovery

        if not autodiscovery.pullrequest_id:
            return autodiscovery

        if autodiscovery.action_id:
            raise ConfigurationError(
                "the `autodiscovery.pullrequestid` and `autodiscovery.actionid` keywords "
                "are mutually exclusive",
                suggestions=[
                    "Use only `autodiscovery.actionid`; `autodiscovery.pullrequestid` is deprecated",
                ],
            )

        logger.warning(
            "The `autodiscovery.pullrequestid` keyword is deprecated in favor of "
            "`autodiscovery.actionid`, please update this manifest. Execution continues "
            "using `autodiscovery.pullrequestid` as `autodiscovery.actionid`.",
            extra={"event": "discovery.deprecated_field", "action_id": autodiscovery.pullrequest_id},
        )

        migrated = autodiscovery.model_copy(
            update={"action_id": autodiscovery.pullrequest_id, "pullrequest_id": ""}
        )
        migrated_config = config.model_copy(update={"autodiscovery": migrated})
        self.engine.pipelines[index].config = migrated_config
        self.engine.configurations[index] = migrated_config
        return migrated

    def _resolve_working_dir(
        self, index: int, autodiscovery: AutoDiscoverySpec, default: Path
    ) -> Path:
        if autodiscovery.scm_id:
            scm = self.engine.pipelines[index].scms.get(autodiscovery.scm_id)
            if scm is not None:
                return scm.get_directory()
        return default

    def _resolve_action_config(
        self, index: int, autodiscovery: AutoDiscoverySpec
    ) -> Optional[ActionConfig]:
        if autodiscovery.action_id:
            action = self.engine.pipelines[index].actions.get(autodiscovery.action_id)
            if action is not None:
                return action.config
        return None

    def _mark_failure(self, index: int, message: str) -> None:
        report = self.engine.pipelines[index].report
        report.result = Result.FAILURE
        report.errors.append(message)
