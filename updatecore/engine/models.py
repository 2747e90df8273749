"""Data models for autodiscovery run tracking and reporting."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List


@dataclass
class DiscoveryStats:
    """
    Outcome of one parent pipeline's discovery pass.

    Attributes:
        pipeline_id: Id of the parent pipeline
        pipeline_name: Display name of the parent pipeline
        working_dir: Directory the crawlers scanned
        discovered_count: Manifests returned by the crawlers
        generated_count: Pipelines successfully added to the engine
        errors: One message per manifest that failed to instantiate
        duration_seconds: Time spent on this parent
    """

    pipeline_id: str
    pipeline_name: str
    working_dir: str = ""
    discovered_count: int = 0
    generated_count: int = 0
    errors: List[str] = field(default_factory=list)
    duration_seconds: float = 0.0

    @property
    def had_errors(self) -> bool:
        return bool(self.errors)


@dataclass
class DiscoveryRunResult:
    """
    Aggregate results of a complete autodiscovery run.

    Attributes:
        run_started_at: UTC timestamp when the run began
        run_finished_at: UTC timestamp when the run completed
        pipeline_stats: Per-parent statistics, in visiting order
        total_discovered: Manifests returned by all crawlers
        total_generated: Pipelines added to the engine
        total_errors: Manifests that failed to instantiate
        had_errors: Whether any parent recorded an error
        skipped: Whether the run was skipped by the experimental gate
        total_duration_seconds: Total time for the run
    """

    run_started_at: datetime
    run_finished_at: datetime
    pipeline_stats: List[DiscoveryStats] = field(default_factory=list)
    total_discovered: int = 0
    total_generated: int = 0
    total_errors: int = 0
    had_errors: bool = False
    skipped: bool = False
    total_duration_seconds: float = 0.0

    def __post_init__(self):
        """Aggregate totals from per-parent statistics."""
        if self.pipeline_stats:
            self.total_discovered = sum(s.discovered_count for s in self.pipeline_stats)
            self.total_generated = sum(s.generated_count for s in self.pipeline_stats)
            self.total_errors = sum(len(s.errors) for s in self.pipeline_stats)
            self.had_errors = any(s.had_errors for s in self.pipeline_stats)

        if self.total_duration_seconds == 0.0:
            delta = self.run_finished_at - self.run_started_at
            self.total_duration_seconds = delta.total_seconds()
