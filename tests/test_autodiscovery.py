"""Unit tests for the autodiscovery orchestrator.

Tests DiscoveryOrchestrator against fixture runners including:
- Feature gate and bootstrap pipeline
- ALL / INDIVIDUAL identity of generated pipelines
- Parent SCM and action propagation
- Per-manifest failure isolation vs. fatal crawler and decode failures
- Deprecated pullrequestid migration
"""

import logging

import pytest

from tests.helpers import FailingRunner, FixtureRunner, manifest_bytes
from updatecore.config.exceptions import ConfigurationError, ManifestDecodeError
from updatecore.config.models import (
    ActionConfig,
    AutoDiscoverySpec,
    ManifestSpec,
    ScmConfig,
)
from updatecore.crawlers import DEFAULT_CRAWLER_SPECS, CrawlerConfigurationError, CrawlerRunError
from updatecore.engine import (
    DEFAULT_ACTION_TITLE,
    LOCAL_AUTODISCOVERY_NAME,
    DiscoveryOrchestrator,
    Engine,
)
from updatecore.pipeline import PipelineOptions, Result
from updatecore.utils.hashing import compute_pipeline_id


@pytest.fixture
def engine(tmp_path):
    return Engine(PipelineOptions(workdir=tmp_path / "scm"))


@pytest.fixture
def scan_dir(tmp_path):
    path = tmp_path / "workspace"
    path.mkdir()
    return path


def add_parent(engine, name="Parent", pipeline_id="parent", scms=None, actions=None, **autodiscovery):
    """Append a parent pipeline declaring autodiscovery and return its index."""
    autodiscovery.setdefault("crawlers", {"dockerfile": {}})
    engine.instantiate(
        ManifestSpec(
            name=name,
            pipeline_id=pipeline_id,
            scms=scms or {},
            actions=actions or {},
            autodiscovery=AutoDiscoverySpec(**autodiscovery),
        )
    )
    return len(engine.pipelines) - 1


def run(engine, runner, scan_dir, experimental=True, bootstrap=False, **kwargs):
    orchestrator = DiscoveryOrchestrator(engine, runner_factory=runner, **kwargs)
    return orchestrator.run(
        bootstrap_enabled=bootstrap, experimental=experimental, working_dir=scan_dir
    )


GH = ScmConfig(kind="github", spec={"owner": "acme", "repository": "app"})
GL = ScmConfig(kind="gitlab", spec={"owner": "acme", "repository": "app"})


class TestFeatureGate:
    """Autodiscovery is a no-op unless experimental features are enabled."""

    def test_gate_off_leaves_collection_unchanged(self, engine, scan_dir, caplog):
        add_parent(engine)
        runner = FixtureRunner([manifest_bytes("a")])

        with caplog.at_level(logging.WARNING):
            result = run(engine, runner, scan_dir, experimental=False)

        assert result.skipped
        assert len(engine.pipelines) == 1
        assert runner.calls == []
        assert engine.pipelines[0].report.result == Result.UNSET
        assert "--experimental" in caplog.text

    def test_gate_off_without_autodiscovery_parents_is_silent(self, engine, scan_dir, caplog):
        engine.instantiate(ManifestSpec(name="plain"))

        with caplog.at_level(logging.WARNING):
            result = run(engine, FixtureRunner([]), scan_dir, experimental=False)

        assert not result.skipped
        assert "--experimental" not in caplog.text


class TestBootstrap:
    def test_local_autodiscovery_added_first(self, engine, scan_dir):
        runner = FixtureRunner([])

        run(engine, runner, scan_dir, bootstrap=True)

        assert engine.pipelines[0].name == LOCAL_AUTODISCOVERY_NAME
        assert runner.calls == [(DEFAULT_CRAWLER_SPECS, scan_dir)]
        assert engine.pipelines[0].report.result == Result.SUCCESS

    def test_bootstrap_added_even_when_gate_off(self, engine, scan_dir):
        result = run(engine, FixtureRunner([]), scan_dir, experimental=False, bootstrap=True)

        assert result.skipped
        assert [p.name for p in engine.pipelines] == [LOCAL_AUTODISCOVERY_NAME]

    def test_configurations_stay_aligned(self, engine, scan_dir):
        run(engine, FixtureRunner([manifest_bytes("a")]), scan_dir, bootstrap=True)

        assert len(engine.configurations) == len(engine.pipelines) == 2
        assert engine.configurations[1] is engine.pipelines[1].config


class TestIdentity:
    """Pipeline ids of generated pipelines."""

    @pytest.mark.parametrize("group_by", ["all", ""])
    def test_all_mode_reuses_parent_id(self, engine, scan_dir, group_by):
        add_parent(engine, group_by=group_by)
        runner = FixtureRunner([manifest_bytes(f"manifest {i}") for i in range(5)])

        run(engine, runner, scan_dir)

        generated = engine.generated_pipelines(1)
        assert len(generated) == 5
        assert {p.pipeline_id for p in generated} == {"parent"}

    def test_individual_mode_ids(self, engine, scan_dir):
        add_parent(engine, pipeline_id="local", group_by="individual")
        runner = FixtureRunner([manifest_bytes("service-a"), manifest_bytes("service-b")])

        run(engine, runner, scan_dir)

        ids = [p.pipeline_id for p in engine.generated_pipelines(1)]
        assert ids == [
            compute_pipeline_id("local", "service-a"),
            compute_pipeline_id("local", "service-b"),
        ]

    def test_individual_ids_stable_across_runs(self, tmp_path, scan_dir):
        ids = []
        for _ in range(2):
            engine = Engine(PipelineOptions(workdir=tmp_path))
            add_parent(engine, pipeline_id="local", group_by="individual")
            run(engine, FixtureRunner([manifest_bytes("service-a")]), scan_dir)
            ids.append(engine.pipelines[1].pipeline_id)

        assert ids[0] == ids[1]

    def test_individual_id_ignores_other_fields(self, engine, scan_dir):
        add_parent(engine, pipeline_id="local", group_by="individual")
        runner = FixtureRunner(
            [manifest_bytes("service-a", version="1"), manifest_bytes("service-a", title="x")]
        )

        run(engine, runner, scan_dir)

        first, second = engine.generated_pipelines(1)
        assert first.pipeline_id == second.pipeline_id


class TestParentConfigPropagation:
    def test_scms_copied_to_children(self, engine, scan_dir):
        add_parent(engine, scms={"gh": GH, "gl": GL})

        run(engine, FixtureRunner([manifest_bytes("a")]), scan_dir)

        parent, child = engine.pipelines
        assert set(child.config.scms) == {"gh", "gl"}
        child.config.scms["gh"].spec["owner"] = "mutated"
        assert parent.scms["gh"].config.spec["owner"] == "acme"
        assert GH.spec["owner"] == "acme"

    def test_scan_dir_follows_parent_scm(self, engine, scan_dir):
        add_parent(engine, scms={"gh": GH}, scm_id="gh")
        runner = FixtureRunner([])

        run(engine, runner, scan_dir)

        assert runner.calls[0][1] == engine.pipelines[0].scms["gh"].get_directory()

    def test_unknown_scm_falls_back_to_working_dir(self, engine, scan_dir):
        add_parent(engine, scm_id="missing")
        runner = FixtureRunner([])

        run(engine, runner, scan_dir)

        assert runner.calls[0][1] == scan_dir

    def test_action_title_defaults_to_parent_name(self, engine, scan_dir):
        add_parent(
            engine,
            name="MyApp",
            scms={"gh": GH},
            actions={"pr": ActionConfig(kind="github/pullrequest", scm_id="gh")},
            scm_id="gh",
            action_id="pr",
        )

        run(engine, FixtureRunner([manifest_bytes("a"), manifest_bytes("b")]), scan_dir)

        titles = [p.config.actions["gh"].title for p in engine.generated_pipelines(1)]
        assert titles == ["MyApp", "MyApp"]

    def test_action_title_fallback_for_unnamed_parent(self, engine, scan_dir):
        add_parent(
            engine,
            name="",
            scms={"gh": GH},
            actions={"pr": ActionConfig(kind="github/pullrequest")},
            scm_id="gh",
            action_id="pr",
        )

        run(engine, FixtureRunner([manifest_bytes("a")]), scan_dir)

        assert engine.pipelines[1].config.actions["gh"].title == DEFAULT_ACTION_TITLE

    def test_unknown_action_id_adds_no_action(self, engine, scan_dir):
        add_parent(engine, action_id="missing")

        run(engine, FixtureRunner([manifest_bytes("a")]), scan_dir)

        assert engine.pipelines[1].config.actions == {}

    def test_version_stamped_with_engine_version(self, engine, scan_dir):
        add_parent(engine)
        runner = FixtureRunner([manifest_bytes("a", version="0.1.0"), manifest_bytes("b")])

        run(engine, runner, scan_dir, engine_version="1.2.3")

        assert [p.config.version for p in engine.generated_pipelines(1)] == ["1.2.3", ""]


class TestFailureHandling:
    def test_invalid_manifest_isolated(self, engine, scan_dir):
        add_parent(engine, group_by="individual")
        broken = manifest_bytes("broken", targets={"t": {"kind": "file", "sourceid": "missing"}})
        runner = FixtureRunner([manifest_bytes("a"), broken, manifest_bytes("c")])

        result = run(engine, runner, scan_dir)

        assert [p.name for p in engine.generated_pipelines(1)] == ["a", "c"]
        report = engine.pipelines[0].report
        assert report.result == Result.FAILURE
        assert report.errors[0].startswith('"broken" - ')
        assert result.total_generated == 2
        assert result.total_errors == 1
        assert result.had_errors

    def test_manifest_missing_kind_isolated(self, engine, scan_dir):
        add_parent(engine, group_by="individual")
        broken = manifest_bytes("no kind", targets={"t": {"name": "no kind"}})
        runner = FixtureRunner([manifest_bytes("a"), broken, manifest_bytes("c")])

        result = run(engine, runner, scan_dir)

        assert [p.name for p in engine.generated_pipelines(1)] == ["a", "c"]
        report = engine.pipelines[0].report
        assert report.result == Result.FAILURE
        assert "targets.t: kind is required" in report.errors[0]
        assert result.total_errors == 1

    def test_manifest_with_invalid_groupby_isolated(self, engine, scan_dir):
        add_parent(engine, group_by="individual")
        broken = manifest_bytes(
            "bad grouping", autodiscovery={"crawlers": {"pip": None}, "groupby": "per-file"}
        )
        runner = FixtureRunner([broken, manifest_bytes("b")])

        run(engine, runner, scan_dir)

        assert [p.name for p in engine.generated_pipelines(1)] == ["b"]
        assert "groupby" in engine.pipelines[0].report.errors[0]

    def test_crawler_failure_aborts(self, engine, scan_dir):
        add_parent(engine)
        add_parent(engine, name="Second", pipeline_id="second")

        with pytest.raises(CrawlerRunError):
            run(engine, FailingRunner("disk on fire"), scan_dir)

        assert engine.pipelines[0].report.result == Result.FAILURE
        assert engine.pipelines[0].report.errors == ["disk on fire"]
        assert engine.pipelines[1].report.result == Result.UNSET
        assert len(engine.pipelines) == 2

    def test_runner_construction_failure_aborts(self, engine, scan_dir):
        add_parent(engine, crawlers={"npm": {}})

        with pytest.raises(CrawlerConfigurationError, match="Unknown crawler: npm"):
            DiscoveryOrchestrator(engine).run(
                bootstrap_enabled=False, experimental=True, working_dir=scan_dir
            )

        assert engine.pipelines[0].report.result == Result.FAILURE

    def test_decode_failure_aborts(self, engine, scan_dir):
        add_parent(engine)
        runner = FixtureRunner([manifest_bytes("a"), b"- not\n- a mapping\n", manifest_bytes("c")])

        with pytest.raises(ManifestDecodeError):
            run(engine, runner, scan_dir)

        assert [p.name for p in engine.generated_pipelines(1)] == ["a"]
        assert engine.pipelines[0].report.result == Result.FAILURE

    def test_empty_discovery_is_success(self, engine, scan_dir, caplog):
        add_parent(engine)

        with caplog.at_level(logging.INFO):
            result = run(engine, FixtureRunner([]), scan_dir)

        assert engine.pipelines[0].report.result == Result.SUCCESS
        assert engine.pipelines[0].report.finished_at is not None
        assert result.pipeline_stats[0].discovered_count == 0
        assert "nothing detected" in caplog.text


class TestDeprecatedPullRequestId:
    def test_mutually_exclusive_with_actionid(self, engine, scan_dir):
        add_parent(engine, action_id="pr", pullrequest_id="pr")
        runner = FixtureRunner([manifest_bytes("a")])

        with pytest.raises(ConfigurationError, match="mutually exclusive"):
            run(engine, runner, scan_dir)

        assert len(engine.pipelines) == 1
        assert runner.calls == []
        assert engine.pipelines[0].report.result == Result.FAILURE

    def test_migrated_to_actionid(self, engine, scan_dir, caplog):
        add_parent(
            engine,
            scms={"gh": GH},
            actions={"pr-1": ActionConfig(kind="github/pullrequest", title="deps")},
            scm_id="gh",
            pullrequest_id="pr-1",
        )
        runner = FixtureRunner([manifest_bytes("a")])

        with caplog.at_level(logging.WARNING):
            run(engine, runner, scan_dir)

        autodiscovery = engine.pipelines[0].config.autodiscovery
        assert autodiscovery.action_id == "pr-1"
        assert autodiscovery.pullrequest_id == ""
        assert engine.configurations[0] == engine.pipelines[0].config
        assert runner.calls[0][0] == autodiscovery
        assert engine.pipelines[1].config.actions["gh"].title == "deps"
        assert engine.pipelines[0].report.result == Result.SUCCESS
        assert "deprecated" in caplog.text


class TestVisitingOrder:
    def test_generated_pipelines_not_revisited(self, engine, scan_dir):
        add_parent(engine)
        child = manifest_bytes("nested", autodiscovery={"crawlers": {"pip": None}})
        runner = FixtureRunner([child])

        run(engine, runner, scan_dir)

        assert len(runner.calls) == 1
        assert engine.pipelines[1].config.has_autodiscovery
        assert engine.pipelines[1].report.result == Result.UNSET

    def test_plain_pipelines_skipped(self, engine, scan_dir):
        engine.instantiate(ManifestSpec(name="plain"))
        add_parent(engine)
        runner = FixtureRunner([])

        result = run(engine, runner, scan_dir)

        assert len(runner.calls) == 1
        assert engine.pipelines[0].report.result == Result.UNSET
        assert [s.pipeline_id for s in result.pipeline_stats] == ["parent"]

    def test_parents_visited_in_order(self, engine, scan_dir):
        add_parent(engine, name="First", pipeline_id="first")
        add_parent(engine, name="Second", pipeline_id="second", group_by="individual")

        run(engine, FixtureRunner([manifest_bytes("a")]), scan_dir)

        ids = [p.pipeline_id for p in engine.generated_pipelines(2)]
        assert ids == ["first", compute_pipeline_id("second", "a")]
