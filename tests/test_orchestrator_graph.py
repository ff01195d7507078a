"""Tests for orchestrator graph routing, nodes and full pipeline runs."""
import json
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from samples import FIXED_NOW, INVALID_UTF8, PET_PROFILE_SPEC
from suite_doctor.analyzers.exceptions import DiscoveryError
from suite_doctor.analyzers.maintainability_analyzer import MaintainabilityAnalyzer
from suite_doctor.models import PipelineStage
from suite_doctor.orchestrator import artifacts
from suite_doctor.orchestrator.exceptions import GraphBuildError, PipelineAbortedError
from suite_doctor.orchestrator.graph import (
    ABORT,
    DONE,
    STAGE_ORDER,
    abort_node,
    build_graph,
    make_discover_node,
    make_maintainability_node,
    make_router,
    next_stage,
    run_enhancement,
    stage_enabled,
)
from suite_doctor.orchestrator.state import make_initial_state


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def make_state(options, **overrides):
    state = make_initial_state(options, started_at=FIXED_NOW)
    state.update(overrides)
    return state


def load_json_without_timestamp(path: Path) -> dict:
    payload = json.loads(path.read_text(encoding="utf-8"))
    payload.pop("timestamp")
    return payload


JSON_REPORTS = (
    artifacts.REFACTORING_JSON,
    artifacts.MAINTAINABILITY_JSON,
    artifacts.QUALITY_JSON,
)


# ---------------------------------------------------------------------------
# Routing
# ---------------------------------------------------------------------------

class TestRouting:
    """Tests for stage_enabled(), next_stage() and make_router()."""

    def test_default_order_skips_apply(self, make_options):
        options = make_options()
        order = []
        stage = next_stage(None, options)
        while stage != DONE:
            order.append(stage)
            stage = next_stage(stage, options)
        assert order == ["refactor", "maintainability", "quality", "documentation", "report"]

    def test_apply_follows_refactor(self, make_options):
        assert next_stage("refactor", make_options(apply_refactoring=True)) == "apply"

    def test_apply_needs_refactoring(self, make_options):
        options = make_options(apply_refactoring=True, enable_refactoring=False)
        assert not stage_enabled("apply", options)
        assert next_stage(None, options) == "maintainability"

    def test_maintainability_always_runs(self, make_options):
        options = make_options(
            enable_refactoring=False,
            enable_quality_check=False,
            enable_documentation=False,
            generate_reports=False,
        )
        assert [stage for stage in STAGE_ORDER if stage_enabled(stage, options)] == ["maintainability"]
        assert next_stage("maintainability", options) == DONE

    def test_router_aborts_without_files(self, make_options):
        route = make_router(None)
        assert route(make_state(make_options())) == ABORT
        assert route(make_state(make_options(), files=["a.spec.ts"])) == "refactor"

    def test_later_routers_never_abort(self, make_options):
        assert make_router("quality")(make_state(make_options())) == "documentation"


# ---------------------------------------------------------------------------
# Nodes
# ---------------------------------------------------------------------------

class TestDiscoverNode:
    def test_discover_node_success(self, make_options):
        indexer = MagicMock()
        indexer.discover.return_value = (["/suite/a.spec.ts"], [])

        result = make_discover_node(indexer)(make_state(make_options()))

        assert result == {"files": ["/suite/a.spec.ts"], "failures": []}

    def test_discover_node_error(self, make_options):
        indexer = MagicMock()
        indexer.discover.side_effect = DiscoveryError("Test directory not found: /nope")

        result = make_discover_node(indexer)(make_state(make_options()))

        assert result["files"] == []
        assert "Test directory not found" in result["errors"][0]


class TestMaintainabilityNode:
    def test_writes_json_report(self, make_options, suite_dir, output_dir):
        path = str(suite_dir / "pet-profile.spec.ts")
        node = make_maintainability_node(MaintainabilityAnalyzer())

        result = node(make_state(make_options(), files=[path]))

        assert result["maintainability"].summary.total_files == 1
        assert result["artifacts"] == [str(output_dir / artifacts.MAINTAINABILITY_JSON)]
        payload = json.loads((output_dir / artifacts.MAINTAINABILITY_JSON).read_text(encoding="utf-8"))
        assert payload["timestamp"] == FIXED_NOW.isoformat()
        assert payload["fileDetails"][0]["testFile"] == path

    def test_unwritable_output_is_reported(self, make_options, suite_dir, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory", encoding="utf-8")
        options = make_options(output_directory=str(blocker))
        node = make_maintainability_node(MaintainabilityAnalyzer())

        result = node(make_state(options, files=[str(suite_dir / "pet-profile.spec.ts")]))

        assert result["maintainability"] is not None
        assert "maintainability_node error" in result["errors"][0]


class TestAbortNode:
    def test_abort_node_no_files(self, make_options, suite_dir):
        result = abort_node(make_state(make_options()))
        assert result == {"errors": [f"ABORT: no test files found in {suite_dir}"]}

    def test_abort_node_after_discovery_error(self, make_options):
        state = make_state(make_options(), errors=["discover_node error: boom"])
        summary = abort_node(state)["errors"][0]
        assert summary.startswith("ABORT: discovery failed")
        assert summary.endswith("discover_node error: boom")


class TestBuildGraph:
    def test_build_graph_failure_is_wrapped(self):
        with patch("suite_doctor.orchestrator.graph.StateGraph", side_effect=RuntimeError("bad")):
            with pytest.raises(GraphBuildError, match="bad"):
                build_graph(MagicMock(), MagicMock(), MagicMock(), MagicMock(), MagicMock())


# ---------------------------------------------------------------------------
# Full runs
# ---------------------------------------------------------------------------

class TestRunEnhancement:
    """End-to-end runs over the sample suite."""

    def test_full_run_writes_every_artifact(self, make_options, output_dir):
        run = run_enhancement(make_options(), started_at=FIXED_NOW)

        assert run.files_discovered == 2
        assert run.failures == []
        assert run.errors == []
        assert not run.aborted
        assert run.maintainability.total_files == 2
        assert run.quality.total_files == 2
        assert run.documentation.total_test_cases == 3

        expected = [
            *JSON_REPORTS,
            artifacts.REFACTORING_MD,
            artifacts.MAINTAINABILITY_MD,
            artifacts.QUALITY_MD,
            artifacts.INDEX_MD,
            artifacts.COMPREHENSIVE_MD,
            f"{artifacts.DOCS_DIR}/login.md",
            f"{artifacts.DOCS_DIR}/pet-profile.md",
        ]
        for name in expected:
            assert (output_dir / name).is_file(), name
        assert str(output_dir / artifacts.COMPREHENSIVE_MD) in run.artifacts

    def test_runs_are_idempotent(self, make_options, output_dir):
        run_enhancement(make_options())
        first = {name: load_json_without_timestamp(output_dir / name) for name in JSON_REPORTS}
        first_index = (output_dir / artifacts.INDEX_MD).read_text(encoding="utf-8")

        run_enhancement(make_options())
        second = {name: load_json_without_timestamp(output_dir / name) for name in JSON_REPORTS}

        assert first == second
        assert (output_dir / artifacts.INDEX_MD).read_text(encoding="utf-8") == first_index

    def test_disabled_stages_write_nothing(self, make_options, output_dir):
        options = make_options(
            enable_refactoring=False,
            enable_quality_check=False,
            enable_documentation=False,
            generate_reports=False,
        )
        run = run_enhancement(options, started_at=FIXED_NOW)

        assert run.refactoring is None
        assert run.quality is None
        assert run.documentation is None
        assert sorted(p.name for p in output_dir.iterdir()) == [artifacts.MAINTAINABILITY_JSON]

    def test_no_reports_keeps_json(self, make_options, output_dir):
        run_enhancement(make_options(generate_reports=False), started_at=FIXED_NOW)
        for name in JSON_REPORTS:
            assert (output_dir / name).is_file()
        assert not (output_dir / artifacts.COMPREHENSIVE_MD).exists()
        assert not (output_dir / artifacts.QUALITY_MD).exists()

    def test_apply_mode_rewrites_with_backup(self, make_options, suite_dir):
        pet_profile = suite_dir / "pet-profile.spec.ts"

        run = run_enhancement(make_options(apply_refactoring=True), started_at=FIXED_NOW)

        outcomes = {Path(outcome.file_path).name: outcome for outcome in run.applied}
        assert outcomes["pet-profile.spec.ts"].applied is True
        assert Path(str(pet_profile) + ".backup").read_text(encoding="utf-8") == PET_PROFILE_SPEC
        assert "LONG_TIMEOUT" in pet_profile.read_text(encoding="utf-8")

    def test_unreadable_file_is_isolated(self, make_options, suite_dir):
        (suite_dir / "broken.spec.ts").write_bytes(INVALID_UTF8)

        run = run_enhancement(make_options(), started_at=FIXED_NOW)

        assert run.files_discovered == 3
        assert {Path(failure.file_path).name for failure in run.failures} == {"broken.spec.ts"}
        assert {failure.stage for failure in run.failures} == {
            PipelineStage.REFACTORING,
            PipelineStage.MAINTAINABILITY,
            PipelineStage.QUALITY,
            PipelineStage.DOCUMENTATION,
        }
        assert run.maintainability.total_files == 2

    def test_empty_directory_aborts(self, make_options, tmp_path):
        empty = tmp_path / "empty"
        empty.mkdir()
        with pytest.raises(PipelineAbortedError, match="no test files found"):
            run_enhancement(make_options(test_directory=str(empty)))

    def test_missing_directory_aborts(self, make_options, tmp_path):
        with pytest.raises(PipelineAbortedError, match="discovery failed"):
            run_enhancement(make_options(test_directory=str(tmp_path / "missing")))
