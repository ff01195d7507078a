"""Tests for map_files(), the bounded per-file worker pool."""
import logging
import threading
import time

import pytest

from samples import INVALID_UTF8, LOGIN_SPEC
from suite_doctor.analyzers.maintainability_analyzer import MaintainabilityAnalyzer
from suite_doctor.models import PipelineStage
from suite_doctor.orchestrator.batch import map_files


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def make_clock(*values: float, after: float = 100.0):
    """Fake monotonic clock returning ``values`` and then ``after`` forever."""
    remaining = iter(values)
    return lambda: next(remaining, after)


def slow_upper(path: str) -> str:
    # Later paths finish first
    time.sleep(0.01 * (5 - len(path)))
    return path.upper()


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------

class TestOrdering:
    """Results come back in input order whatever the completion order."""

    def test_results_follow_input_order(self):
        paths = ["a", "bb", "ccc", "dddd"]
        outcome = map_files(paths, slow_upper, PipelineStage.QUALITY, max_workers=3)
        assert outcome.results == ["A", "BB", "CCC", "DDDD"]
        assert outcome.failures == []
        assert outcome.skipped == []

    def test_in_flight_window_is_bounded(self):
        lock = threading.Lock()
        active = 0
        peak = 0

        def worker(path: str) -> str:
            nonlocal active, peak
            with lock:
                active += 1
                peak = max(peak, active)
            time.sleep(0.01)
            with lock:
                active -= 1
            return path

        outcome = map_files([str(i) for i in range(8)], worker, PipelineStage.QUALITY, max_workers=2)
        assert len(outcome.results) == 8
        assert peak <= 2

    def test_empty_input(self):
        outcome = map_files([], str.upper, PipelineStage.QUALITY)
        assert (outcome.results, outcome.failures, outcome.skipped) == ([], [], [])

    def test_max_workers_must_be_positive(self):
        with pytest.raises(ValueError, match="max_workers"):
            map_files(["a"], str.upper, PipelineStage.QUALITY, max_workers=0)


class TestFailures:
    """A failing file becomes a FileFailure and never stops the batch."""

    def test_worker_exception_is_recorded(self):
        def worker(path: str) -> str:
            if path == "b":
                raise RuntimeError("cannot parse b")
            return path

        outcome = map_files(["a", "b", "c"], worker, PipelineStage.MAINTAINABILITY, max_workers=2)

        assert outcome.results == ["a", "c"]
        assert len(outcome.failures) == 1
        failure = outcome.failures[0]
        assert failure.file_path == "b"
        assert failure.stage == PipelineStage.MAINTAINABILITY
        assert failure.error == "cannot parse b"

    def test_empty_message_falls_back_to_type_name(self):
        def worker(path: str) -> str:
            raise KeyError()

        outcome = map_files(["a"], worker, PipelineStage.QUALITY)
        assert outcome.failures[0].error == "KeyError"

    def test_failure_log_carries_file_and_stage(self, caplog):
        def worker(path: str) -> str:
            raise RuntimeError("cannot parse")

        with caplog.at_level(logging.INFO, logger="suite_doctor.orchestrator.batch"):
            map_files(["b.spec.ts"], worker, PipelineStage.QUALITY)

        failed = [r for r in caplog.records if r.levelno == logging.WARNING]
        assert len(failed) == 1
        assert failed[0].file_path == "b.spec.ts"
        assert failed[0].stage == "quality"
        finished = caplog.records[-1]
        assert finished.getMessage() == "quality finished: 0 ok, 1 failed, 0 skipped"
        assert finished.duration_ms >= 0

    def test_unreadable_file_is_excluded_from_totals(self, tmp_path):
        good = tmp_path / "login.spec.ts"
        good.write_text(LOGIN_SPEC, encoding="utf-8")
        bad = tmp_path / "broken.spec.ts"
        bad.write_bytes(INVALID_UTF8)

        analyzer = MaintainabilityAnalyzer()
        outcome = map_files(
            [str(bad), str(good)], analyzer.analyze_file, PipelineStage.MAINTAINABILITY
        )
        report = analyzer.summarize(outcome.results, outcome.failures)

        assert [metrics.test_file for metrics in outcome.results] == [str(good)]
        assert [failure.file_path for failure in outcome.failures] == [str(bad)]
        assert report.summary.total_files == 1
        assert report.failures == outcome.failures


class TestDeadline:
    """Scheduling stops once the clock reaches the deadline."""

    def test_unscheduled_paths_are_skipped(self):
        outcome = map_files(
            ["a", "b", "c"], str.upper, PipelineStage.DOCUMENTATION,
            max_workers=1, deadline=10.0, clock=make_clock(0.0),
        )
        assert outcome.results == ["A"]
        assert outcome.skipped == ["b", "c"]
        assert outcome.failures == []

    def test_expired_before_start(self):
        outcome = map_files(
            ["a", "b"], str.upper, PipelineStage.QUALITY,
            deadline=10.0, clock=make_clock(after=10.0),
        )
        assert outcome.results == []
        assert outcome.skipped == ["a", "b"]

    def test_expiry_log_carries_stage(self, caplog):
        with caplog.at_level(logging.WARNING, logger="suite_doctor.orchestrator.batch"):
            map_files(
                ["a"], str.upper, PipelineStage.DOCUMENTATION,
                deadline=1.0, clock=make_clock(after=1.0),
            )
        assert caplog.records[0].stage == "documentation"

    def test_no_deadline_never_consults_clock(self):
        def clock() -> float:
            raise AssertionError("clock should not be read")

        outcome = map_files(["a", "b"], str.upper, PipelineStage.QUALITY, clock=clock)
        assert outcome.results == ["A", "B"]
