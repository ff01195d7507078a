"""Tests for QualityChecker scoring, grading and aggregation."""
import logging
from unittest.mock import MagicMock

import pytest

from samples import LOGIN_SPEC, LONG_WAIT_SPEC, UNGROUPED_SPEC
from suite_doctor.analyzers.exceptions import SourceFileError
from suite_doctor.analyzers.quality_checker import (
    QualityChecker,
    calculate_grade,
    calculate_score,
    summarize_severities,
)
from suite_doctor.models import Grade, QualityViolation, Severity, Standard, StandardCategory
from suite_doctor.rules import StandardRegistry


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def make_violation(severity: Severity, standard_id: str = "custom-001", line: int = 1) -> QualityViolation:
    return QualityViolation(
        standard_id=standard_id, line=line, message="m", severity=severity,
    )


def make_standard(standard_id: str, checker) -> Standard:
    return Standard(
        standard_id=standard_id,
        name=standard_id,
        description=f"Standard {standard_id}",
        category=StandardCategory.STRUCTURE,
        severity=Severity.WARNING,
        checker=checker,
    )


# ---------------------------------------------------------------------------
# Scoring
# ---------------------------------------------------------------------------

class TestScoring:
    """Tests for calculate_score() and calculate_grade()."""

    def test_weights(self):
        violations = [
            make_violation(Severity.ERROR),
            make_violation(Severity.WARNING),
            make_violation(Severity.INFO),
        ]
        assert calculate_score(violations) == 83

    def test_no_violations(self):
        assert calculate_score([]) == 100

    def test_clamped_at_zero(self):
        assert calculate_score([make_violation(Severity.ERROR)] * 11) == 0

    def test_order_does_not_matter(self):
        violations = [
            make_violation(Severity.WARNING, line=3),
            make_violation(Severity.ERROR, line=1),
            make_violation(Severity.INFO, line=2),
            make_violation(Severity.WARNING, line=9),
        ]
        assert calculate_score(violations) == calculate_score(list(reversed(violations)))
        assert calculate_score(violations) == calculate_score(sorted(violations, key=lambda v: v.line))

    @pytest.mark.parametrize(
        "score, grade",
        [(100, Grade.A), (90, Grade.A), (89, Grade.B), (80, Grade.B), (79, Grade.C),
         (70, Grade.C), (60, Grade.D), (59, Grade.F), (0, Grade.F)],
    )
    def test_grade_boundaries(self, score, grade):
        assert calculate_grade(score) == grade

    def test_severity_summary(self):
        summary = summarize_severities([
            make_violation(Severity.ERROR),
            make_violation(Severity.INFO),
            make_violation(Severity.INFO),
        ])
        assert (summary.errors, summary.warnings, summary.infos) == (1, 0, 2)


# ---------------------------------------------------------------------------
# Checking files
# ---------------------------------------------------------------------------

class TestCheckContent:
    """Tests for QualityChecker.check_content()."""

    def test_long_wait_reported_once(self):
        report = QualityChecker().check_content(LONG_WAIT_SPEC, "analysis.spec.ts")
        perf = [v for v in report.violations if v.standard_id == "test-perf-001"]
        assert len(perf) == 1
        assert "waitForSelector" in perf[0].suggestion

    def test_trailing_comment_satisfies_docs_standard(self):
        source = LONG_WAIT_SPEC.replace(
            "await page.waitForTimeout(5000);",
            "await page.waitForTimeout(5000); // chart animation takes 5s",
        )
        report = QualityChecker().check_content(source, "analysis.spec.ts")
        assert [v for v in report.violations if v.standard_id == "test-docs-002"] == []
        assert len([v for v in report.violations if v.standard_id == "test-perf-001"]) == 1

    def test_ungrouped_file_has_one_grouping_warning(self):
        report = QualityChecker().check_content(UNGROUPED_SPEC, "pages.spec.ts")
        grouping = [v for v in report.violations if v.standard_id == "test-structure-002"]
        assert len(grouping) == 1
        assert grouping[0].severity == Severity.WARNING

    def test_score_and_grade_agree(self):
        report = QualityChecker().check_content(LOGIN_SPEC, "login.spec.ts")
        assert report.score == calculate_score(report.violations)
        assert report.grade == calculate_grade(report.score)
        assert report.summary.errors + report.summary.warnings + report.summary.infos == len(
            report.violations
        )

    def test_violations_follow_registration_order(self):
        first = make_standard("a-001", lambda c, p: [make_violation(Severity.INFO, "a-001")])
        second = make_standard("b-001", lambda c, p: [make_violation(Severity.INFO, "b-001")])
        checker = QualityChecker(StandardRegistry([second, first]))
        report = checker.check_content("x", "x.spec.ts")
        assert [v.standard_id for v in report.violations] == ["b-001", "a-001"]

    def test_check_file_reads_from_disk(self, tmp_path):
        path = tmp_path / "pages.spec.ts"
        path.write_text(UNGROUPED_SPEC, encoding="utf-8")
        report = QualityChecker().check_file(str(path))
        assert report.file_path == str(path)

    def test_check_file_missing(self, tmp_path):
        with pytest.raises(SourceFileError):
            QualityChecker().check_file(str(tmp_path / "missing.spec.ts"))


class TestFaultyCheckers:
    """A failing checker contributes no violations and does not stop the run."""

    def test_raising_checker_is_isolated(self, caplog):
        boom = MagicMock(side_effect=RuntimeError("checker exploded"))
        good = make_standard("good-001", lambda c, p: [make_violation(Severity.WARNING, "good-001")])
        checker = QualityChecker(StandardRegistry([make_standard("bad-001", boom), good]))

        with caplog.at_level(logging.WARNING, logger="suite_doctor.analyzers.quality_checker"):
            report = checker.check_content("content", "x.spec.ts")

        boom.assert_called_once_with("content", "x.spec.ts")
        assert [v.standard_id for v in report.violations] == ["good-001"]
        assert report.score == 95
        assert "bad-001" in caplog.text
        warning = caplog.records[0]
        assert warning.file_path == "x.spec.ts"
        assert warning.standard_id == "bad-001"

    def test_foreign_standard_ids_are_discarded(self):
        rogue = make_standard("rogue-001", lambda c, p: [make_violation(Severity.ERROR, "other-001")])
        report = QualityChecker(StandardRegistry([rogue])).check_content("x", "x.spec.ts")
        assert report.violations == []
        assert report.score == 100


# ---------------------------------------------------------------------------
# Aggregation
# ---------------------------------------------------------------------------

class TestSummarize:
    """Tests for QualityChecker.summarize()."""

    def test_summary(self):
        checker = QualityChecker()
        reports = [
            checker.check_content(LOGIN_SPEC, "login.spec.ts"),
            checker.check_content(UNGROUPED_SPEC, "pages.spec.ts"),
        ]
        suite = checker.summarize(reports)

        assert suite.summary.total_files == 2
        assert suite.summary.average_score == round((reports[0].score + reports[1].score) / 2)
        assert sum(suite.summary.grade_distribution.values()) == 2
        assert set(suite.summary.grade_distribution) == {"A", "B", "C", "D", "F"}
        counts = [entry.count for entry in suite.summary.top_violations]
        assert counts == sorted(counts, reverse=True)
        assert len(counts) <= 10

    def test_empty(self):
        suite = QualityChecker().summarize([])
        assert suite.summary.total_files == 0
        assert suite.summary.average_score == 0
