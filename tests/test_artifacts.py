"""Tests for report payloads, writers and Markdown guides."""
import json

from samples import FIXED_NOW
from suite_doctor.analyzers.quality_checker import QualityChecker
from suite_doctor.models import (
    ApplyOutcome,
    FileFailure,
    MaintainabilityMetrics,
    MaintainabilitySuiteReport,
    MaintainabilitySummary,
    PipelineStage,
    RefactorContext,
    RefactoringSuiteReport,
    RefactoringSummary,
    RunSummary,
)
from suite_doctor.orchestrator import artifacts
from suite_doctor.rules import DEFAULT_REGISTRY


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def make_maintainability_report() -> MaintainabilitySuiteReport:
    return MaintainabilitySuiteReport(
        summary=MaintainabilitySummary(total_files=3),
        file_metrics=[
            MaintainabilityMetrics(test_file="b.spec.ts", maintainability_index=80.0),
            MaintainabilityMetrics(test_file="a.spec.ts", maintainability_index=35.0),
            MaintainabilityMetrics(test_file="c.spec.ts", maintainability_index=55.0),
        ],
    )


# ---------------------------------------------------------------------------
# Writers and payloads
# ---------------------------------------------------------------------------

class TestWriters:
    """Tests for write_json() and write_text()."""

    def test_write_json_format(self, tmp_path):
        path = artifacts.write_json(str(tmp_path / "nested" / "r.json"), {"title": "登录测试"})
        text = (tmp_path / "nested" / "r.json").read_text(encoding="utf-8")
        assert path.endswith("r.json")
        assert text == '{\n  "title": "登录测试"\n}\n'

    def test_write_text_adds_trailing_newline(self, tmp_path):
        artifacts.write_text(str(tmp_path / "a.md"), "# Title")
        assert (tmp_path / "a.md").read_text(encoding="utf-8") == "# Title\n"


class TestPayloads:
    """Tests for the JSON report payloads."""

    def test_maintainability_file_details_sorted_by_index(self):
        payload = artifacts.maintainability_payload(make_maintainability_report(), FIXED_NOW)
        assert payload["timestamp"] == "2024-05-01T12:00:00+00:00"
        assert [d["testFile"] for d in payload["fileDetails"]] == [
            "a.spec.ts", "c.spec.ts", "b.spec.ts",
        ]
        assert "maintainabilityDistribution" in payload

    def test_quality_payload_lists_standards(self):
        checker = QualityChecker()
        report = checker.summarize([
            checker.check_content("test('a', () => {\n});\n", "bad.spec.ts"),
            checker.check_content("import { test } from '@playwright/test';\n", "worse.spec.ts"),
        ])
        payload = artifacts.quality_payload(report, DEFAULT_REGISTRY, FIXED_NOW)

        assert len(payload["standards"]) == 15
        assert "checker" not in payload["standards"][0]
        scores = [file_report["score"] for file_report in payload["fileReports"]]
        assert scores == sorted(scores)

    def test_refactoring_payload_keys(self, tmp_path):
        report = RefactoringSuiteReport(
            summary=RefactoringSummary(),
            constants=RefactorContext(timeout_constants={"5000": "LONG_TIMEOUT"}),
        )
        paths = artifacts.write_refactoring_report(report, str(tmp_path), FIXED_NOW)
        payload = json.loads((tmp_path / artifacts.REFACTORING_JSON).read_text(encoding="utf-8"))

        assert paths == [str(tmp_path / artifacts.REFACTORING_JSON)]
        assert list(payload) == ["timestamp", "summary", "results", "constants", "failures"]
        assert payload["constants"]["timeoutConstants"] == {"5000": "LONG_TIMEOUT"}


# ---------------------------------------------------------------------------
# Markdown
# ---------------------------------------------------------------------------

class TestGuides:
    """Tests for the Markdown guides and the comprehensive report."""

    def test_refactoring_guide_includes_helper_skeletons(self):
        snippet = "await page.goto('/login');\nawait page.click('#login');"
        report = RefactoringSuiteReport(
            summary=RefactoringSummary(),
            constants=RefactorContext(extracted_methods={snippet: "performLogin"}),
        )
        guide = artifacts.render_refactoring_suggestions(report)
        assert "## Shared step helpers" in guide
        assert "async function performLogin(page: Page): Promise<void> {" in guide
        assert "  await page.goto('/login');" in guide

    def test_refactoring_guide_without_helpers(self):
        guide = artifacts.render_refactoring_suggestions(
            RefactoringSuiteReport(summary=RefactoringSummary())
        )
        assert guide.startswith("# Refactoring Suggestions")
        assert "## Shared step helpers" not in guide

    def test_write_guides_skips_missing_reports(self, tmp_path):
        written = artifacts.write_guides(str(tmp_path), None, make_maintainability_report(), None)
        assert written == [str(tmp_path / artifacts.MAINTAINABILITY_MD)]

    def test_comprehensive_report(self, tmp_path):
        run = RunSummary(
            test_directory="/suite",
            output_directory=str(tmp_path),
            files_discovered=3,
            applied=[
                ApplyOutcome(file_path="a.spec.ts", applied=True, backup_path="a.spec.ts.backup"),
                ApplyOutcome(file_path="b.spec.ts", applied=False, reason="no changes"),
            ],
            failures=[FileFailure(
                file_path="broken.spec.ts", stage=PipelineStage.QUALITY, error="bad bytes",
            )],
            artifacts=[str(tmp_path / artifacts.QUALITY_JSON)],
        )
        report = artifacts.render_comprehensive_report(run, FIXED_NOW, make_maintainability_report())

        assert "**Generated**: 2024-05-01T12:00:00+00:00" in report
        assert report.index("- **a.spec.ts**") < report.index("- **c.spec.ts**")
        assert "b.spec.ts" not in report.split("## Files most in need of work")[1].split("##")[0]
        assert "- `a.spec.ts` rewritten (backup: `a.spec.ts.backup`)" in report
        assert "- `b.spec.ts` not rewritten: no changes" in report
        assert "- `broken.spec.ts` (quality): bad bytes" in report
        assert f"- `{artifacts.QUALITY_JSON}`" in report

    def test_comprehensive_report_without_failures(self, tmp_path):
        run = RunSummary(test_directory="/suite", output_directory=str(tmp_path))
        report = artifacts.render_comprehensive_report(run, FIXED_NOW)
        assert "## Failures\n\nNone." in report
