"""Serialization of stage reports into the output directory.

JSON reports carry a ``timestamp`` taken from the run start so that two runs
over the same input differ only in that field. Markdown guides are pure
functions of the reports.
"""

import json
import logging
import os
from datetime import datetime

from suite_doctor.analyzers.documentation_generator import (
    assign_doc_file_names,
    render_index,
    render_markdown,
)
from suite_doctor.analyzers.refactorer import render_extracted_methods
from suite_doctor.models import (
    DocumentationSuiteReport,
    Grade,
    MaintainabilitySuiteReport,
    QualitySuiteReport,
    RefactoringSuiteReport,
    RunSummary,
)
from suite_doctor.rules.registry import StandardRegistry

logger = logging.getLogger(__name__)

REFACTORING_JSON = "refactoring-analysis.json"
MAINTAINABILITY_JSON = "maintainability-report.json"
QUALITY_JSON = "quality-standards-report.json"
REFACTORING_MD = "refactoring-suggestions.md"
MAINTAINABILITY_MD = "maintainability-improvements.md"
QUALITY_MD = "quality-improvement-guide.md"
INDEX_MD = "test-suite-index.md"
COMPREHENSIVE_MD = "comprehensive-report.md"
DOCS_DIR = "test-docs"

OPPORTUNITIES_LIMIT = 10
HIGH_PRIORITY_SCORE = 30
URGENT_INDEX = 50
ATTENTION_INDEX = 60
WORST_FILES_LIMIT = 5
VIOLATIONS_PER_FILE = 5


def write_json(path: str, payload: dict) -> str:
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    with open(path, "w", encoding="utf-8") as handle:
        json.dump(payload, handle, indent=2, ensure_ascii=False)
        handle.write("\n")
    logger.info("Wrote %s", path)
    return path


def write_text(path: str, text: str) -> str:
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    with open(path, "w", encoding="utf-8") as handle:
        handle.write(text if text.endswith("\n") else text + "\n")
    logger.info("Wrote %s", path)
    return path


# ---------------------------------------------------------------------------
# JSON payloads
# ---------------------------------------------------------------------------

def refactoring_payload(report: RefactoringSuiteReport, timestamp: datetime) -> dict:
    payload = report.to_payload()
    return {
        "timestamp": timestamp.isoformat(),
        "summary": payload["summary"],
        "results": payload["results"],
        "constants": payload["constants"],
        "failures": payload["failures"],
    }


def maintainability_payload(report: MaintainabilitySuiteReport, timestamp: datetime) -> dict:
    payload = report.to_payload()
    file_details = sorted(
        payload["fileMetrics"], key=lambda metrics: metrics["maintainabilityIndex"]
    )
    return {
        "timestamp": timestamp.isoformat(),
        "summary": payload["summary"],
        "maintainabilityDistribution": payload["distribution"],
        "topIssues": payload["topIssues"],
        "refactoringOpportunities": payload["refactoringOpportunities"][:OPPORTUNITIES_LIMIT],
        "fileDetails": file_details,
        "failures": payload["failures"],
    }


def quality_payload(
    report: QualitySuiteReport,
    registry: StandardRegistry,
    timestamp: datetime,
) -> dict:
    payload = report.to_payload()
    return {
        "timestamp": timestamp.isoformat(),
        "summary": payload["summary"],
        "standards": [standard.to_payload() for standard in registry],
        "fileReports": sorted(payload["reports"], key=lambda file_report: file_report["score"]),
        "failures": payload["failures"],
    }


def write_refactoring_report(
    report: RefactoringSuiteReport, output_directory: str, timestamp: datetime
) -> list[str]:
    return [write_json(
        os.path.join(output_directory, REFACTORING_JSON), refactoring_payload(report, timestamp)
    )]


def write_maintainability_report(
    report: MaintainabilitySuiteReport, output_directory: str, timestamp: datetime
) -> list[str]:
    return [write_json(
        os.path.join(output_directory, MAINTAINABILITY_JSON),
        maintainability_payload(report, timestamp),
    )]


def write_quality_report(
    report: QualitySuiteReport,
    registry: StandardRegistry,
    output_directory: str,
    timestamp: datetime,
) -> list[str]:
    return [write_json(
        os.path.join(output_directory, QUALITY_JSON),
        quality_payload(report, registry, timestamp),
    )]


def write_documentation(report: DocumentationSuiteReport, output_directory: str) -> list[str]:
    """Write one Markdown file per document plus the suite index."""
    written = []
    file_names = assign_doc_file_names(report.documents)
    for doc in report.documents:
        path = os.path.join(output_directory, DOCS_DIR, file_names[doc.file_path])
        written.append(write_text(path, render_markdown(doc)))
    written.append(write_text(os.path.join(output_directory, INDEX_MD), render_index(report)))
    return written


# ---------------------------------------------------------------------------
# Markdown guides
# ---------------------------------------------------------------------------

EXTRACT_CONSTANT_PATTERN = """```typescript
// Before
await page.waitForTimeout(5000);
await page.fill('#email', 'test@example.com');

// After
const LONG_TIMEOUT = 5000;
const TEST_EMAIL = 'test@example.com';
await page.waitForTimeout(LONG_TIMEOUT);
await page.fill('#email', TEST_EMAIL);
```"""

EXTRACT_METHOD_PATTERN = """```typescript
// Before
test('logs in', async ({ page }) => {
  await page.goto('/login');
  await page.fill('#username', 'test');
  await page.fill('#password', 'test');
  await page.click('#login-btn');
});

// After
async function performLogin(page, username, password) {
  await page.goto('/login');
  await page.fill('#username', username);
  await page.fill('#password', password);
  await page.click('#login-btn');
}

test('logs in', async ({ page }) => {
  await performLogin(page, 'test', 'test');
});
```"""

BEST_PRACTICES = {
    "Test structure": (
        "Group related tests with `describe`",
        "Keep every test independent of the others",
        "Use `beforeEach` and `afterEach` for setup and cleanup",
    ),
    "Naming": (
        "Test titles should state what is being verified",
        "Variable names should be meaningful",
        "Page object variables should match their class names",
    ),
    "Code quality": (
        "Replace hard-coded values with constants or configuration",
        "Move repeated steps into shared helpers",
        "Comment non-obvious waits and loops",
    ),
    "Selectors": (
        "Prefer `data-testid` attributes",
        "Avoid long descendant CSS selectors",
        "Use role and label based locators where possible",
    ),
    "Waiting": (
        "Wait for conditions instead of fixed delays",
        "Keep timeouts reasonable",
        "Explain long-running operations in a comment",
    ),
}


def render_refactoring_suggestions(report: RefactoringSuiteReport) -> str:
    summary = report.summary
    out = [
        "# Refactoring Suggestions",
        "",
        "Suggestions derived from static analysis of the test sources.",
        "",
        "## Summary",
        "",
        f"- **Files analyzed**: {summary.total_files}",
        f"- **Files with changes**: {summary.successful_refactorings}",
        f"- **Total changes**: {summary.total_changes}",
        f"- **Average improvement score**: {summary.average_improvement_score}",
        "",
    ]

    high_priority = sorted(
        (result for result in report.results if result.improvement_score > HIGH_PRIORITY_SCORE),
        key=lambda result: -result.improvement_score,
    )
    if high_priority:
        out += ["## High priority", ""]
        for result in high_priority:
            out += [
                f"### {result.file_path}",
                "",
                f"**Improvement score**: {result.improvement_score}",
                f"**Changes**: {len(result.changes)}",
                "",
            ]
            if result.changes:
                out.append("**Proposed changes**:")
                out += [
                    f"- **{change.type.value}** (line {change.line}): {change.description}"
                    for change in result.changes
                ]
                out.append("")
            out += ["---", ""]

    out += [
        "## Common patterns",
        "",
        "### 1. Extract constants",
        EXTRACT_CONSTANT_PATTERN,
        "",
        "### 2. Extract shared steps",
        EXTRACT_METHOD_PATTERN,
        "",
    ]

    if report.constants.extracted_methods:
        out += [
            "## Shared step helpers",
            "",
            "```typescript",
            render_extracted_methods(report.constants).rstrip("\n"),
            "```",
            "",
        ]
    return "\n".join(out)


def render_maintainability_improvements(report: MaintainabilitySuiteReport) -> str:
    summary = report.summary
    out = [
        "# Maintainability Improvements",
        "",
        "## Summary",
        "",
        f"- **Files analyzed**: {summary.total_files}",
        f"- **Average maintainability index**: {summary.average_maintainability_index}",
        f"- **Files needing attention**: {summary.files_needing_attention}",
        f"- **Code smells**: {summary.total_code_smells}",
        "",
    ]

    urgent = sorted(
        (m for m in report.file_metrics if m.maintainability_index < URGENT_INDEX),
        key=lambda m: m.maintainability_index,
    )
    if urgent:
        out += ["## Files needing urgent attention", ""]
        for metrics in urgent:
            out += [
                f"### {metrics.test_file}",
                "",
                f"**Maintainability index**: {metrics.maintainability_index}/100",
                f"**Lines of code**: {metrics.lines_of_code}",
                f"**Average test length**: {metrics.average_test_length} lines",
                f"**Complexity**: {metrics.complexity_score}/10",
                f"**Code smells**: {len(metrics.code_smells)}",
                "",
            ]
            if metrics.suggestions:
                out.append("**Suggestions**:")
                out += [f"- {suggestion}" for suggestion in metrics.suggestions]
                out.append("")
            out += ["---", ""]

    opportunities = report.refactoring_opportunities[:OPPORTUNITIES_LIMIT]
    if opportunities:
        out += ["## Refactoring opportunities", ""]
        for number, opportunity in enumerate(opportunities, start=1):
            out += [
                f"### {number}. {opportunity.description}",
                "",
                f"**File**: {opportunity.test_file}",
                f"**Type**: {opportunity.type.value}",
                f"**Estimated effort**: {opportunity.estimated_effort}",
                f"**Impact**: {opportunity.impact.value}",
                "",
            ]
            if opportunity.code_example:
                out += [
                    "Before:",
                    "```typescript",
                    opportunity.code_example.before,
                    "```",
                    "",
                    "After:",
                    "```typescript",
                    opportunity.code_example.after,
                    "```",
                    "",
                ]
            out += ["---", ""]

    return "\n".join(out)


def render_quality_guide(report: QualitySuiteReport) -> str:
    summary = report.summary
    out = [
        "# Quality Improvement Guide",
        "",
        "## Overview",
        "",
        f"- **Files checked**: {summary.total_files}",
        f"- **Average score**: {summary.average_score}/100",
        "",
        "### Grade distribution",
        "",
    ]
    out += [f"- **{grade}**: {count} file(s)" for grade, count in summary.grade_distribution.items()]
    out.append("")

    if summary.top_violations:
        out += ["## Most frequent issues", ""]
        for number, violation in enumerate(summary.top_violations, start=1):
            out += [
                f"### {number}. {violation.description}",
                "",
                f"**Occurrences**: {violation.count}",
                f"**Standard**: {violation.standard_id}",
                "",
            ]

    low_quality = sorted(
        (r for r in report.reports if r.grade in (Grade.D, Grade.F)),
        key=lambda r: r.score,
    )
    if low_quality:
        out += ["## Files to improve", ""]
        for file_report in low_quality:
            out += [
                f"### {file_report.file_path}",
                "",
                f"**Score**: {file_report.score}/100 (grade {file_report.grade.value})",
                f"**Errors**: {file_report.summary.errors}",
                f"**Warnings**: {file_report.summary.warnings}",
                f"**Infos**: {file_report.summary.infos}",
                "",
            ]
            violations = file_report.violations[:VIOLATIONS_PER_FILE]
            if violations:
                out.append("**Main issues**:")
                for violation in violations:
                    out.append(
                        f"- Line {violation.line}: {violation.message} ({violation.severity.value})"
                    )
                    if violation.suggestion:
                        out.append(f"  Suggestion: {violation.suggestion}")
                out.append("")
            out += ["---", ""]

    out += ["## Best practices", ""]
    for number, (heading, items) in enumerate(BEST_PRACTICES.items(), start=1):
        out.append(f"### {number}. {heading}")
        out += [f"- {item}" for item in items]
        out.append("")

    return "\n".join(out)


def render_comprehensive_report(
    run: RunSummary,
    started_at: datetime,
    maintainability: MaintainabilitySuiteReport | None = None,
) -> str:
    """Combine every stage summary, applied rewrites and failures."""
    out = [
        "# Test Maintainability Report",
        "",
        f"**Generated**: {started_at.isoformat()}",
        f"**Test directory**: `{run.test_directory}`",
        f"**Files discovered**: {run.files_discovered}",
        "",
        "## Summary",
        "",
    ]

    if run.refactoring:
        out += [
            "### Refactoring",
            f"- Files analyzed: {run.refactoring.total_files}",
            f"- Files with changes: {run.refactoring.successful_refactorings}",
            f"- Total changes: {run.refactoring.total_changes}",
            f"- Average improvement score: {run.refactoring.average_improvement_score}",
            "",
        ]
    if run.maintainability:
        out += [
            "### Maintainability",
            f"- Files analyzed: {run.maintainability.total_files}",
            f"- Average maintainability index: {run.maintainability.average_maintainability_index}",
            f"- Files needing attention: {run.maintainability.files_needing_attention}",
            f"- Code smells: {run.maintainability.total_code_smells}",
            "",
        ]
    if run.quality:
        out += [
            "### Quality standards",
            f"- Files checked: {run.quality.total_files}",
            f"- Average score: {run.quality.average_score}/100",
            "- Grade distribution:",
        ]
        out += [
            f"  - {grade}: {count} file(s)"
            for grade, count in run.quality.grade_distribution.items()
        ]
        out.append("")
    if run.documentation:
        out += [
            "### Documentation",
            f"- Files documented: {run.documentation.total_files}",
            f"- Test suites: {run.documentation.total_test_suites}",
            f"- Test cases: {run.documentation.total_test_cases}",
            f"- Features covered: {len(run.documentation.feature_coverage)}",
            "",
        ]

    if maintainability:
        worst = sorted(
            (m for m in maintainability.file_metrics if m.maintainability_index < ATTENTION_INDEX),
            key=lambda m: m.maintainability_index,
        )[:WORST_FILES_LIMIT]
        if worst:
            out += ["## Files most in need of work", ""]
            out += [
                f"- **{m.test_file}**: maintainability index {m.maintainability_index}/100"
                for m in worst
            ]
            out.append("")

    if run.applied:
        out += ["## Applied refactorings", ""]
        for outcome in run.applied:
            if outcome.applied:
                out.append(f"- `{outcome.file_path}` rewritten (backup: `{outcome.backup_path}`)")
            else:
                out.append(f"- `{outcome.file_path}` not rewritten: {outcome.reason}")
        out.append("")

    if run.skipped_files:
        out += ["## Skipped files", "", "Not analyzed because the time budget expired:", ""]
        out += [f"- `{path}`" for path in run.skipped_files]
        out.append("")

    out += ["## Failures", ""]
    if run.failures:
        out += [
            f"- `{failure.file_path}` ({failure.stage.value}): {failure.error}"
            for failure in run.failures
        ]
    else:
        out.append("None.")
    out.append("")

    if run.errors:
        out += ["## Pipeline errors", ""]
        out += [f"- {error}" for error in run.errors]
        out.append("")

    out += ["## Generated files", ""]
    out += [f"- `{os.path.relpath(path, run.output_directory)}`" for path in run.artifacts]
    out.append("")

    return "\n".join(out)


def write_guides(
    output_directory: str,
    refactoring: RefactoringSuiteReport | None,
    maintainability: MaintainabilitySuiteReport | None,
    quality: QualitySuiteReport | None,
) -> list[str]:
    written = []
    if refactoring is not None:
        written.append(write_text(
            os.path.join(output_directory, REFACTORING_MD),
            render_refactoring_suggestions(refactoring),
        ))
    if maintainability is not None:
        written.append(write_text(
            os.path.join(output_directory, MAINTAINABILITY_MD),
            render_maintainability_improvements(maintainability),
        ))
    if quality is not None:
        written.append(write_text(
            os.path.join(output_directory, QUALITY_MD), render_quality_guide(quality)
        ))
    return written
