"""Maintainability analyzer: size, duplication, complexity and smell metrics."""

import logging
import re
from collections import Counter

from suite_doctor.analyzers.suite_indexer import read_test_file
from suite_doctor.extractors.blocks import count_case_calls, extract_cases
from suite_doctor.extractors.comments import find_uncommented_lines
from suite_doctor.extractors.complexity import score_complexity
from suite_doctor.extractors.duplicates import count_duplicated_lines, is_comment_line
from suite_doctor.models.config_models import AnalysisThresholds
from suite_doctor.models.maintainability_models import (
    LEVEL_RANK,
    BeforeAfter,
    CodeSmell,
    IssueCount,
    Level,
    MaintainabilityDistribution,
    MaintainabilityMetrics,
    MaintainabilitySuiteReport,
    MaintainabilitySummary,
    OpportunityType,
    RefactoringOpportunity,
    SmellType,
)
from suite_doctor.models.report_models import FileFailure

logger = logging.getLogger(__name__)

MAX_LINE_LENGTH = 120
TOP_ISSUES_LIMIT = 10

STRING_LITERAL_PATTERN = re.compile(r""""[^"]{10,}"|'[^']{10,}'""")
TEST_WORDS = ("test", "spec", "should", "expect")
NUMBER_PATTERN = re.compile(r"\b\d{3,}\b")
ALLOWED_NUMBERS = frozenset({1000, 5000, 10000, 30000})
COMPLEX_SELECTOR_PATTERNS = (
    re.compile(r"""['"][^'"]*\s+[^'"]*\s+[^'"]*['"]"""),        # multi-level
    re.compile(r"""['"][^'"]*:nth-child\([^)]+\)['"]"""),       # nth-child
    re.compile(r"""['"][^'"]*\[[^\]]+\].*\[[^\]]+\]['"]"""),    # multiple attributes
)
POOR_NAME_PATTERN = re.compile(r"\b(?:const|let|var)\s+(data|temp|res|elem)\b")

EXTRACT_METHOD_EXAMPLE = BeforeAfter(
    before=(
        "test('long test', async ({ page }) => {\n"
        "  // 50+ lines of test code\n"
        "  await page.goto('/');\n"
        "  await page.fill('#username', 'test');\n"
        "  await page.fill('#password', 'test');\n"
        "  await page.click('#login');\n"
        "  // ... more code\n"
        "});"
    ),
    after=(
        "test('user login flow', async ({ page }) => {\n"
        "  await navigateToLoginPage(page);\n"
        "  await performLogin(page, 'test', 'test');\n"
        "  await verifyLoginSuccess(page);\n"
        "});"
    ),
)

EXTRACT_CONSTANT_EXAMPLE = BeforeAfter(
    before=(
        "await page.waitForTimeout(5000);\n"
        "await page.fill('#username', 'testuser@example.com');"
    ),
    after=(
        "const LONG_TIMEOUT = 5000;\n"
        "const TEST_EMAIL = 'testuser@example.com';\n\n"
        "await page.waitForTimeout(LONG_TIMEOUT);\n"
        "await page.fill('#username', TEST_EMAIL);"
    ),
)


def count_lines_of_code(lines: list[str]) -> int:
    """Non-blank lines that are not comment-only."""
    return sum(
        1 for line in lines
        if line.strip() and not is_comment_line(line.strip())
    )


def has_hard_coded_string(line: str) -> bool:
    return any(
        not any(word in literal for word in TEST_WORDS)
        for literal in STRING_LITERAL_PATTERN.findall(line)
    )


def has_magic_number(line: str) -> bool:
    return any(
        int(number) > 100 and int(number) not in ALLOWED_NUMBERS
        for number in NUMBER_PATTERN.findall(line)
    )


def has_complex_selector(line: str) -> bool:
    if "locator" not in line and "$" not in line:
        return False
    return any(pattern.search(line) for pattern in COMPLEX_SELECTOR_PATTERNS)


def detect_code_smells(content: str) -> list[CodeSmell]:
    """Detect smells line by line, ordered by line then detector."""
    lines = content.split("\n")
    uncommented = {finding.line: finding for finding in find_uncommented_lines(content)}
    smells: list[CodeSmell] = []

    for line_no, line in enumerate(lines, start=1):
        stripped = line.strip()
        if is_comment_line(stripped):
            continue

        if has_hard_coded_string(stripped):
            smells.append(CodeSmell(
                type=SmellType.HARD_CODED_VALUES,
                line=line_no,
                description="Hard-coded string should be extracted into a constant",
                severity=Level.MEDIUM,
                refactoring_effort=Level.LOW,
            ))
        if len(line) > MAX_LINE_LENGTH:
            smells.append(CodeSmell(
                type=SmellType.COMPLEX_LOGIC,
                line=line_no,
                description=f"Line exceeds {MAX_LINE_LENGTH} characters",
                severity=Level.LOW,
                refactoring_effort=Level.LOW,
            ))
        if has_magic_number(stripped):
            smells.append(CodeSmell(
                type=SmellType.HARD_CODED_VALUES,
                line=line_no,
                description="Magic number should be a named constant",
                severity=Level.MEDIUM,
                refactoring_effort=Level.LOW,
            ))
        if has_complex_selector(stripped):
            smells.append(CodeSmell(
                type=SmellType.COMPLEX_LOGIC,
                line=line_no,
                description="Selector is overly complex; consider data-testid",
                severity=Level.MEDIUM,
                refactoring_effort=Level.MEDIUM,
            ))
        if line_no in uncommented:
            smells.append(CodeSmell(
                type=SmellType.MISSING_COMMENTS,
                line=line_no,
                description=f"{uncommented[line_no].description} has no explanatory comment",
                severity=Level.LOW,
                refactoring_effort=Level.LOW,
            ))
        if match := POOR_NAME_PATTERN.search(stripped):
            smells.append(CodeSmell(
                type=SmellType.POOR_NAMING,
                line=line_no,
                description=f"Variable name {match.group(1)!r} is not descriptive",
                severity=Level.LOW,
                refactoring_effort=Level.LOW,
            ))

    return smells


def compute_maintainability_index(
    lines_of_code: int,
    average_test_length: int,
    complexity_score: float,
    duplicated_code: int,
    code_smells: list[CodeSmell],
    max_test_length: int = 50,
) -> float:
    """Start at 100, subtract penalties, clamp to [0, 100]."""
    index = 100.0

    if lines_of_code > 500:
        index -= 20
    elif lines_of_code > 300:
        index -= 10

    if average_test_length > max_test_length:
        index -= 15
    elif average_test_length > max_test_length * 0.8:
        index -= 8

    index -= complexity_score * 2
    index -= duplicated_code * 3

    severities = Counter(smell.severity for smell in code_smells)
    index -= severities[Level.HIGH] * 5
    index -= severities[Level.MEDIUM] * 3
    index -= severities[Level.LOW] * 1

    return round(max(0.0, min(100.0, index)), 2)


def generate_suggestions(
    metrics: MaintainabilityMetrics,
    thresholds: AnalysisThresholds | None = None,
) -> list[str]:
    """Derive suggestions from computed metrics only."""
    thresholds = thresholds or AnalysisThresholds()
    suggestions = []

    if metrics.average_test_length > thresholds.max_test_length:
        suggestions.append("Split long tests into several smaller tests")
    if metrics.duplicated_code > 3:
        suggestions.append("Extract duplicated code into a shared helper")
    if metrics.complexity_score > 7:
        suggestions.append("Simplify complex test logic; introduce a page-object abstraction")
    if len(metrics.smells_of(SmellType.HARD_CODED_VALUES)) > 5:
        suggestions.append("Extract hard-coded values into constants or configuration")
    if len(metrics.smells_of(SmellType.COMPLEX_LOGIC)) > 3:
        suggestions.append("Simplify complex selectors and logic")
    if len(metrics.smells_of(SmellType.MISSING_COMMENTS)) > 5:
        suggestions.append("Add explanatory comments to complex logic")
    if metrics.maintainability_index < thresholds.attention_index:
        suggestions.append("Consider rewriting the whole test file for maintainability")

    return suggestions


def identify_refactoring_opportunities(
    file_metrics: list[MaintainabilityMetrics],
    thresholds: AnalysisThresholds | None = None,
) -> list[RefactoringOpportunity]:
    """Opportunities across files, highest impact first.

    The sort is stable, so ties keep file-scan order.
    """
    thresholds = thresholds or AnalysisThresholds()
    opportunities: list[RefactoringOpportunity] = []

    for metrics in file_metrics:
        if metrics.average_test_length > thresholds.max_test_length:
            opportunities.append(RefactoringOpportunity(
                type=OpportunityType.EXTRACT_METHOD,
                test_file=metrics.test_file,
                description="Split long tests into helper methods",
                estimated_effort="2-4 hours",
                impact=Level.HIGH,
                code_example=EXTRACT_METHOD_EXAMPLE,
            ))
        if len(metrics.smells_of(SmellType.HARD_CODED_VALUES)) > 3:
            opportunities.append(RefactoringOpportunity(
                type=OpportunityType.EXTRACT_CONSTANT,
                test_file=metrics.test_file,
                description="Extract hard-coded values into constants",
                estimated_effort="1-2 hours",
                impact=Level.MEDIUM,
                code_example=EXTRACT_CONSTANT_EXAMPLE,
            ))
        if metrics.complexity_score > 7:
            opportunities.append(RefactoringOpportunity(
                type=OpportunityType.SIMPLIFY_LOGIC,
                test_file=metrics.test_file,
                description="Simplify test logic with page objects and helpers",
                estimated_effort="3-6 hours",
                impact=Level.HIGH,
            ))
        if len(metrics.smells_of(SmellType.POOR_NAMING)) > 2:
            opportunities.append(RefactoringOpportunity(
                type=OpportunityType.IMPROVE_NAMING,
                test_file=metrics.test_file,
                description="Rename vague variables",
                estimated_effort="1-2 hours",
                impact=Level.MEDIUM,
            ))
        if len(metrics.smells_of(SmellType.MISSING_COMMENTS)) > 5:
            opportunities.append(RefactoringOpportunity(
                type=OpportunityType.ADD_COMMENTS,
                test_file=metrics.test_file,
                description="Add explanatory comments to complex logic",
                estimated_effort="1 hour",
                impact=Level.LOW,
            ))

    return sorted(opportunities, key=lambda o: LEVEL_RANK[o.impact], reverse=True)


def classify_index(index: float) -> str:
    if index >= 90:
        return "excellent"
    if index >= 70:
        return "good"
    if index >= 50:
        return "fair"
    return "poor"


class MaintainabilityAnalyzer:
    """Computes :class:`MaintainabilityMetrics` for test files."""

    def __init__(self, thresholds: AnalysisThresholds | None = None) -> None:
        self.thresholds = thresholds or AnalysisThresholds()

    def analyze_file(self, file_path: str) -> MaintainabilityMetrics:
        """Read and analyze one file.

        Raises:
            SourceFileError: If the file cannot be read.
        """
        test_file = read_test_file(file_path)
        return self.analyze_content(test_file.content, file_path)

    def analyze_content(self, content: str, file_path: str) -> MaintainabilityMetrics:
        lines = content.split("\n")
        cases = extract_cases(content)

        average_test_length = (
            round(sum(case.line_count for case in cases) / len(cases)) if cases else 0
        )
        # File complexity is the mean of its case complexities
        complexity = (
            round(sum(score_complexity(case.content).score for case in cases) / len(cases), 2)
            if cases else 0.0
        )
        lines_of_code = count_lines_of_code(lines)
        duplicated_code = count_duplicated_lines(content)
        code_smells = detect_code_smells(content)

        index = compute_maintainability_index(
            lines_of_code=lines_of_code,
            average_test_length=average_test_length,
            complexity_score=complexity,
            duplicated_code=duplicated_code,
            code_smells=code_smells,
            max_test_length=self.thresholds.max_test_length,
        )
        metrics = MaintainabilityMetrics(
            test_file=file_path,
            lines_of_code=lines_of_code,
            test_count=count_case_calls(content),
            average_test_length=average_test_length,
            duplicated_code=duplicated_code,
            complexity_score=complexity,
            maintainability_index=index,
            code_smells=code_smells,
        )
        suggestions = generate_suggestions(metrics, self.thresholds)
        logger.debug("Maintainability of %s: %.2f", file_path, index)
        return metrics.model_copy(update={"suggestions": suggestions})

    def summarize(
        self,
        file_metrics: list[MaintainabilityMetrics],
        failures: list[FileFailure] | None = None,
    ) -> MaintainabilitySuiteReport:
        """Aggregate per-file metrics once every file has been analyzed."""
        total = len(file_metrics)
        average = (
            round(sum(m.maintainability_index for m in file_metrics) / total) if total else 0
        )
        buckets = Counter(classify_index(m.maintainability_index) for m in file_metrics)
        smell_counts = Counter(smell.type for m in file_metrics for smell in m.code_smells)

        return MaintainabilitySuiteReport(
            summary=MaintainabilitySummary(
                total_files=total,
                average_maintainability_index=average,
                files_needing_attention=sum(
                    1 for m in file_metrics
                    if m.maintainability_index < self.thresholds.attention_index
                ),
                total_code_smells=sum(len(m.code_smells) for m in file_metrics),
            ),
            file_metrics=file_metrics,
            refactoring_opportunities=identify_refactoring_opportunities(
                file_metrics, self.thresholds
            ),
            distribution=MaintainabilityDistribution(
                excellent=buckets["excellent"],
                good=buckets["good"],
                fair=buckets["fair"],
                poor=buckets["poor"],
            ),
            top_issues=[
                IssueCount(type=smell_type, count=count)
                for smell_type, count in smell_counts.most_common(TOP_ISSUES_LIMIT)
            ],
            failures=list(failures or []),
        )
