"""Quality checker: runs every registered standard and grades the result."""

import logging
from collections import Counter
from collections.abc import Iterable

from suite_doctor.analyzers.exceptions import CheckerError
from suite_doctor.analyzers.suite_indexer import read_test_file
from suite_doctor.models.quality_models import (
    Grade,
    QualityReport,
    QualitySuiteReport,
    QualitySummary,
    QualityViolation,
    Severity,
    SeveritySummary,
    Standard,
    ViolationCount,
)
from suite_doctor.models.report_models import FileFailure
from suite_doctor.rules import DEFAULT_REGISTRY, StandardRegistry

logger = logging.getLogger(__name__)

SEVERITY_WEIGHTS: dict[Severity, int] = {
    Severity.ERROR: 10,
    Severity.WARNING: 5,
    Severity.INFO: 2,
}

GRADE_THRESHOLDS: list[tuple[int, Grade]] = [
    (90, Grade.A),
    (80, Grade.B),
    (70, Grade.C),
    (60, Grade.D),
]

TOP_VIOLATIONS_LIMIT = 10


def calculate_score(violations: Iterable[QualityViolation]) -> int:
    """100 minus the summed severity weights, clamped to [0, 100]."""
    penalty = sum(SEVERITY_WEIGHTS[violation.severity] for violation in violations)
    return max(0, min(100, 100 - penalty))


def calculate_grade(score: float) -> Grade:
    for threshold, grade in GRADE_THRESHOLDS:
        if score >= threshold:
            return grade
    return Grade.F


def summarize_severities(violations: Iterable[QualityViolation]) -> SeveritySummary:
    counts = Counter(violation.severity for violation in violations)
    return SeveritySummary(
        errors=counts[Severity.ERROR],
        warnings=counts[Severity.WARNING],
        infos=counts[Severity.INFO],
    )


class QualityChecker:
    """Grades test files against a :class:`StandardRegistry`."""

    def __init__(self, registry: StandardRegistry | None = None) -> None:
        self.registry = registry if registry is not None else DEFAULT_REGISTRY

    def check_file(self, file_path: str) -> QualityReport:
        """Read and grade one file.

        Raises:
            SourceFileError: If the file cannot be read.
        """
        test_file = read_test_file(file_path)
        return self.check_content(test_file.content, file_path)

    def check_content(self, content: str, file_path: str) -> QualityReport:
        """Grade ``content``.

        Violations keep standard registration order, then match order.
        """
        violations: list[QualityViolation] = []
        for standard in self.registry:
            violations.extend(self._run_standard(standard, content, file_path))

        score = calculate_score(violations)
        return QualityReport(
            file_path=file_path,
            violations=violations,
            score=score,
            grade=calculate_grade(score),
            summary=summarize_severities(violations),
        )

    def _run_standard(
        self, standard: Standard, content: str, file_path: str
    ) -> list[QualityViolation]:
        """Run one checker; a faulty checker contributes no violations."""
        try:
            violations = list(standard.check(content, file_path))
            foreign = [v.standard_id for v in violations if v.standard_id != standard.standard_id]
            if foreign:
                raise CheckerError(
                    f"checker returned violations for other standards: {sorted(set(foreign))}"
                )
            return violations
        except Exception as exc:
            logger.warning(
                "Standard %s failed on %s: %s", standard.standard_id, file_path, exc,
                extra={"file_path": file_path, "standard_id": standard.standard_id},
            )
            return []

    def summarize(
        self,
        reports: list[QualityReport],
        failures: list[FileFailure] | None = None,
    ) -> QualitySuiteReport:
        """Aggregate per-file reports once every file has been checked."""
        grade_distribution = {grade.value: 0 for grade in Grade}
        for report in reports:
            grade_distribution[report.grade.value] += 1

        counts = Counter(v.standard_id for report in reports for v in report.violations)
        top_violations = []
        for standard_id, count in counts.most_common(TOP_VIOLATIONS_LIMIT):
            description = (
                self.registry.get(standard_id).description
                if self.registry.has(standard_id)
                else standard_id
            )
            top_violations.append(ViolationCount(
                standard_id=standard_id, count=count, description=description,
            ))

        average = (
            round(sum(report.score for report in reports) / len(reports)) if reports else 0
        )
        return QualitySuiteReport(
            summary=QualitySummary(
                total_files=len(reports),
                average_score=average,
                grade_distribution=grade_distribution,
                top_violations=top_violations,
            ),
            reports=reports,
            failures=list(failures or []),
        )
