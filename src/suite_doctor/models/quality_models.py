"""Models for quality standards, violations and graded reports."""

from enum import Enum
from typing import Callable

from pydantic import ConfigDict, Field
from pydantic.alias_generators import to_camel

from suite_doctor.models.base import ReportModel
from suite_doctor.models.report_models import FileFailure


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class StandardCategory(str, Enum):
    STRUCTURE = "structure"
    NAMING = "naming"
    DOCUMENTATION = "documentation"
    MAINTAINABILITY = "maintainability"
    PERFORMANCE = "performance"


class Grade(str, Enum):
    A = "A"
    B = "B"
    C = "C"
    D = "D"
    F = "F"


class CodeExample(ReportModel):
    bad: str
    good: str


class QualityViolation(ReportModel):
    standard_id: str              # must reference a registered Standard
    line: int                     # 1-based
    message: str
    severity: Severity
    suggestion: str | None = None
    code_example: CodeExample | None = None


Checker = Callable[[str, str], list[QualityViolation]]


class Standard(ReportModel):
    """A named, independent quality rule with a pure checker."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        arbitrary_types_allowed=True,
    )

    standard_id: str              # "test-structure-001" format
    name: str
    description: str
    category: StandardCategory
    severity: Severity
    checker: Checker = Field(exclude=True)

    def check(self, content: str, file_path: str) -> list[QualityViolation]:
        return self.checker(content, file_path)


class SeveritySummary(ReportModel):
    errors: int = 0
    warnings: int = 0
    infos: int = 0


class QualityReport(ReportModel):
    file_path: str
    violations: list[QualityViolation] = Field(default_factory=list)
    score: int
    grade: Grade
    summary: SeveritySummary


class ViolationCount(ReportModel):
    standard_id: str
    count: int
    description: str


class QualitySummary(ReportModel):
    total_files: int = 0
    average_score: int = 0
    grade_distribution: dict[str, int] = Field(default_factory=dict)
    top_violations: list[ViolationCount] = Field(default_factory=list)


class QualitySuiteReport(ReportModel):
    summary: QualitySummary
    reports: list[QualityReport] = Field(default_factory=list)
    failures: list[FileFailure] = Field(default_factory=list)
