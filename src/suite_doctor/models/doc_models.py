"""Models for generated test documentation."""

from datetime import datetime

from pydantic import Field

from suite_doctor.models.base import ReportModel
from suite_doctor.models.feature_models import Assertion, ComplexityLevel, TestStep
from suite_doctor.models.report_models import FileFailure


class TestCase(ReportModel):
    name: str
    description: str
    start_line: int
    steps: list[TestStep] = Field(default_factory=list)
    assertions: list[Assertion] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    complexity: ComplexityLevel = ComplexityLevel.LOW
    estimated_seconds: float = 0.0
    estimated_duration: str = "<5s"


class TestSuiteDoc(ReportModel):
    name: str
    description: str
    tests: list[TestCase] = Field(default_factory=list)
    setup: list[str] | None = None
    teardown: list[str] | None = None


class Coverage(ReportModel):
    features: list[str] = Field(default_factory=list)
    user_stories: list[str] = Field(default_factory=list)
    requirements: list[str] = Field(default_factory=list)


class TestDocumentation(ReportModel):
    file_path: str
    title: str
    description: str
    test_suites: list[TestSuiteDoc] = Field(default_factory=list)
    coverage: Coverage = Field(default_factory=Coverage)
    dependencies: list[str] = Field(default_factory=list)
    last_updated: datetime

    @property
    def test_count(self) -> int:
        return sum(len(suite.tests) for suite in self.test_suites)


class DocumentationSummary(ReportModel):
    total_files: int = 0
    total_test_suites: int = 0
    total_test_cases: int = 0
    feature_coverage: dict[str, int] = Field(default_factory=dict)
    complexity_distribution: dict[str, int] = Field(default_factory=dict)


class DocumentationSuiteReport(ReportModel):
    summary: DocumentationSummary
    documents: list[TestDocumentation] = Field(default_factory=list)
    failures: list[FileFailure] = Field(default_factory=list)
