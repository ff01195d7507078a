"""Models for maintainability metrics, code smells and opportunities."""

from enum import Enum

from pydantic import Field

from suite_doctor.models.base import ReportModel
from suite_doctor.models.report_models import FileFailure


class Level(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


LEVEL_RANK: dict[Level, int] = {Level.HIGH: 3, Level.MEDIUM: 2, Level.LOW: 1}


class SmellType(str, Enum):
    LONG_TEST = "long-test"
    DUPLICATE_CODE = "duplicate-code"
    COMPLEX_LOGIC = "complex-logic"
    POOR_NAMING = "poor-naming"
    MISSING_COMMENTS = "missing-comments"
    HARD_CODED_VALUES = "hard-coded-values"


class CodeSmell(ReportModel):
    type: SmellType
    line: int                     # 1-based
    description: str
    severity: Level
    refactoring_effort: Level


class MaintainabilityMetrics(ReportModel):
    test_file: str
    lines_of_code: int = 0
    test_count: int = 0
    average_test_length: int = 0
    duplicated_code: int = 0
    complexity_score: float = 0.0          # [0, 10]
    maintainability_index: float = 100.0   # [0, 100]
    code_smells: list[CodeSmell] = Field(default_factory=list)
    suggestions: list[str] = Field(default_factory=list)

    def smells_of(self, smell_type: SmellType) -> list[CodeSmell]:
        return [smell for smell in self.code_smells if smell.type == smell_type]


class OpportunityType(str, Enum):
    EXTRACT_METHOD = "extract-method"
    EXTRACT_CONSTANT = "extract-constant"
    SIMPLIFY_LOGIC = "simplify-logic"
    IMPROVE_NAMING = "improve-naming"
    ADD_COMMENTS = "add-comments"


class BeforeAfter(ReportModel):
    before: str
    after: str


class RefactoringOpportunity(ReportModel):
    type: OpportunityType
    test_file: str
    description: str
    estimated_effort: str          # coarse hours range, e.g. "2-4 hours"
    impact: Level
    code_example: BeforeAfter | None = None


class MaintainabilityDistribution(ReportModel):
    excellent: int = 0    # >= 90
    good: int = 0         # 70-89
    fair: int = 0         # 50-69
    poor: int = 0         # < 50


class IssueCount(ReportModel):
    type: SmellType
    count: int


class MaintainabilitySummary(ReportModel):
    total_files: int = 0
    average_maintainability_index: int = 0
    files_needing_attention: int = 0
    total_code_smells: int = 0


class MaintainabilitySuiteReport(ReportModel):
    summary: MaintainabilitySummary
    file_metrics: list[MaintainabilityMetrics] = Field(default_factory=list)
    refactoring_opportunities: list[RefactoringOpportunity] = Field(default_factory=list)
    distribution: MaintainabilityDistribution = Field(default_factory=MaintainabilityDistribution)
    top_issues: list[IssueCount] = Field(default_factory=list)
    failures: list[FileFailure] = Field(default_factory=list)
