"""Models for advisory refactoring results and apply-mode outcomes."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from suite_doctor.models.base import ReportModel
from suite_doctor.models.report_models import FileFailure


class ChangeType(str, Enum):
    EXTRACT_CONSTANT = "extract-constant"
    EXTRACT_METHOD = "extract-method"
    SIMPLIFY_SELECTOR = "simplify-selector"
    ADD_COMMENT = "add-comment"
    IMPROVE_NAMING = "improve-naming"


class RefactoringChange(ReportModel):
    type: ChangeType
    line: int                     # 1-based
    description: str
    before: str
    after: str


class RefactorContext(BaseModel):
    """Constant and method name tables for one refactoring run.

    A context is owned by a single call. Callers that process several files
    combine the returned contexts with :meth:`merge`.
    """

    model_config = ConfigDict(frozen=False, alias_generator=to_camel, populate_by_name=True)

    timeout_constants: dict[str, str] = Field(default_factory=dict)     # value -> name
    test_data_constants: dict[str, str] = Field(default_factory=dict)   # value -> name
    extracted_methods: dict[str, str] = Field(default_factory=dict)     # snippet -> name

    @property
    def extraction_count(self) -> int:
        return (
            len(self.timeout_constants)
            + len(self.test_data_constants)
            + len(self.extracted_methods)
        )

    def taken_names(self) -> set[str]:
        return (
            set(self.timeout_constants.values())
            | set(self.test_data_constants.values())
            | set(self.extracted_methods.values())
        )

    def merge(self, other: "RefactorContext") -> "RefactorContext":
        """Return a new context holding both tables; existing entries win."""
        return RefactorContext(
            timeout_constants={**other.timeout_constants, **self.timeout_constants},
            test_data_constants={**other.test_data_constants, **self.test_data_constants},
            extracted_methods={**other.extracted_methods, **self.extracted_methods},
        )


class RefactoringResult(ReportModel):
    file_path: str
    original_content: str
    refactored_content: str
    changes: list[RefactoringChange] = Field(default_factory=list)
    improvement_score: float = 0.0
    diff_text: str = ""
    context: RefactorContext = Field(default_factory=RefactorContext)


class ApplyOutcome(ReportModel):
    file_path: str
    applied: bool
    backup_path: str | None = None
    reason: str | None = None     # why the file was skipped or failed


class RefactoringSummary(ReportModel):
    total_files: int = 0
    successful_refactorings: int = 0
    total_changes: int = 0
    average_improvement_score: float = 0.0


class RefactoringSuiteReport(ReportModel):
    summary: RefactoringSummary
    results: list[RefactoringResult] = Field(default_factory=list)
    constants: RefactorContext = Field(default_factory=RefactorContext)
    failures: list[FileFailure] = Field(default_factory=list)
