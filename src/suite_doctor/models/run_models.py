"""Summary of one enhancement run, as printed by ``--output-json``."""

from pydantic import Field

from suite_doctor.models.base import ReportModel
from suite_doctor.models.doc_models import DocumentationSummary
from suite_doctor.models.maintainability_models import MaintainabilitySummary
from suite_doctor.models.quality_models import QualitySummary
from suite_doctor.models.refactor_models import ApplyOutcome, RefactoringSummary
from suite_doctor.models.report_models import FileFailure


class RunSummary(ReportModel):
    test_directory: str
    output_directory: str
    files_discovered: int = 0
    skipped_files: list[str] = Field(default_factory=list)
    refactoring: RefactoringSummary | None = None
    maintainability: MaintainabilitySummary | None = None
    quality: QualitySummary | None = None
    documentation: DocumentationSummary | None = None
    applied: list[ApplyOutcome] = Field(default_factory=list)
    failures: list[FileFailure] = Field(default_factory=list)
    artifacts: list[str] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)

    @property
    def aborted(self) -> bool:
        return any(error.startswith("ABORT:") for error in self.errors)
