"""Data models for suite-doctor."""

from suite_doctor.models.block_models import BlockKind, TestBlock, TestFile
from suite_doctor.models.config_models import AnalysisThresholds, EnhancementOptions
from suite_doctor.models.doc_models import (
    Coverage,
    DocumentationSuiteReport,
    DocumentationSummary,
    TestCase,
    TestDocumentation,
    TestSuiteDoc,
)
from suite_doctor.models.feature_models import (
    Assertion,
    CommentFinding,
    ComplexityBreakdown,
    ComplexityLevel,
    DuplicateLine,
    StepAction,
    TestStep,
)
from suite_doctor.models.maintainability_models import (
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
from suite_doctor.models.quality_models import (
    CodeExample,
    Grade,
    QualityReport,
    QualitySuiteReport,
    QualitySummary,
    QualityViolation,
    Severity,
    SeveritySummary,
    Standard,
    StandardCategory,
    ViolationCount,
)
from suite_doctor.models.refactor_models import (
    ApplyOutcome,
    ChangeType,
    RefactorContext,
    RefactoringChange,
    RefactoringResult,
    RefactoringSuiteReport,
    RefactoringSummary,
)
from suite_doctor.models.report_models import FileFailure, PipelineStage
from suite_doctor.models.run_models import RunSummary

__all__ = [
    "AnalysisThresholds",
    "ApplyOutcome",
    "Assertion",
    "BlockKind",
    "ChangeType",
    "BeforeAfter",
    "CodeExample",
    "CodeSmell",
    "CommentFinding",
    "ComplexityBreakdown",
    "ComplexityLevel",
    "Coverage",
    "DocumentationSuiteReport",
    "DocumentationSummary",
    "DuplicateLine",
    "EnhancementOptions",
    "FileFailure",
    "Grade",
    "IssueCount",
    "Level",
    "MaintainabilityDistribution",
    "MaintainabilityMetrics",
    "MaintainabilitySuiteReport",
    "MaintainabilitySummary",
    "OpportunityType",
    "PipelineStage",
    "QualityReport",
    "QualitySuiteReport",
    "QualitySummary",
    "QualityViolation",
    "RefactorContext",
    "RefactoringChange",
    "RefactoringOpportunity",
    "RefactoringResult",
    "RefactoringSuiteReport",
    "RefactoringSummary",
    "RunSummary",
    "Severity",
    "SeveritySummary",
    "SmellType",
    "Standard",
    "StandardCategory",
    "StepAction",
    "TestBlock",
    "TestCase",
    "TestDocumentation",
    "TestFile",
    "TestStep",
    "TestSuiteDoc",
    "ViolationCount",
]
