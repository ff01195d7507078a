"""Per-file analyzers and their suite-level aggregation."""

from suite_doctor.analyzers.exceptions import (
    AnalysisError,
    ApplyError,
    CheckerError,
    DiscoveryError,
    SourceFileError,
)
from suite_doctor.analyzers.documentation_generator import (
    DocumentationGenerator,
    render_index,
    render_markdown,
)
from suite_doctor.analyzers.maintainability_analyzer import MaintainabilityAnalyzer
from suite_doctor.analyzers.quality_checker import QualityChecker
from suite_doctor.analyzers.refactorer import Refactorer
from suite_doctor.analyzers.suite_indexer import SuiteIndexer, read_test_file

__all__ = [
    "AnalysisError",
    "ApplyError",
    "CheckerError",
    "DiscoveryError",
    "DocumentationGenerator",
    "MaintainabilityAnalyzer",
    "QualityChecker",
    "Refactorer",
    "SourceFileError",
    "SuiteIndexer",
    "read_test_file",
    "render_index",
    "render_markdown",
]
