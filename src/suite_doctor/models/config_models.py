"""Run configuration for the enhancement pipeline."""

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_TEST_FILE_SUFFIXES = (
    ".spec.ts", ".spec.tsx", ".spec.js", ".spec.jsx", ".spec.mjs", ".spec.cjs",
    ".test.ts", ".test.tsx", ".test.js", ".test.jsx", ".test.mjs", ".test.cjs",
)


class AnalysisThresholds(BaseModel):
    model_config = ConfigDict(frozen=True)

    max_test_length: int = 50             # lines per case block
    attention_index: int = 60             # maintainability index below this needs attention
    apply_min_improvement: float = 20.0   # apply mode writes only above this score


class EnhancementOptions(BaseModel):
    model_config = ConfigDict(frozen=True)

    test_directory: str
    output_directory: str
    enable_refactoring: bool = True
    enable_quality_check: bool = True
    enable_documentation: bool = True
    generate_reports: bool = True
    apply_refactoring: bool = False
    max_workers: int = Field(default=4, ge=1)
    time_budget_seconds: float | None = Field(default=None, gt=0)
    test_file_suffixes: tuple[str, ...] = DEFAULT_TEST_FILE_SUFFIXES
    exclude_dirs: tuple[str, ...] = ("node_modules", ".git", "test-results", "playwright-report")
    thresholds: AnalysisThresholds = Field(default_factory=AnalysisThresholds)
