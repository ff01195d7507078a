"""Models produced by the per-block feature extractors."""

from enum import Enum

from suite_doctor.models.base import ReportModel


class StepAction(str, Enum):
    NAVIGATE = "navigate"
    CLICK = "click"
    FILL = "fill"
    UPLOAD = "upload"
    WAIT_FOR_SELECTOR = "wait-for-selector"
    WAIT_FOR_TIMEOUT = "wait-for-timeout"


STEP_ACTION_LABELS: dict[StepAction, str] = {
    StepAction.NAVIGATE: "Navigate to",
    StepAction.CLICK: "Click",
    StepAction.FILL: "Fill in",
    StepAction.UPLOAD: "Upload file to",
    StepAction.WAIT_FOR_SELECTOR: "Wait for element",
    StepAction.WAIT_FOR_TIMEOUT: "Wait",
}


class TestStep(ReportModel):
    action: StepAction
    target: str | None = None
    data: str | None = None
    expected: str | None = None
    line: int | None = None      # 1-based, relative to the block

    @property
    def description(self) -> str:
        label = STEP_ACTION_LABELS[self.action]
        if self.action == StepAction.WAIT_FOR_TIMEOUT:
            return f"{label} {self.data}ms" if self.data else label
        parts = [label]
        if self.target:
            parts.append(self.target)
        if self.data:
            parts.append(f"with {self.data!r}")
        return " ".join(parts)


class Assertion(ReportModel):
    text: str                     # rendered sentence or verbatim fallback
    target: str | None = None
    matcher: str | None = None
    expected: str | None = None

    @property
    def is_recognized(self) -> bool:
        return self.matcher is not None


class ComplexityLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ComplexityBreakdown(ReportModel):
    max_nesting: int = 0
    conditional_count: int = 0
    loop_count: int = 0
    async_op_count: int = 0
    score: float = 0.0            # clipped to [0, 10]

    @property
    def level(self) -> ComplexityLevel:
        if self.score <= 3:
            return ComplexityLevel.LOW
        if self.score <= 7:
            return ComplexityLevel.MEDIUM
        return ComplexityLevel.HIGH


class DuplicateLine(ReportModel):
    text: str
    line_numbers: list[int]

    @property
    def occurrences(self) -> int:
        return len(self.line_numbers)


class CommentFinding(ReportModel):
    line: int                     # 1-based
    kind: str                     # "long-wait" | "bulk-count" | ...
    description: str
    text: str                     # trimmed source line
