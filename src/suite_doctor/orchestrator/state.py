"""State definition for the LangGraph enhancement pipeline."""

import operator
import time
from datetime import datetime, timezone
from typing import Annotated, TypedDict

from suite_doctor.models import (
    ApplyOutcome,
    DocumentationSuiteReport,
    EnhancementOptions,
    FileFailure,
    MaintainabilitySuiteReport,
    QualitySuiteReport,
    RefactoringSuiteReport,
)


class EnhancementState(TypedDict):
    """State for the enhancement pipeline.

    Fields with Annotated[list, operator.add] reducers accumulate across nodes.
    All other fields use default overwrite semantics.
    """

    # Input
    options: EnhancementOptions
    started_at: datetime
    deadline: float | None          # time.monotonic() value, or None for no budget

    # Discovery
    files: list[str]

    # Stage reports
    refactoring: RefactoringSuiteReport | None
    maintainability: MaintainabilitySuiteReport | None
    quality: QualitySuiteReport | None
    documentation: DocumentationSuiteReport | None

    # Accumulating reducers
    applied: Annotated[list[ApplyOutcome], operator.add]
    failures: Annotated[list[FileFailure], operator.add]
    skipped: Annotated[list[str], operator.add]
    artifacts: Annotated[list[str], operator.add]
    errors: Annotated[list[str], operator.add]


def make_initial_state(
    options: EnhancementOptions,
    started_at: datetime | None = None,
    clock=time.monotonic,
) -> EnhancementState:
    """Create the initial state for one run.

    Args:
        options: Run configuration.
        started_at: Timestamp recorded in reports; defaults to now (UTC).
        clock: Monotonic clock used to turn the time budget into a deadline.

    Returns:
        EnhancementState dict with all fields initialised to defaults.
    """
    deadline = (
        clock() + options.time_budget_seconds
        if options.time_budget_seconds is not None
        else None
    )
    return {
        "options": options,
        "started_at": started_at or datetime.now(timezone.utc),
        "deadline": deadline,
        "files": [],
        "refactoring": None,
        "maintainability": None,
        "quality": None,
        "documentation": None,
        "applied": [],
        "failures": [],
        "skipped": [],
        "artifacts": [],
        "errors": [],
    }
