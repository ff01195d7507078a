"""LangGraph orchestrator package for the enhancement pipeline."""

from suite_doctor.orchestrator.batch import BatchOutcome, map_files
from suite_doctor.orchestrator.exceptions import (
    GraphBuildError,
    OrchestratorError,
    PipelineAbortedError,
)
from suite_doctor.orchestrator.graph import build_graph, run_enhancement
from suite_doctor.orchestrator.state import EnhancementState, make_initial_state

__all__ = [
    "BatchOutcome",
    "EnhancementState",
    "GraphBuildError",
    "OrchestratorError",
    "PipelineAbortedError",
    "build_graph",
    "make_initial_state",
    "map_files",
    "run_enhancement",
]
