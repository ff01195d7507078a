"""LangGraph orchestrator graph for the enhancement pipeline.

Wires SuiteIndexer, Refactorer, MaintainabilityAnalyzer, QualityChecker and
DocumentationGenerator into a StateGraph. Disabled stages are skipped with
conditional edges; an empty or failed discovery routes to the abort node.
"""

import logging
import os
from datetime import datetime
from typing import Callable

from langgraph.graph import END, START, StateGraph

from suite_doctor.analyzers.documentation_generator import DocumentationGenerator
from suite_doctor.analyzers.exceptions import AnalysisError
from suite_doctor.analyzers.maintainability_analyzer import MaintainabilityAnalyzer
from suite_doctor.analyzers.quality_checker import QualityChecker
from suite_doctor.analyzers.refactorer import Refactorer, applicable_results
from suite_doctor.analyzers.suite_indexer import SuiteIndexer
from suite_doctor.models import EnhancementOptions, PipelineStage, RunSummary
from suite_doctor.orchestrator import artifacts
from suite_doctor.orchestrator.batch import map_files
from suite_doctor.orchestrator.exceptions import GraphBuildError, PipelineAbortedError
from suite_doctor.orchestrator.state import EnhancementState, make_initial_state

logger = logging.getLogger(__name__)

# Stage nodes in pipeline order; discovery always runs first.
STAGE_ORDER = ("refactor", "apply", "maintainability", "quality", "documentation", "report")
DONE = "done"
ABORT = "abort"


def stage_enabled(stage: str, options: EnhancementOptions) -> bool:
    if stage == "refactor":
        return options.enable_refactoring
    if stage == "apply":
        return options.enable_refactoring and options.apply_refactoring
    if stage == "quality":
        return options.enable_quality_check
    if stage == "documentation":
        return options.enable_documentation
    if stage == "report":
        return options.generate_reports
    return True


def next_stage(after: str | None, options: EnhancementOptions) -> str:
    """Name of the first enabled stage following ``after``, or ``done``."""
    start = 0 if after is None else STAGE_ORDER.index(after) + 1
    for stage in STAGE_ORDER[start:]:
        if stage_enabled(stage, options):
            return stage
    return DONE


def make_router(after: str | None) -> Callable[[EnhancementState], str]:
    """Factory: returns the conditional-edge function leaving a node.

    Leaving discovery (``after`` is None), a run without files aborts.
    """

    def route(state: EnhancementState) -> str:
        if after is None and not state["files"]:
            return ABORT
        return next_stage(after, state["options"])

    return route


def make_discover_node(indexer: SuiteIndexer) -> Callable[[EnhancementState], dict]:
    """Factory: returns a node closure that lists the test files.

    On error: returns {"errors": [str], "files": []}
    """

    def discover_node(state: EnhancementState) -> dict:
        try:
            files, failures = indexer.discover(state["options"].test_directory)
            return {"files": files, "failures": failures}
        except AnalysisError as exc:
            logger.error("Discovery failed: %s", exc)
            return {"errors": [f"discover_node error: {exc}"], "files": []}

    return discover_node


def make_refactor_node(refactorer: Refactorer) -> Callable[[EnhancementState], dict]:
    """Factory: returns a node closure that proposes refactorings per file.

    Writes ``refactoring-analysis.json``.
    """

    def refactor_node(state: EnhancementState) -> dict:
        options = state["options"]
        batch = map_files(
            state["files"], refactorer.refactor_file, PipelineStage.REFACTORING,
            max_workers=options.max_workers, deadline=state["deadline"],
        )
        report = refactorer.summarize(batch.results, batch.failures)
        update = {
            "refactoring": report,
            "failures": batch.failures,
            "skipped": batch.skipped,
        }
        try:
            update["artifacts"] = artifacts.write_refactoring_report(
                report, options.output_directory, state["started_at"]
            )
        except OSError as exc:
            update["errors"] = [f"refactor_node error: {exc}"]
        return update

    return refactor_node


def make_apply_node(refactorer: Refactorer) -> Callable[[EnhancementState], dict]:
    """Factory: returns a node closure that rewrites qualifying files.

    Only results above the apply threshold are attempted; every attempt
    yields an ApplyOutcome, including failed writes.
    """

    def apply_node(state: EnhancementState) -> dict:
        options = state["options"]
        report = state["refactoring"]
        if report is None:
            return {"applied": []}

        candidates = {
            result.file_path: result
            for result in applicable_results(report.results, options.thresholds)
        }
        batch = map_files(
            list(candidates), lambda path: refactorer.apply(candidates[path]),
            PipelineStage.APPLY,
            max_workers=options.max_workers, deadline=state["deadline"],
        )
        applied = sum(1 for outcome in batch.results if outcome.applied)
        logger.info("Applied refactorings to %d of %d file(s)", applied, len(candidates))
        return {"applied": batch.results, "failures": batch.failures, "skipped": batch.skipped}

    return apply_node


def make_maintainability_node(
    analyzer: MaintainabilityAnalyzer,
) -> Callable[[EnhancementState], dict]:
    """Factory: returns a node closure computing maintainability metrics.

    Writes ``maintainability-report.json``.
    """

    def maintainability_node(state: EnhancementState) -> dict:
        options = state["options"]
        batch = map_files(
            state["files"], analyzer.analyze_file, PipelineStage.MAINTAINABILITY,
            max_workers=options.max_workers, deadline=state["deadline"],
        )
        report = analyzer.summarize(batch.results, batch.failures)
        update = {
            "maintainability": report,
            "failures": batch.failures,
            "skipped": batch.skipped,
        }
        try:
            update["artifacts"] = artifacts.write_maintainability_report(
                report, options.output_directory, state["started_at"]
            )
        except OSError as exc:
            update["errors"] = [f"maintainability_node error: {exc}"]
        return update

    return maintainability_node


def make_quality_node(checker: QualityChecker) -> Callable[[EnhancementState], dict]:
    """Factory: returns a node closure grading files against the standards.

    Writes ``quality-standards-report.json``.
    """

    def quality_node(state: EnhancementState) -> dict:
        options = state["options"]
        batch = map_files(
            state["files"], checker.check_file, PipelineStage.QUALITY,
            max_workers=options.max_workers, deadline=state["deadline"],
        )
        report = checker.summarize(batch.results, batch.failures)
        update = {"quality": report, "failures": batch.failures, "skipped": batch.skipped}
        try:
            update["artifacts"] = artifacts.write_quality_report(
                report, checker.registry, options.output_directory, state["started_at"]
            )
        except OSError as exc:
            update["errors"] = [f"quality_node error: {exc}"]
        return update

    return quality_node


def make_documentation_node(
    generator: DocumentationGenerator,
) -> Callable[[EnhancementState], dict]:
    """Factory: returns a node closure documenting every file.

    Writes ``test-docs/*.md`` and ``test-suite-index.md``.
    """

    def documentation_node(state: EnhancementState) -> dict:
        options = state["options"]
        started_at = state["started_at"]
        batch = map_files(
            state["files"], lambda path: generator.document_file(path, now=started_at),
            PipelineStage.DOCUMENTATION,
            max_workers=options.max_workers, deadline=state["deadline"],
        )
        report = generator.summarize(batch.results, batch.failures)
        update = {
            "documentation": report,
            "failures": batch.failures,
            "skipped": batch.skipped,
        }
        try:
            update["artifacts"] = artifacts.write_documentation(report, options.output_directory)
        except OSError as exc:
            update["errors"] = [f"documentation_node error: {exc}"]
        return update

    return documentation_node


def summarize_run(state: EnhancementState, extra_artifacts: list[str] | None = None) -> RunSummary:
    """Collapse a pipeline state into a :class:`RunSummary`."""
    options = state["options"]
    return RunSummary(
        test_directory=options.test_directory,
        output_directory=options.output_directory,
        files_discovered=len(state["files"]),
        skipped_files=list(dict.fromkeys(state["skipped"])),
        refactoring=state["refactoring"].summary if state["refactoring"] else None,
        maintainability=state["maintainability"].summary if state["maintainability"] else None,
        quality=state["quality"].summary if state["quality"] else None,
        documentation=state["documentation"].summary if state["documentation"] else None,
        applied=state["applied"],
        failures=state["failures"],
        artifacts=[*state["artifacts"], *(extra_artifacts or [])],
        errors=state["errors"],
    )


def report_node(state: EnhancementState) -> dict:
    """Write the Markdown guides and ``comprehensive-report.md``."""
    output_directory = state["options"].output_directory
    try:
        written = artifacts.write_guides(
            output_directory,
            state["refactoring"],
            state["maintainability"],
            state["quality"],
        )
        comprehensive_path = os.path.join(output_directory, artifacts.COMPREHENSIVE_MD)
        run = summarize_run(state, extra_artifacts=[*written, comprehensive_path])
        artifacts.write_text(
            comprehensive_path,
            artifacts.render_comprehensive_report(
                run, state["started_at"], state["maintainability"]
            ),
        )
        return {"artifacts": [*written, comprehensive_path]}
    except OSError as exc:
        return {"errors": [f"report_node error: {exc}"]}


def abort_node(state: EnhancementState) -> dict:
    """Write a diagnostic abort summary to the errors list.

    Returns:
        {"errors": [summary]} describing the abort reason.
    """
    directory = state["options"].test_directory
    if state["errors"]:
        summary = f"ABORT: discovery failed for {directory}: {state['errors'][-1]}"
    else:
        summary = f"ABORT: no test files found in {directory}"
    logger.error(summary)
    return {"errors": [summary]}


def build_graph(
    indexer: SuiteIndexer,
    refactorer: Refactorer,
    analyzer: MaintainabilityAnalyzer,
    checker: QualityChecker,
    generator: DocumentationGenerator,
):
    """Build and compile the enhancement StateGraph.

    Edge topology:
      START -> discover_node -> conditional -> {first enabled stage, abort_node}
      each stage -> conditional -> {next enabled stage, END}
      stage order: refactor, apply, maintainability, quality, documentation, report
      abort_node -> END

    Args:
        indexer: SuiteIndexer instance.
        refactorer: Refactorer instance, shared by the refactor and apply nodes.
        analyzer: MaintainabilityAnalyzer instance.
        checker: QualityChecker instance.
        generator: DocumentationGenerator instance.

    Returns:
        CompiledStateGraph ready to invoke.

    Raises:
        GraphBuildError: If graph construction fails.
    """
    try:
        graph = StateGraph(EnhancementState)

        nodes = {
            "refactor": make_refactor_node(refactorer),
            "apply": make_apply_node(refactorer),
            "maintainability": make_maintainability_node(analyzer),
            "quality": make_quality_node(checker),
            "documentation": make_documentation_node(generator),
            "report": report_node,
        }

        graph.add_node("discover_node", make_discover_node(indexer))
        for stage in STAGE_ORDER:
            graph.add_node(f"{stage}_node", nodes[stage])
        graph.add_node("abort_node", abort_node)

        graph.add_edge(START, "discover_node")
        graph.add_conditional_edges(
            "discover_node",
            make_router(None),
            {
                **{stage: f"{stage}_node" for stage in STAGE_ORDER},
                ABORT: "abort_node",
                DONE: END,
            },
        )
        for index, stage in enumerate(STAGE_ORDER):
            graph.add_conditional_edges(
                f"{stage}_node",
                make_router(stage),
                {
                    **{later: f"{later}_node" for later in STAGE_ORDER[index + 1:]},
                    DONE: END,
                },
            )
        graph.add_edge("abort_node", END)

        return graph.compile()

    except Exception as exc:
        raise GraphBuildError(f"Failed to build enhancement graph: {exc}") from exc


def run_enhancement(
    options: EnhancementOptions,
    started_at: datetime | None = None,
) -> RunSummary:
    """Run the whole pipeline for ``options``.

    Args:
        options: Run configuration.
        started_at: Timestamp recorded in reports; defaults to now (UTC).

    Returns:
        RunSummary of the finished run. Per-file failures are listed on it.

    Raises:
        GraphBuildError: If the graph cannot be built.
        PipelineAbortedError: If discovery failed or found no test files.
    """
    graph = build_graph(
        indexer=SuiteIndexer(options.test_file_suffixes, options.exclude_dirs),
        refactorer=Refactorer(options.thresholds),
        analyzer=MaintainabilityAnalyzer(options.thresholds),
        checker=QualityChecker(),
        generator=DocumentationGenerator(),
    )
    final_state = graph.invoke(make_initial_state(options, started_at=started_at))
    run = summarize_run(final_state)

    if run.aborted:
        abort_message = next(error for error in run.errors if error.startswith("ABORT:"))
        raise PipelineAbortedError(abort_message)

    logger.info(
        "Run finished: %d file(s), %d failure(s), %d artifact(s)",
        run.files_discovered, len(run.failures), len(run.artifacts),
    )
    return run
