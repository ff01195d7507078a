"""CLI entry point for suite-doctor."""
import argparse
from dotenv import load_dotenv
import json
import sys
import traceback
from pathlib import Path

from pydantic import ValidationError

from suite_doctor.analyzers.exceptions import AnalysisError
from suite_doctor.logging_config import configure_logging
from suite_doctor.models import EnhancementOptions, RunSummary
from suite_doctor.orchestrator.exceptions import OrchestratorError

load_dotenv()

# Exit codes
EXIT_SUCCESS = 0
EXIT_FAILURE = 1
EXIT_KEYBOARD_INTERRUPT = 130

# Defaults
DEFAULT_TEST_DIRECTORY = "e2e/specs"
DEFAULT_OUTPUT_DIRECTORY = "e2e/maintainability-reports"
DEFAULT_MAX_WORKERS = 4


def build_parser() -> argparse.ArgumentParser:
    """Build and return the argument parser."""
    parser = argparse.ArgumentParser(
        prog="suite-doctor",
        description=(
            "Analyze an end-to-end test suite: refactoring suggestions, "
            "maintainability metrics, quality grades and generated documentation"
        ),
    )
    parser.add_argument(
        "test_directory",
        nargs="?",
        default=DEFAULT_TEST_DIRECTORY,
        help=f"Directory containing the test files (default: {DEFAULT_TEST_DIRECTORY})",
    )
    parser.add_argument(
        "output_directory",
        nargs="?",
        default=DEFAULT_OUTPUT_DIRECTORY,
        help=f"Directory for reports (default: {DEFAULT_OUTPUT_DIRECTORY})",
    )
    parser.add_argument(
        "--no-refactoring", action="store_true", help="Skip refactoring analysis"
    )
    parser.add_argument(
        "--no-quality", action="store_true", help="Skip the quality standards check"
    )
    parser.add_argument(
        "--no-docs", action="store_true", help="Skip documentation generation"
    )
    parser.add_argument(
        "--no-reports",
        action="store_true",
        help="Skip the Markdown improvement guides and the comprehensive report",
    )
    parser.add_argument(
        "--apply-refactoring",
        action="store_true",
        help="Rewrite files whose refactoring score is high enough (a .backup copy is kept)",
    )
    parser.add_argument(
        "--max-workers",
        type=int,
        default=DEFAULT_MAX_WORKERS,
        help=f"Files analyzed concurrently (default: {DEFAULT_MAX_WORKERS})",
    )
    parser.add_argument(
        "--time-budget",
        type=float,
        default=None,
        metavar="SECONDS",
        help="Stop scheduling new files after this many seconds",
    )
    parser.add_argument(
        "--output-json", action="store_true", help="Print the run summary as JSON"
    )
    parser.add_argument(
        "--verbose", action="store_true", help="Debug logging and tracebacks on errors"
    )
    return parser


def validate_test_directory(raw_path: str) -> str:
    """Validate and resolve the test directory.

    Args:
        raw_path: Raw path string from CLI arguments.

    Returns:
        Resolved absolute path as string.

    Raises:
        SystemExit: If path is not a valid directory.
    """
    resolved = Path(raw_path).resolve()
    if not resolved.is_dir():
        print(f"Error: '{raw_path}' is not a valid directory.", file=sys.stderr)
        raise SystemExit(EXIT_FAILURE)
    return str(resolved)


def build_options(args: argparse.Namespace, test_directory: str) -> EnhancementOptions:
    return EnhancementOptions(
        test_directory=test_directory,
        output_directory=str(Path(args.output_directory).resolve()),
        enable_refactoring=not args.no_refactoring,
        enable_quality_check=not args.no_quality,
        enable_documentation=not args.no_docs,
        generate_reports=not args.no_reports,
        apply_refactoring=args.apply_refactoring,
        max_workers=args.max_workers,
        time_budget_seconds=args.time_budget,
    )


def format_result_json(summary: RunSummary) -> str:
    """Serialize a run summary with camelCase keys."""
    return json.dumps(summary.to_payload(), indent=2, ensure_ascii=False)


def print_result_human(summary: RunSummary) -> None:
    """Print results in human-readable format."""
    print(f"\n{'='*60}")
    print("Suite Doctor Results")
    print(f"{'='*60}")
    print(f"\nTest directory: {summary.test_directory}")
    print(f"Files analyzed: {summary.files_discovered}")

    if summary.refactoring:
        print(
            f"Refactoring: {summary.refactoring.successful_refactorings} file(s) with changes, "
            f"average score {summary.refactoring.average_improvement_score}"
        )
    if summary.maintainability:
        print(
            f"Maintainability: average index "
            f"{summary.maintainability.average_maintainability_index}, "
            f"{summary.maintainability.files_needing_attention} file(s) need attention"
        )
    if summary.quality:
        print(f"Quality: average score {summary.quality.average_score}/100")
    if summary.documentation:
        print(
            f"Documentation: {summary.documentation.total_test_suites} suite(s), "
            f"{summary.documentation.total_test_cases} case(s)"
        )

    applied = [outcome for outcome in summary.applied if outcome.applied]
    if summary.applied:
        print(f"\nRewritten files: {len(applied)} of {len(summary.applied)} attempted")

    if summary.skipped_files:
        print(f"\nSkipped (time budget): {len(summary.skipped_files)}")

    if summary.failures:
        print(f"\nFailures ({len(summary.failures)}):")
        for failure in summary.failures:
            print(f"  - {failure.file_path} [{failure.stage.value}]: {failure.error}")

    if summary.errors:
        print(f"\nErrors ({len(summary.errors)}):")
        for err in summary.errors:
            print(f"  - {err}")

    print(f"\nReports written to: {summary.output_directory}")
    print(f"{'='*60}")


def _handle_error(label: str, exc: BaseException, verbose: bool, exit_code: int) -> int:
    """Print error message to stderr and return the exit code."""
    print(f"{label}: {exc}", file=sys.stderr)
    if verbose:
        traceback.print_exc(file=sys.stderr)
    return exit_code


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:]).

    Returns:
        Exit code integer.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        configure_logging(level="DEBUG" if args.verbose else None)
    except ValueError as exc:
        return _handle_error("Configuration error", exc, args.verbose, EXIT_FAILURE)

    try:
        test_directory = validate_test_directory(args.test_directory)
    except SystemExit as exc:
        return exc.code

    try:
        options = build_options(args, test_directory)
    except ValidationError as exc:
        return _handle_error("Invalid options", exc, args.verbose, EXIT_FAILURE)

    try:
        from suite_doctor.orchestrator.graph import run_enhancement

        summary = run_enhancement(options)

        if args.output_json:
            print(format_result_json(summary))
        else:
            print_result_human(summary)
        return EXIT_SUCCESS

    except OrchestratorError as exc:
        return _handle_error("Orchestrator error", exc, args.verbose, EXIT_FAILURE)

    except AnalysisError as exc:
        return _handle_error("Analysis error", exc, args.verbose, EXIT_FAILURE)

    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        return EXIT_KEYBOARD_INTERRUPT

    except Exception as exc:
        return _handle_error("Unexpected error", exc, args.verbose, EXIT_FAILURE)


if __name__ == "__main__":
    sys.exit(main())
