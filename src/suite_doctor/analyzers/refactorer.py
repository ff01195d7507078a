"""Advisory refactorer for e2e test files.

Every change is recorded as a :class:`RefactoringChange`. Constant extraction
and comment insertion are reflected in ``refactored_content``; selector,
method and naming changes are suggestions only. Nothing touches the disk
unless :meth:`Refactorer.apply` is called.
"""

import filecmp
import logging
import re
import shutil
import threading
from collections.abc import Iterable
from pathlib import Path

from suite_doctor.analyzers.exceptions import ApplyError, SourceFileError
from suite_doctor.analyzers.suite_indexer import read_test_file
from suite_doctor.extractors.blocks import CASE_PATTERN, SUITE_PATTERN
from suite_doctor.extractors.comments import classify_line, has_nearby_comment
from suite_doctor.extractors.complexity import (
    CONDITIONAL_PATTERN,
    LOOP_PATTERN,
    max_nesting,
)
from suite_doctor.extractors.duplicates import is_comment_line
from suite_doctor.extractors.literals import (
    MIN_TIMEOUT_CONSTANT_MS,
    STRING_LITERAL_PATTERN,
    TIMEOUT_CALL_PATTERN,
    looks_like_test_data,
    test_data_constant_name,
    timeout_constant_name,
)
from suite_doctor.models.config_models import AnalysisThresholds
from suite_doctor.models.refactor_models import (
    ApplyOutcome,
    ChangeType,
    RefactorContext,
    RefactoringChange,
    RefactoringResult,
    RefactoringSuiteReport,
    RefactoringSummary,
)
from suite_doctor.models.report_models import FileFailure
from suite_doctor.utils.diff_generator import (
    detect_code_style,
    generate_unified_diff,
    quote_literal,
)
from suite_doctor.utils.syntax_check import introduces_syntax_errors

logger = logging.getLogger(__name__)

METHOD_WINDOW = 3
BACKUP_SUFFIX = ".backup"

SELECTOR_PATTERNS: list[tuple[re.Pattern[str], str]] = [
    (
        re.compile(r"page\.locator\('([^']*\s+[^']*\s+[^']*)'\)"),
        "Replace the multi-level CSS selector with a data-testid",
    ),
    (
        re.compile(r"page\.locator\('([^']*:nth-child\([^)]+\)[^']*)'\)"),
        "Avoid nth-child; use a stable selector",
    ),
    (
        re.compile(r"page\.locator\('([^']*\[[^\]]+\].*\[[^\]]+\][^']*)'\)"),
        "Simplify the multi-attribute selector",
    ),
]
SELECTOR_WORD_PATTERN = re.compile(r"[a-zA-Z-]+")

NAMING_FIXES = {
    "data": "testData",
    "temp": "temporary",
    "res": "result",
    "elem": "element",
}
NAMING_PATTERN = re.compile(r"\b(?:const|let|var)\s+(data|temp|res|elem)\b")

METHOD_NAME_HINTS = (
    ("login", "performLogin"),
    ("register", "performRegistration"),
    ("upload", "uploadFile"),
    ("analysis", "performAnalysis"),
)

IMPORT_START_PATTERN = re.compile(r"^\s*import\b")
COUNT_PATTERN = re.compile(r"toHaveCount\(\s*(\d+)\s*\)")


def suggest_test_id(selector: str) -> str:
    """Join the word-like parts of a CSS selector into a test id."""
    return "-".join(SELECTOR_WORD_PATTERN.findall(selector)).lower()


def generate_comment(line: str) -> str | None:
    """Explanatory comment text for a needs-explanation line."""
    classified = classify_line(line)
    if classified is None:
        return None
    kind, _ = classified
    if kind == "long-wait":
        match = TIMEOUT_CALL_PATTERN.search(line)
        return f"Wait {match.group(1)}ms for the operation to settle"
    if kind == "bulk-count":
        match = COUNT_PATTERN.search(line)
        count = match.group(1) if match else "the expected number of"
        return f"Expect exactly {count} matching elements"
    if kind == "page-evaluate":
        return "Run script in the page context"
    if kind == "concurrent":
        return "Run these async operations concurrently"
    if kind == "selector-timeout":
        return "Wait for the element with an explicit timeout"
    if kind == "positional-locator":
        return "Select the element by position in the list"
    return None


def raw_complexity(content: str) -> int:
    """nesting*2 + conditionals + loops*2, used to score refactorings."""
    return (
        max_nesting(content) * 2
        + len(CONDITIONAL_PATTERN.findall(content))
        + len(LOOP_PATTERN.findall(content)) * 2
    )


def calculate_improvement_score(
    original_content: str,
    refactored_content: str,
    change_count: int,
) -> float:
    """Score a refactoring on a 0-100 scale."""
    score = min(change_count * 10, 50)

    length_reduction = len(original_content) - len(refactored_content)
    score += min(max(0, length_reduction) / 100, 30)

    complexity_reduction = raw_complexity(original_content) - raw_complexity(refactored_content)
    score += min(max(0, complexity_reduction) * 5, 20)

    return round(min(float(score), 100.0), 2)


def _unique_name(base: str, taken: set[str]) -> str:
    if base not in taken:
        return base
    suffix = 2
    while f"{base}_{suffix}" in taken:
        suffix += 1
    return f"{base}_{suffix}"


def _import_block_end(lines: list[str]) -> int:
    """Index of the first line after the leading import statements."""
    end = 0
    in_import = False
    for index, line in enumerate(lines):
        if CASE_PATTERN.search(line) or SUITE_PATTERN.search(line):
            break
        if IMPORT_START_PATTERN.match(line):
            in_import = True
        if in_import and (" from " in line or line.rstrip().endswith(";") or "from '" in line):
            end = index + 1
            in_import = False
    return end


def render_constant_definitions(context: RefactorContext, quotes: str = "single") -> str:
    """Render ``const`` declarations for every constant in ``context``."""
    sections: list[str] = []
    if context.timeout_constants:
        sections.append("// Timeout constants")
        for value, name in context.timeout_constants.items():
            sections.append(f"const {name} = {value};")
        sections.append("")
    if context.test_data_constants:
        sections.append("// Test data constants")
        for value, name in context.test_data_constants.items():
            sections.append(f"const {name} = {quote_literal(value, quotes)};")
        sections.append("")
    return "\n".join(sections)


def render_extracted_methods(context: RefactorContext) -> str:
    """Render helper skeletons for every extracted method."""
    methods = []
    for snippet, name in context.extracted_methods.items():
        body = "\n".join(f"  {line}" for line in snippet.split("\n"))
        methods.append(
            "/**\n"
            " * Shared steps extracted from repeated code\n"
            " */\n"
            f"async function {name}(page: Page): Promise<void> {{\n"
            f"{body}\n"
            "}\n"
        )
    return "\n".join(methods)


class Refactorer:
    """Proposes refactorings and optionally rewrites files in place."""

    def __init__(self, thresholds: AnalysisThresholds | None = None) -> None:
        self.thresholds = thresholds or AnalysisThresholds()
        self._locks_guard = threading.Lock()
        self._path_locks: dict[str, threading.Lock] = {}

    def refactor_file(self, file_path: str) -> RefactoringResult:
        """Read and refactor one file.

        Raises:
            SourceFileError: If the file cannot be read.
        """
        test_file = read_test_file(file_path)
        return self.refactor_content(test_file.content, file_path)

    def refactor_content(
        self,
        content: str,
        file_path: str,
        context: RefactorContext | None = None,
    ) -> RefactoringResult:
        """Refactor ``content`` using a fresh or caller-supplied context.

        The context is filled with the constants and methods found here and
        returned on the result.
        """
        context = context if context is not None else RefactorContext()
        changes: list[RefactoringChange] = []

        refactored = self._extract_constants(content, context, changes)
        self._extract_common_methods(content, context, changes)
        self._improve_selectors(content, changes)
        refactored = self._add_missing_comments(refactored, changes)
        self._improve_naming(content, changes)

        extractions = sum(
            1 for change in changes
            if change.type in (ChangeType.EXTRACT_CONSTANT, ChangeType.EXTRACT_METHOD)
        )
        score = calculate_improvement_score(content, refactored, extractions)
        logger.debug("Refactored %s: %d changes, score %.2f", file_path, len(changes), score)

        return RefactoringResult(
            file_path=file_path,
            original_content=content,
            refactored_content=refactored,
            changes=changes,
            improvement_score=score,
            diff_text=generate_unified_diff(file_path, content, refactored),
            context=context,
        )

    def _extract_constants(
        self,
        content: str,
        context: RefactorContext,
        changes: list[RefactoringChange],
    ) -> str:
        taken = context.taken_names()
        used_timeouts: dict[str, str] = {}
        used_data: dict[str, str] = {}

        for match in TIMEOUT_CALL_PATTERN.finditer(content):
            value = match.group(1)
            if int(value) < MIN_TIMEOUT_CONSTANT_MS or value in used_timeouts:
                continue
            name = context.timeout_constants.get(value)
            if name is None:
                name = _unique_name(timeout_constant_name(int(value)), taken)
                taken.add(name)
                context.timeout_constants[value] = name
            used_timeouts[value] = name
            changes.append(RefactoringChange(
                type=ChangeType.EXTRACT_CONSTANT,
                line=content.count("\n", 0, match.start()) + 1,
                description=f"Extract timeout constant {value}ms",
                before=match.group(0),
                after=f"waitForTimeout({name})",
            ))

        for match in STRING_LITERAL_PATTERN.finditer(content):
            value = match.group(2)
            if not looks_like_test_data(value) or value in used_data:
                continue
            name = context.test_data_constants.get(value)
            if name is None:
                name = _unique_name(test_data_constant_name(value), taken)
                taken.add(name)
                context.test_data_constants[value] = name
            used_data[value] = name
            changes.append(RefactoringChange(
                type=ChangeType.EXTRACT_CONSTANT,
                line=content.count("\n", 0, match.start()) + 1,
                description="Extract test data constant",
                before=match.group(0),
                after=name,
            ))

        if not used_timeouts and not used_data:
            return content

        refactored = TIMEOUT_CALL_PATTERN.sub(
            lambda m: f"waitForTimeout({used_timeouts[m.group(1)]})"
            if m.group(1) in used_timeouts else m.group(0),
            content,
        )
        refactored = STRING_LITERAL_PATTERN.sub(
            lambda m: used_data[m.group(2)] if m.group(2) in used_data else m.group(0),
            refactored,
        )

        definitions = render_constant_definitions(
            RefactorContext(timeout_constants=used_timeouts, test_data_constants=used_data),
            detect_code_style(content)["quotes"],
        )
        lines = refactored.split("\n")
        insert_at = _import_block_end(lines)
        block = definitions.split("\n")
        if insert_at > 0:
            block.insert(0, "")
        return "\n".join(lines[:insert_at] + block + lines[insert_at:])

    def _extract_common_methods(
        self,
        content: str,
        context: RefactorContext,
        changes: list[RefactoringChange],
    ) -> None:
        """Suggest a helper for every repeated window of code lines."""
        code = [
            (line_no, line.strip())
            for line_no, line in enumerate(content.split("\n"), start=1)
            if line.strip() and not is_comment_line(line.strip())
        ]
        windows: dict[str, list[int]] = {}
        for start in range(len(code) - METHOD_WINDOW + 1):
            window = code[start:start + METHOD_WINDOW]
            # Windows must not span block openings and must be brace-balanced
            if any(CASE_PATTERN.search(text) or SUITE_PATTERN.search(text) for _, text in window):
                continue
            snippet = "\n".join(text for _, text in window)
            if snippet.count("{") != snippet.count("}"):
                continue
            windows.setdefault(snippet, []).append(window[0][0])

        taken = context.taken_names()
        for snippet, line_numbers in windows.items():
            if len(line_numbers) < 2:
                continue
            name = context.extracted_methods.get(snippet)
            if name is None:
                base = next(
                    (hint_name for hint, hint_name in METHOD_NAME_HINTS if hint in snippet.lower()),
                    f"extractedMethod{len(context.extracted_methods) + 1}",
                )
                name = _unique_name(base, taken)
                taken.add(name)
                context.extracted_methods[snippet] = name
            changes.append(RefactoringChange(
                type=ChangeType.EXTRACT_METHOD,
                line=line_numbers[0],
                description=f"Extract repeated steps into {name} ({len(line_numbers)} occurrences)",
                before=snippet,
                after=f"await {name}(page);",
            ))

    def _improve_selectors(self, content: str, changes: list[RefactoringChange]) -> None:
        for pattern, description in SELECTOR_PATTERNS:
            for match in pattern.finditer(content):
                changes.append(RefactoringChange(
                    type=ChangeType.SIMPLIFY_SELECTOR,
                    line=content.count("\n", 0, match.start()) + 1,
                    description=description,
                    before=match.group(0),
                    after=f"page.getByTestId('{suggest_test_id(match.group(1))}')",
                ))

    def _add_missing_comments(self, content: str, changes: list[RefactoringChange]) -> str:
        lines = content.split("\n")
        output: list[str] = []
        for index, line in enumerate(lines):
            stripped = line.strip()
            comment = None
            if not has_nearby_comment(lines, index):
                comment = generate_comment(stripped)
            if comment is not None:
                indentation = line[: len(line) - len(line.lstrip())]
                output.append(f"{indentation}// {comment}")
                changes.append(RefactoringChange(
                    type=ChangeType.ADD_COMMENT,
                    line=len(output),
                    description="Add explanatory comment",
                    before=stripped,
                    after=f"// {comment}\n{stripped}",
                ))
            output.append(line)
        return "\n".join(output)

    def _improve_naming(self, content: str, changes: list[RefactoringChange]) -> None:
        for match in NAMING_PATTERN.finditer(content):
            name = match.group(1)
            changes.append(RefactoringChange(
                type=ChangeType.IMPROVE_NAMING,
                line=content.count("\n", 0, match.start()) + 1,
                description=f"Rename {name!r} to {NAMING_FIXES[name]!r}",
                before=name,
                after=NAMING_FIXES[name],
            ))

    def _lock_for(self, file_path: str) -> threading.Lock:
        key = str(Path(file_path).resolve())
        with self._locks_guard:
            return self._path_locks.setdefault(key, threading.Lock())

    def apply(self, result: RefactoringResult) -> ApplyOutcome:
        """Write ``result.refactored_content`` over the original file.

        The file is only rewritten when the improvement score exceeds the
        apply threshold and there are changes. A byte-identical backup is
        written first and left in place if the rewrite fails. Failures are
        logged and returned, never raised.
        """
        file_path = result.file_path
        if not result.changes or result.refactored_content == result.original_content:
            return ApplyOutcome(file_path=file_path, applied=False, reason="no changes")
        if result.improvement_score <= self.thresholds.apply_min_improvement:
            return ApplyOutcome(
                file_path=file_path,
                applied=False,
                reason=(
                    f"improvement score {result.improvement_score} is not above "
                    f"{self.thresholds.apply_min_improvement}"
                ),
            )
        if introduces_syntax_errors(result.original_content, result.refactored_content, file_path):
            logger.warning("Not rewriting %s: refactored content does not parse", file_path)
            return ApplyOutcome(
                file_path=file_path, applied=False, reason="refactored content does not parse",
            )

        backup_path = file_path + BACKUP_SUFFIX
        backup_written = False
        with self._lock_for(file_path):
            try:
                newline = read_test_file(file_path).newline
                shutil.copyfile(file_path, backup_path)
                backup_written = True
                if not filecmp.cmp(file_path, backup_path, shallow=False):
                    raise ApplyError(f"backup {backup_path} does not match {file_path}")
                with open(file_path, "w", encoding="utf-8", newline=newline) as handle:
                    handle.write(result.refactored_content)
            except (OSError, SourceFileError, ApplyError) as exc:
                logger.error("Failed to rewrite %s: %s", file_path, exc)
                return ApplyOutcome(
                    file_path=file_path,
                    applied=False,
                    backup_path=backup_path if backup_written else None,
                    reason=str(exc),
                )

        logger.info("Rewrote %s (backup: %s)", file_path, backup_path)
        return ApplyOutcome(file_path=file_path, applied=True, backup_path=backup_path)

    def summarize(
        self,
        results: list[RefactoringResult],
        failures: list[FileFailure] | None = None,
    ) -> RefactoringSuiteReport:
        """Aggregate per-file results and merge their contexts in file order."""
        changed = [result for result in results if result.changes]
        merged = RefactorContext()
        for result in results:
            merged = merged.merge(result.context)

        average = (
            round(sum(r.improvement_score for r in results) / len(results), 2) if results else 0.0
        )
        return RefactoringSuiteReport(
            summary=RefactoringSummary(
                total_files=len(results),
                successful_refactorings=len(changed),
                total_changes=sum(len(result.changes) for result in changed),
                average_improvement_score=average,
            ),
            results=results,
            constants=merged,
            failures=list(failures or []),
        )


def applicable_results(
    results: Iterable[RefactoringResult],
    thresholds: AnalysisThresholds | None = None,
) -> list[RefactoringResult]:
    """Results that apply mode would rewrite."""
    thresholds = thresholds or AnalysisThresholds()
    return [
        result for result in results
        if result.changes and result.improvement_score > thresholds.apply_min_improvement
    ]
