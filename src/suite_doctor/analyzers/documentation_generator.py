"""Documentation generator: turns extracted test features into a doc tree.

The generator reuses the block extractor for suite and case boundaries and the
per-block extractors for steps, assertions, tags and complexity. Rendering to
Markdown is a separate pure function that only serializes the tree.
"""

import logging
import os
import re
from collections import Counter
from datetime import datetime, timezone

from suite_doctor.analyzers.suite_indexer import read_test_file
from suite_doctor.extractors.assertions import extract_assertions
from suite_doctor.extractors.blocks import extract_cases, extract_hooks, extract_suites
from suite_doctor.extractors.complexity import score_complexity
from suite_doctor.extractors.steps import extract_steps
from suite_doctor.extractors.tags import infer_features, infer_tags
from suite_doctor.models.block_models import TestBlock
from suite_doctor.models.doc_models import (
    Coverage,
    DocumentationSuiteReport,
    DocumentationSummary,
    TestCase,
    TestDocumentation,
    TestSuiteDoc,
)
from suite_doctor.models.feature_models import ComplexityLevel, StepAction
from suite_doctor.models.report_models import FileFailure

logger = logging.getLogger(__name__)

# Only a doc-comment that opens the file counts as its header.
HEADER_TITLE_PATTERN = re.compile(r"\A\s*/\*\*\s*\n\s*\*\s*([^\n]+)")
HEADER_BODY_PATTERN = re.compile(
    r"\A\s*/\*\*\s*\n\s*\*\s*[^\n]+\s*\n\s*\*\s*([^*]+?)\s*\*/", re.DOTALL
)
FIRST_SUITE_PATTERN = re.compile(r"""\bdescribe(?:\.\w+)*\(\s*(['"`])(.*?)\1""")
TEST_FILE_SUFFIX_PATTERN = re.compile(r"\.(?:spec|test)(?:\.[A-Za-z]+)?$|\.[A-Za-z]+$")

USER_STORY_PATTERN = re.compile(r"(?:用户故事[：:]\s*|\bAs an? )([^\n*]+)")
REQUIREMENT_PATTERN = re.compile(r"(?:_需求|Requirements?)[：:]\s*([^_\n]+)")
DEPENDENCY_PATTERN = re.compile(
    r"""import\s*\{([^}]*)\}\s*from\s*['"`]([^'"`]*)['"`]"""
)
DEPENDENCY_SOURCES = ("page-objects", "utils", "fixtures")

ROOT_SUITE_NAME = "Root test suite"
DEFAULT_SUITE_DESCRIPTION = "Test suite"
GENERIC_DESCRIPTION = "End-to-end test suite"

# Seconds added per occurrence; base time is added once per case.
BASE_SECONDS = 2.0
ACTION_SECONDS = {
    StepAction.NAVIGATE: 2.0,
    StepAction.CLICK: 0.5,
    StepAction.FILL: 0.5,
    StepAction.UPLOAD: 3.0,
    StepAction.WAIT_FOR_SELECTOR: 1.0,
    StepAction.WAIT_FOR_TIMEOUT: 1.0,
}
ASSERTION_SECONDS = 0.2


def title_from_filename(file_path: str) -> str:
    """``user-login.spec.ts`` -> ``User Login``."""
    stem = TEST_FILE_SUFFIX_PATTERN.sub("", os.path.basename(file_path))
    words = re.split(r"[-_\s]+", stem)
    return " ".join(word[:1].upper() + word[1:] for word in words if word)


def extract_title(content: str, file_path: str) -> str:
    header = HEADER_TITLE_PATTERN.search(content)
    if header:
        return header.group(1).strip()
    suite = FIRST_SUITE_PATTERN.search(content)
    if suite:
        return suite.group(2)
    return title_from_filename(file_path)


def extract_description(content: str) -> str:
    """Header comment body, else a feature summary, else a generic line."""
    body = HEADER_BODY_PATTERN.search(content)
    if body:
        lines = [line.strip().lstrip("*").strip() for line in body.group(1).split("\n")]
        text = " ".join(line for line in lines if line)
        if text:
            return text

    features = infer_features(content)
    if features:
        return f"{GENERIC_DESCRIPTION} covering {', '.join(features)}"
    return GENERIC_DESCRIPTION


def comment_above(lines: list[str], line_number: int) -> str | None:
    """Return the comment text directly above 1-based ``line_number``.

    Consecutive ``//`` lines are joined. A block comment ending right above
    the line contributes its inner lines.
    """
    index = line_number - 2
    collected: list[str] = []

    while index >= 0 and lines[index].strip().startswith("//"):
        collected.insert(0, lines[index].strip()[2:].strip())
        index -= 1
    if collected:
        return " ".join(text for text in collected if text) or None

    if index >= 0 and lines[index].strip().endswith("*/"):
        while index >= 0:
            stripped = lines[index].strip()
            text = stripped.removeprefix("/**").removeprefix("/*").removesuffix("*/")
            text = text.strip().lstrip("*").strip()
            if text:
                collected.insert(0, text)
            if stripped.startswith("/*"):
                break
            index -= 1
        return " ".join(collected) or None

    return None


def case_description(name: str, lines: list[str], start_line: int) -> str:
    comment = comment_above(lines, start_line)
    if comment:
        return comment
    if "should" in name.lower():
        return name
    return f"Verifies that {name} works as expected"


def estimate_seconds(block: TestBlock) -> float:
    steps = extract_steps(block.content)
    assertions = extract_assertions(block.content)
    seconds = BASE_SECONDS
    seconds += sum(ACTION_SECONDS[step.action] for step in steps)
    seconds += len(assertions) * ASSERTION_SECONDS
    return round(seconds, 2)


def duration_bucket(seconds: float) -> str:
    """Bucket an estimate into ``<5s``, ``5-15s``, ``15-30s`` or ``>30s``."""
    if seconds <= 5:
        return "<5s"
    if seconds <= 15:
        return "5-15s"
    if seconds <= 30:
        return "15-30s"
    return ">30s"


def hook_lines(content: str, hook: str) -> list[str] | None:
    """Trimmed non-empty body lines of the first ``hook`` block, if any."""
    blocks = extract_hooks(content, hook)
    if not blocks:
        return None
    lines = [line.strip() for line in blocks[0].body_lines if line.strip()]
    return lines or None


def extract_coverage(content: str) -> Coverage:
    user_stories = [match.group(1).strip() for match in USER_STORY_PATTERN.finditer(content)]
    requirements = [match.group(1).strip() for match in REQUIREMENT_PATTERN.finditer(content)]
    return Coverage(
        features=infer_features(content),
        user_stories=list(dict.fromkeys(user_stories)),
        requirements=list(dict.fromkeys(requirements)),
    )


def extract_dependencies(content: str) -> list[str]:
    """Names imported from page-object, util or fixture modules, in order."""
    names: list[str] = []
    for match in DEPENDENCY_PATTERN.finditer(content):
        if not any(source in match.group(2) for source in DEPENDENCY_SOURCES):
            continue
        for name in match.group(1).split(","):
            name = name.strip()
            if name:
                names.append(name)
    return list(dict.fromkeys(names))


class DocumentationGenerator:
    """Builds :class:`TestDocumentation` trees and renders them to Markdown."""

    def document_file(self, file_path: str, now: datetime | None = None) -> TestDocumentation:
        """Read and document one file.

        Raises:
            SourceFileError: If the file cannot be read.
        """
        test_file = read_test_file(file_path)
        return self.document_content(test_file.content, file_path, now=now)

    def document_content(
        self,
        content: str,
        file_path: str,
        now: datetime | None = None,
    ) -> TestDocumentation:
        lines = content.split("\n")
        setup = hook_lines(content, "beforeEach")
        teardown = hook_lines(content, "afterEach")

        suites = extract_suites(content)
        if suites:
            test_suites = [
                TestSuiteDoc(
                    name=suite.name,
                    description=comment_above(lines, suite.start_line) or DEFAULT_SUITE_DESCRIPTION,
                    tests=[self._document_case(case, lines) for case in suite.children],
                    setup=setup,
                    teardown=teardown,
                )
                for suite in suites
            ]
        else:
            cases = extract_cases(content)
            test_suites = [
                TestSuiteDoc(
                    name=ROOT_SUITE_NAME,
                    description=DEFAULT_SUITE_DESCRIPTION,
                    tests=[self._document_case(case, lines) for case in cases],
                    setup=setup,
                    teardown=teardown,
                )
            ]

        doc = TestDocumentation(
            file_path=file_path,
            title=extract_title(content, file_path),
            description=extract_description(content),
            test_suites=test_suites,
            coverage=extract_coverage(content),
            dependencies=extract_dependencies(content),
            last_updated=now or datetime.now(timezone.utc),
        )
        logger.debug(
            "Documented %s: %d suites, %d cases", file_path, len(test_suites), doc.test_count
        )
        return doc

    def _document_case(self, case: TestBlock, lines: list[str]) -> TestCase:
        complexity = score_complexity(case.content)
        seconds = estimate_seconds(case)
        return TestCase(
            name=case.name,
            description=case_description(case.name, lines, case.start_line),
            start_line=case.start_line,
            steps=extract_steps(case.content),
            assertions=extract_assertions(case.content),
            tags=infer_tags(case.name, case.content, complexity),
            complexity=complexity.level,
            estimated_seconds=seconds,
            estimated_duration=duration_bucket(seconds),
        )

    def summarize(
        self,
        documents: list[TestDocumentation],
        failures: list[FileFailure] | None = None,
    ) -> DocumentationSuiteReport:
        """Aggregate per-file documentation once every file has been processed."""
        features: Counter[str] = Counter()
        complexity = {level.value: 0 for level in ComplexityLevel}
        for doc in documents:
            features.update(doc.coverage.features)
            for suite in doc.test_suites:
                for test in suite.tests:
                    complexity[test.complexity.value] += 1

        return DocumentationSuiteReport(
            summary=DocumentationSummary(
                total_files=len(documents),
                total_test_suites=sum(len(doc.test_suites) for doc in documents),
                total_test_cases=sum(doc.test_count for doc in documents),
                feature_coverage=dict(features),
                complexity_distribution=complexity,
            ),
            documents=documents,
            failures=list(failures or []),
        )


def doc_file_name(file_path: str) -> str:
    """Markdown file name for a test file: ``login.spec.ts`` -> ``login.md``."""
    stem = TEST_FILE_SUFFIX_PATTERN.sub("", os.path.basename(file_path))
    return f"{stem}.md"


def assign_doc_file_names(documents: list[TestDocumentation]) -> dict[str, str]:
    """Map each document's file path to a unique Markdown file name.

    Files sharing a stem in different directories get ``-2``, ``-3`` ...
    suffixes in document order.
    """
    names: dict[str, str] = {}
    taken: set[str] = set()
    for doc in documents:
        name = doc_file_name(doc.file_path)
        stem = name.removesuffix(".md")
        counter = 2
        while name in taken:
            name = f"{stem}-{counter}.md"
            counter += 1
        taken.add(name)
        names[doc.file_path] = name
    return names


def render_markdown(doc: TestDocumentation) -> str:
    """Serialize a documentation tree to Markdown, preserving its order."""
    out: list[str] = [f"# {doc.title}", "", doc.description, ""]

    out += [
        "## Overview",
        "",
        f"- **File**: `{doc.file_path}`",
        f"- **Last updated**: {doc.last_updated.isoformat()}",
        f"- **Test suites**: {len(doc.test_suites)}",
        f"- **Test cases**: {doc.test_count}",
        "",
    ]

    sections = (
        ("Feature coverage", doc.coverage.features, "- {}"),
        ("User stories", doc.coverage.user_stories, "- {}"),
        ("Requirements", doc.coverage.requirements, "- {}"),
        ("Dependencies", doc.dependencies, "- `{}`"),
    )
    for heading, items, template in sections:
        if items:
            out += [f"## {heading}", ""]
            out += [template.format(item) for item in items]
            out.append("")

    out += ["## Test suites", ""]
    for suite_index, suite in enumerate(doc.test_suites, start=1):
        out += [f"### {suite_index}. {suite.name}", "", suite.description, ""]
        for label, code in (("Setup", suite.setup), ("Teardown", suite.teardown)):
            if code:
                out += [f"**{label}:**", "```typescript", *code, "```", ""]

        out += ["#### Test cases", ""]
        for test_index, test in enumerate(suite.tests, start=1):
            out += [
                f"##### {suite_index}.{test_index} {test.name}",
                "",
                f"**Description**: {test.description}",
                f"**Complexity**: {test.complexity.value}",
                f"**Estimated duration**: {test.estimated_duration}",
            ]
            if test.tags:
                out.append("**Tags**: " + ", ".join(f"`{tag}`" for tag in test.tags))
            out.append("")

            if test.steps:
                out.append("**Steps**:")
                out += [
                    f"{number}. {step.description}"
                    + (f" -> {step.expected}" if step.expected else "")
                    for number, step in enumerate(test.steps, start=1)
                ]
                out.append("")

            if test.assertions:
                out.append("**Checks**:")
                out += [f"- {assertion.text}" for assertion in test.assertions]
                out.append("")

            out += ["---", ""]

    return "\n".join(out)


def render_index(report: DocumentationSuiteReport) -> str:
    """Render ``test-suite-index.md`` for a documentation run."""
    summary = report.summary
    out = [
        "# Test Suite Index",
        "",
        "## Summary",
        "",
        f"- **Files**: {summary.total_files}",
        f"- **Test suites**: {summary.total_test_suites}",
        f"- **Test cases**: {summary.total_test_cases}",
        "",
    ]

    if summary.feature_coverage:
        out += ["## Feature coverage", ""]
        out += [
            f"- {feature}: {count} file(s)"
            for feature, count in sorted(summary.feature_coverage.items())
        ]
        out.append("")

    out += ["## Complexity distribution", ""]
    out += [f"- {level}: {count}" for level, count in summary.complexity_distribution.items()]
    out.append("")

    out += ["## Files", ""]
    file_names = assign_doc_file_names(report.documents)
    for doc in report.documents:
        out.append(
            f"- [{doc.title}](test-docs/{file_names[doc.file_path]}) "
            f"({doc.test_count} tests) `{doc.file_path}`"
        )
    out.append("")

    if report.failures:
        out += ["## Failures", ""]
        out += [f"- `{failure.file_path}`: {failure.error}" for failure in report.failures]
        out.append("")

    return "\n".join(out)
