"""Default quality standards for Playwright-style e2e test files.

Every checker is a pure function ``(content, file_path) -> violations``.
Line numbers are derived from the offset of each match.
"""

import re

from suite_doctor.extractors.blocks import (
    count_case_calls,
    count_suite_calls,
    extract_cases,
    extract_suites,
    line_number_at,
)
from suite_doctor.extractors.comments import find_uncommented_lines, has_nearby_comment
from suite_doctor.extractors.duplicates import find_duplicate_lines
from suite_doctor.extractors.literals import (
    STRING_LITERAL_PATTERN,
    TIMEOUT_CALL_PATTERN,
    looks_like_test_data,
)
from suite_doctor.models.quality_models import (
    CodeExample,
    QualityViolation,
    Severity,
    Standard,
    StandardCategory,
)

MAX_TEST_LENGTH = 50
MIN_DESCRIPTION_LENGTH = 10
MAX_SIBLINGS_WITHOUT_SUITE = 3
MAX_FIXED_WAIT_MS = 1000
VAGUE_WORDS = ("test", "check", "verify", "should work")

IMPORT_PATTERN = re.compile(r"^\s*import\s", re.MULTILINE)
TOP_LEVEL_LET_PATTERN = re.compile(r"\blet\s+\w+(?:\s*:\s*\w+)?\s*;")
CASE_NAME_PATTERN = re.compile(r"""\b(?:test|it)(?:\.(?:only|skip|fixme|slow))?\(\s*['"`]([^'"`]+)['"`]""")
SINGLE_LETTER_PATTERN = re.compile(r"\b(?:const|let|var)\s+([a-zA-Z])\b(?=\s*[=:;])")
POOR_NAME_PATTERN = re.compile(r"\b(?:const|let|var)\s+(data|temp|res)\b")
PAGE_OBJECT_PATTERN = re.compile(r"(\w+)\s*=\s*new\s+(\w+Page)\b")
TEST_DATA_OBJECT_PATTERN = re.compile(r"const\s+\w*[Dd]ata\w*\s*=\s*\{")
COMPLEX_LOCATOR_PATTERN = re.compile(r"""page\.locator\(\s*['"`]([^'"`]*\s+[^'"`]*\s+[^'"`]*)['"`]\s*\)""")
_POOR_NAME_ALTERNATIVES = {
    "data": "testData, userData, petData",
    "temp": "temporary, tempResult",
    "res": "result, response",
}


def _suite_ranges(content: str) -> list[tuple[int, int]]:
    return [(suite.start_line, suite.end_line) for suite in extract_suites(content)]


def _inside(line: int, ranges: list[tuple[int, int]]) -> bool:
    return any(start <= line <= end for start, end in ranges)


# Structure

def check_file_structure(content: str, file_path: str) -> list[QualityViolation]:
    violations = []
    if not IMPORT_PATTERN.search(content):
        violations.append(QualityViolation(
            standard_id="test-structure-001",
            line=1,
            message="Test file should import its test runner",
            severity=Severity.ERROR,
            suggestion="Add import { test, expect } from '@playwright/test';",
        ))

    if count_case_calls(content) == 0:
        violations.append(QualityViolation(
            standard_id="test-structure-001",
            line=1,
            message="Test file should contain at least one test case",
            severity=Severity.ERROR,
            suggestion="Add a test(...) block or remove the file",
        ))

    manager = content.find("TestDataManager")
    if manager >= 0 and "afterEach" not in content:
        violations.append(QualityViolation(
            standard_id="test-structure-001",
            line=line_number_at(content, manager),
            message="TestDataManager data should be cleaned up in afterEach",
            severity=Severity.WARNING,
            suggestion="Add an afterEach hook that cleans up test data",
        ))
    return violations


def check_suite_grouping(content: str, file_path: str) -> list[QualityViolation]:
    case_count = count_case_calls(content)
    if case_count <= MAX_SIBLINGS_WITHOUT_SUITE or count_suite_calls(content) > 0:
        return []
    return [QualityViolation(
        standard_id="test-structure-002",
        line=1,
        message=f"{case_count} test cases are not grouped by any describe block",
        severity=Severity.WARNING,
        suggestion="Group related tests with describe",
        code_example=CodeExample(
            bad="test('test 1', () => {});\ntest('test 2', () => {});",
            good=(
                "describe('feature', () => {\n"
                "  test('test 1', () => {});\n"
                "  test('test 2', () => {});\n"
                "});"
            ),
        ),
    )]


def check_test_independence(content: str, file_path: str) -> list[QualityViolation]:
    ranges = _suite_ranges(content)
    violations = []
    for match in TOP_LEVEL_LET_PATTERN.finditer(content):
        line = line_number_at(content, match.start())
        if _inside(line, ranges):
            continue
        violations.append(QualityViolation(
            standard_id="test-structure-003",
            line=line,
            message="Module-level variable shares state between tests",
            severity=Severity.WARNING,
            suggestion="Move the variable into a describe block or initialise it in beforeEach",
        ))
    return violations


# Naming

def check_test_descriptions(content: str, file_path: str) -> list[QualityViolation]:
    violations = []
    for match in CASE_NAME_PATTERN.finditer(content):
        description = match.group(1)
        line = line_number_at(content, match.start())
        if len(description) < MIN_DESCRIPTION_LENGTH:
            violations.append(QualityViolation(
                standard_id="test-naming-001",
                line=line,
                message="Test description is too short to state its purpose",
                severity=Severity.WARNING,
                suggestion="Describe the expected behaviour in full",
            ))
        if any(word in description.lower() for word in VAGUE_WORDS):
            violations.append(QualityViolation(
                standard_id="test-naming-001",
                line=line,
                message="Test description uses vague wording",
                severity=Severity.INFO,
                suggestion="State the concrete behaviour, e.g. 'redirects to home after login'",
            ))
    return violations


def check_variable_naming(content: str, file_path: str) -> list[QualityViolation]:
    violations = []
    for match in SINGLE_LETTER_PATTERN.finditer(content):
        violations.append(QualityViolation(
            standard_id="test-naming-002",
            line=line_number_at(content, match.start()),
            message=f"Single-letter variable name {match.group(1)!r}",
            severity=Severity.WARNING,
            suggestion="Use a meaningful variable name",
        ))
    for match in POOR_NAME_PATTERN.finditer(content):
        name = match.group(1)
        violations.append(QualityViolation(
            standard_id="test-naming-002",
            line=line_number_at(content, match.start()),
            message=f"Variable name {name!r} is not specific",
            severity=Severity.INFO,
            suggestion=f"Consider a more specific name: {_POOR_NAME_ALTERNATIVES[name]}",
        ))
    return violations


def check_page_object_naming(content: str, file_path: str) -> list[QualityViolation]:
    violations = []
    for match in PAGE_OBJECT_PATTERN.finditer(content):
        variable, class_name = match.group(1), match.group(2)
        expected = class_name[0].lower() + class_name[1:]
        if variable == expected:
            continue
        violations.append(QualityViolation(
            standard_id="test-naming-003",
            line=line_number_at(content, match.start()),
            message="Page object variable should match its class name",
            severity=Severity.INFO,
            suggestion=f"Rename {variable!r} to {expected!r}",
        ))
    return violations


# Documentation

def check_file_header(content: str, file_path: str) -> list[QualityViolation]:
    lines = content.split("\n")
    has_doc_block = any("/**" in line for line in lines[:10])
    has_line_comment = any(line.strip().startswith("//") for line in lines[:5])
    if has_doc_block or has_line_comment:
        return []
    return [QualityViolation(
        standard_id="test-docs-001",
        line=1,
        message="Test file has no header comment describing its purpose",
        severity=Severity.WARNING,
        suggestion="Add a header comment describing the suite's purpose and scope",
        code_example=CodeExample(
            bad="import { test, expect } from '@playwright/test';",
            good=(
                "/**\n"
                " * User authentication e2e tests\n"
                " *\n"
                " * Covers login, registration and logout.\n"
                " */\n"
                "import { test, expect } from '@playwright/test';"
            ),
        ),
    )]


def check_complex_logic_comments(content: str, file_path: str) -> list[QualityViolation]:
    return [
        QualityViolation(
            standard_id="test-docs-002",
            line=finding.line,
            message=f"{finding.description} should have an explanatory comment",
            severity=Severity.INFO,
            suggestion="Add a comment explaining the purpose and expected result",
        )
        for finding in find_uncommented_lines(content)
    ]


def check_test_data_documentation(content: str, file_path: str) -> list[QualityViolation]:
    lines = content.split("\n")
    violations = []
    for match in TEST_DATA_OBJECT_PATTERN.finditer(content):
        line = line_number_at(content, match.start())
        if has_nearby_comment(lines, line - 1):
            continue
        violations.append(QualityViolation(
            standard_id="test-docs-003",
            line=line,
            message="Test data object has no explanatory comment",
            severity=Severity.INFO,
            suggestion="Describe what the test data is used for",
        ))
    return violations


# Maintainability

def check_test_length(content: str, file_path: str) -> list[QualityViolation]:
    return [
        QualityViolation(
            standard_id="test-maintain-001",
            line=block.start_line,
            message=f"Test is too long ({block.line_count} lines)",
            severity=Severity.WARNING,
            suggestion="Split the test into smaller independent cases",
        )
        for block in extract_cases(content)
        if block.line_count > MAX_TEST_LENGTH
    ]


def check_duplicate_code(content: str, file_path: str) -> list[QualityViolation]:
    return [
        QualityViolation(
            standard_id="test-maintain-002",
            line=duplicate.line_numbers[0],
            message=f"Duplicated line ({duplicate.occurrences} occurrences)",
            severity=Severity.WARNING,
            suggestion="Extract a shared helper or constant",
        )
        for duplicate in find_duplicate_lines(content, min_occurrences=3)
    ]


def check_hard_coded_values(content: str, file_path: str) -> list[QualityViolation]:
    violations = []
    for match in TIMEOUT_CALL_PATTERN.finditer(content):
        timeout = int(match.group(1))
        if timeout <= MAX_FIXED_WAIT_MS:
            continue
        violations.append(QualityViolation(
            standard_id="test-maintain-003",
            line=line_number_at(content, match.start()),
            message=f"Hard-coded timeout {timeout}ms",
            severity=Severity.INFO,
            suggestion="Use a named constant",
            code_example=CodeExample(
                bad=f"waitForTimeout({timeout})",
                good="const ANALYSIS_TIMEOUT = 5000;\nwaitForTimeout(ANALYSIS_TIMEOUT)",
            ),
        ))
    for match in STRING_LITERAL_PATTERN.finditer(content):
        if not looks_like_test_data(match.group(2)):
            continue
        violations.append(QualityViolation(
            standard_id="test-maintain-003",
            line=line_number_at(content, match.start()),
            message="Hard-coded test data",
            severity=Severity.INFO,
            suggestion="Move test data into constants or a fixture file",
        ))
    return violations


def check_selector_quality(content: str, file_path: str) -> list[QualityViolation]:
    violations = []
    for match in COMPLEX_LOCATOR_PATTERN.finditer(content):
        violations.append(QualityViolation(
            standard_id="test-maintain-004",
            line=line_number_at(content, match.start()),
            message="Complex CSS selector is likely to be brittle",
            severity=Severity.WARNING,
            suggestion="Prefer data-testid or a simpler selector",
            code_example=CodeExample(
                bad="page.locator('div.container > ul.list > li:nth-child(2)')",
                good="page.getByTestId('second-list-item')",
            ),
        ))

    locator_count = content.count("page.locator(")
    test_id_count = content.count("getByTestId(")
    if locator_count > test_id_count * 2:
        violations.append(QualityViolation(
            standard_id="test-maintain-004",
            line=1,
            message="Prefer data-testid selectors over raw locators",
            severity=Severity.INFO,
            suggestion="Add data-testid attributes to key elements",
        ))
    return violations


# Performance

def check_wait_strategies(content: str, file_path: str) -> list[QualityViolation]:
    violations = []
    for match in TIMEOUT_CALL_PATTERN.finditer(content):
        if int(match.group(1)) <= MAX_FIXED_WAIT_MS:
            continue
        violations.append(QualityViolation(
            standard_id="test-perf-001",
            line=line_number_at(content, match.start()),
            message="Avoid long fixed delays",
            severity=Severity.WARNING,
            suggestion="Use waitForSelector or another condition-based wait",
            code_example=CodeExample(
                bad="waitForTimeout(5000)",
                good="waitForSelector('[data-testid=\"analysis-result\"]', { timeout: 5000 })",
            ),
        ))
    return violations


def check_resource_cleanup(content: str, file_path: str) -> list[QualityViolation]:
    manager = content.find("TestDataManager")
    if manager < 0 or ("afterEach" in content and "cleanup" in content):
        return []
    return [QualityViolation(
        standard_id="test-perf-002",
        line=line_number_at(content, manager),
        message="TestDataManager resources must be cleaned up in afterEach",
        severity=Severity.ERROR,
        suggestion="Add an afterEach hook that calls cleanup()",
    )]


DEFAULT_STANDARDS: list[Standard] = [
    Standard(
        standard_id="test-structure-001",
        name="Test file structure",
        description="Test files import their runner and contain test cases",
        category=StandardCategory.STRUCTURE,
        severity=Severity.ERROR,
        checker=check_file_structure,
    ),
    Standard(
        standard_id="test-structure-002",
        name="Suite grouping",
        description="Related tests are grouped with describe",
        category=StandardCategory.STRUCTURE,
        severity=Severity.WARNING,
        checker=check_suite_grouping,
    ),
    Standard(
        standard_id="test-structure-003",
        name="Test independence",
        description="Tests do not share module-level mutable state",
        category=StandardCategory.STRUCTURE,
        severity=Severity.ERROR,
        checker=check_test_independence,
    ),
    Standard(
        standard_id="test-naming-001",
        name="Descriptive test names",
        description="Test descriptions state the purpose and expected result",
        category=StandardCategory.NAMING,
        severity=Severity.WARNING,
        checker=check_test_descriptions,
    ),
    Standard(
        standard_id="test-naming-002",
        name="Variable naming",
        description="Variable names are meaningful",
        category=StandardCategory.NAMING,
        severity=Severity.WARNING,
        checker=check_variable_naming,
    ),
    Standard(
        standard_id="test-naming-003",
        name="Page object naming",
        description="Page object variables follow their class name",
        category=StandardCategory.NAMING,
        severity=Severity.INFO,
        checker=check_page_object_naming,
    ),
    Standard(
        standard_id="test-docs-001",
        name="File header comment",
        description="Test files start with a comment describing their purpose",
        category=StandardCategory.DOCUMENTATION,
        severity=Severity.WARNING,
        checker=check_file_header,
    ),
    Standard(
        standard_id="test-docs-002",
        name="Complex logic comments",
        description="Complex test logic carries an explanatory comment",
        category=StandardCategory.DOCUMENTATION,
        severity=Severity.INFO,
        checker=check_complex_logic_comments,
    ),
    Standard(
        standard_id="test-docs-003",
        name="Test data documentation",
        description="Test data objects are explained",
        category=StandardCategory.DOCUMENTATION,
        severity=Severity.INFO,
        checker=check_test_data_documentation,
    ),
    Standard(
        standard_id="test-maintain-001",
        name="Test length",
        description=f"A single test stays under {MAX_TEST_LENGTH} lines",
        category=StandardCategory.MAINTAINABILITY,
        severity=Severity.WARNING,
        checker=check_test_length,
    ),
    Standard(
        standard_id="test-maintain-002",
        name="Duplicate code",
        description="Repeated code is extracted into shared helpers",
        category=StandardCategory.MAINTAINABILITY,
        severity=Severity.WARNING,
        checker=check_duplicate_code,
    ),
    Standard(
        standard_id="test-maintain-003",
        name="Hard-coded values",
        description="Timeouts and test data live in constants or configuration",
        category=StandardCategory.MAINTAINABILITY,
        severity=Severity.INFO,
        checker=check_hard_coded_values,
    ),
    Standard(
        standard_id="test-maintain-004",
        name="Selector quality",
        description="Selectors are stable, preferring data-testid",
        category=StandardCategory.MAINTAINABILITY,
        severity=Severity.WARNING,
        checker=check_selector_quality,
    ),
    Standard(
        standard_id="test-perf-001",
        name="Wait strategy",
        description="Tests wait on conditions instead of fixed delays",
        category=StandardCategory.PERFORMANCE,
        severity=Severity.WARNING,
        checker=check_wait_strategies,
    ),
    Standard(
        standard_id="test-perf-002",
        name="Resource cleanup",
        description="Tests clean up the resources they create",
        category=StandardCategory.PERFORMANCE,
        severity=Severity.ERROR,
        checker=check_resource_cleanup,
    ),
]
