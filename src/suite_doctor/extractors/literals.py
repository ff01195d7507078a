"""Recognise hard-coded timeouts and test-data string literals."""

import re

TIMEOUT_CALL_PATTERN = re.compile(r"waitForTimeout\(\s*(\d+)\s*\)")
STRING_LITERAL_PATTERN = re.compile(r"""(['"])([^'"\n]{15,})\1""")

MIN_TIMEOUT_CONSTANT_MS = 1000

TIMEOUT_CONSTANT_NAMES = {
    1000: "SHORT_TIMEOUT",
    3000: "MEDIUM_TIMEOUT",
    5000: "LONG_TIMEOUT",
    10000: "VERY_LONG_TIMEOUT",
    30000: "ANALYSIS_TIMEOUT",
}

TEST_DATA_HINTS = (
    re.compile(r"@.*\.com$"),
    re.compile(r"^test.*user$", re.IGNORECASE),
    re.compile(r"password", re.IGNORECASE),
    re.compile(r"^pet.*name$", re.IGNORECASE),
    re.compile(r"^test.*data$", re.IGNORECASE),
)

SELECTOR_PREFIXES = ("[", "#", ".", "/", ">")


def looks_like_selector(value: str) -> bool:
    return value.startswith(SELECTOR_PREFIXES) or "data-testid" in value


def looks_like_test_data(value: str) -> bool:
    """True for literals that read like fixture data rather than selectors."""
    if looks_like_selector(value):
        return False
    return any(hint.search(value) for hint in TEST_DATA_HINTS)


def timeout_constant_name(milliseconds: int) -> str:
    return TIMEOUT_CONSTANT_NAMES.get(milliseconds, f"TIMEOUT_{milliseconds}MS")


def test_data_constant_name(value: str) -> str:
    lowered = value.lower()
    if "@" in value:
        return "TEST_EMAIL"
    if "password" in lowered:
        return "TEST_PASSWORD"
    if "user" in lowered:
        return "TEST_USERNAME"
    if "pet" in lowered:
        return "TEST_PET_NAME"
    return "TEST_DATA_CONSTANT"
