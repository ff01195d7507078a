"""Find lines that need an explanatory comment but have none nearby."""

import re

from suite_doctor.models.feature_models import CommentFinding

COMMENT_WINDOW = 2

# `//` after code, but not the `://` of a URL
TRAILING_COMMENT = re.compile(r"\S.*?(?<!:)//")

# (kind, description, pattern)
NEEDS_EXPLANATION: list[tuple[str, str, re.Pattern[str]]] = [
    ("long-wait", "Long fixed wait", re.compile(r"waitForTimeout\(\s*\d{4,}\s*\)")),
    ("bulk-count", "Element count assertion", re.compile(r"expect\(.*\)\.toHaveCount\(\s*\d+\s*\)")),
    ("page-evaluate", "Script executed in page context", re.compile(r"page\.evaluate\(")),
    ("concurrent", "Concurrent operations", re.compile(r"Promise\.all\(")),
    ("selector-timeout", "Selector wait with explicit timeout", re.compile(r"waitForSelector\(.*timeout")),
    ("positional-locator", "Positional locator", re.compile(r"locator\(.*\)\.nth\(")),
]


def is_comment_marker(line: str) -> bool:
    stripped = line.strip()
    return stripped.startswith(("//", "/*", "*")) or "*/" in stripped


def has_trailing_comment(line: str) -> bool:
    return TRAILING_COMMENT.search(line) is not None


def has_nearby_comment(lines: list[str], index: int, window: int = COMMENT_WINDOW) -> bool:
    """True when ``lines[index]`` ends in a comment or a comment marker sits
    within ``window`` lines of it."""
    if has_trailing_comment(lines[index]):
        return True
    low = max(0, index - window)
    high = min(len(lines), index + window + 1)
    return any(is_comment_marker(lines[i]) for i in range(low, high) if i != index)


def classify_line(line: str) -> tuple[str, str] | None:
    """Return (kind, description) when ``line`` needs an explanation."""
    for kind, description, pattern in NEEDS_EXPLANATION:
        if pattern.search(line):
            return kind, description
    return None


def find_uncommented_lines(content: str) -> list[CommentFinding]:
    """Return needs-explanation lines with no comment within the window."""
    lines = content.split("\n")
    findings = []
    for index, line in enumerate(lines):
        classified = classify_line(line)
        if classified is None or has_nearby_comment(lines, index):
            continue
        kind, description = classified
        findings.append(CommentFinding(
            line=index + 1,
            kind=kind,
            description=description,
            text=line.strip(),
        ))
    return findings
