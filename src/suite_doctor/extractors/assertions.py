"""Turn expect(...) calls into readable assertion sentences."""

import re

from suite_doctor.models.feature_models import Assertion

# Arguments may hold one level of nested calls, as in expect(page.locator('#x')).
_ARGUMENT = r"(?:[^()]|\([^()]*\))"
EXPECT_PATTERN = re.compile(
    rf"expect\((?P<target>{_ARGUMENT}+)\)\.(?P<matcher>(?:not\.)?\w+)\((?P<expected>{_ARGUMENT}*)\)"
)

_SENTENCES = {
    "toBe": "{target} should equal {expected}",
    "toContain": "{target} should contain {expected}",
    "toBeVisible": "{target} should be visible",
    "toHaveText": "{target} should have text {expected}",
    "toHaveCount": "{target} should have {expected} matching elements",
}

KNOWN_MATCHERS = frozenset(_SENTENCES)


def _fallback_text(line: str) -> str:
    text = line.strip()
    if text.startswith("await "):
        text = text[len("await "):]
    return text


def parse_assertion(line: str) -> Assertion | None:
    """Parse a single line; returns None when it holds no expect(...) call."""
    if "expect(" not in line:
        return None

    match = EXPECT_PATTERN.search(line)
    if match is None:
        return Assertion(text=_fallback_text(line))

    matcher = match.group("matcher")
    if matcher not in KNOWN_MATCHERS:
        return Assertion(text=line.strip())

    target = match.group("target").strip()
    expected = match.group("expected").strip()
    return Assertion(
        text=_SENTENCES[matcher].format(target=target, expected=expected),
        target=target,
        matcher=matcher,
        expected=expected or None,
    )


def extract_assertions(block_content: str) -> list[Assertion]:
    """Return the assertions of a block in source order."""
    assertions = []
    for line in block_content.split("\n"):
        assertion = parse_assertion(line)
        if assertion is not None:
            assertions.append(assertion)
    return assertions
