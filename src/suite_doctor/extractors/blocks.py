"""Recover describe/test/hook blocks from raw test source.

Block boundaries are found by tracking the running brace depth line by
line. Braces inside string literals or comments are counted like any
other brace; sources that rely on unbalanced braces in literals can
confuse the tracker. That limitation is accepted in exchange for not
needing a full parser for every test dialect.
"""

import logging
import re

from suite_doctor.models.block_models import BlockKind, TestBlock

logger = logging.getLogger(__name__)

_QUOTED_NAME = r"""\(\s*(?P<quote>['"`])(?P<name>.*?)(?P=quote)"""

SUITE_PATTERN = re.compile(r"\bdescribe(?:\.\w+)*" + _QUOTED_NAME)
CASE_PATTERN = re.compile(r"\b(?:test|it)(?:\.(?:only|skip|fixme|slow))?" + _QUOTED_NAME)

HOOK_NAMES = ("beforeEach", "afterEach", "beforeAll", "afterAll")


def net_braces(line: str) -> int:
    """Return opening minus closing braces on a line."""
    return line.count("{") - line.count("}")


def _hook_pattern(hook: str) -> re.Pattern[str]:
    return re.compile(rf"\b{hook}\(")


def extract_blocks(
    content: str,
    pattern: re.Pattern[str],
    kind: BlockKind,
    first_line: int = 1,
) -> list[TestBlock]:
    """Scan content and emit every balanced block opened by ``pattern``.

    A block opens on the first matching line seen while idle and closes on
    the line where the running depth returns to zero. Lines that match while
    a block is already open belong to that block. Blocks still open at end
    of input are dropped.

    Args:
        content: Source text to scan.
        pattern: Regex recognising the opening call. A ``name`` group, when
            present, supplies the block name.
        kind: Kind recorded on emitted blocks.
        first_line: Line number of the first line of ``content``.

    Returns:
        Blocks in source order.
    """
    blocks: list[TestBlock] = []
    lines = content.split("\n")

    current: list[str] = []
    name = ""
    start = 0
    depth = 0
    seen_brace = False

    for index, line in enumerate(lines):
        if not current:
            match = pattern.search(line)
            if match is None:
                continue
            groups = match.groupdict()
            name = groups.get("name") or match.group(0).rstrip("(").strip()
            start = first_line + index
            current = [line]
            depth = net_braces(line)
            seen_brace = "{" in line
        else:
            current.append(line)
            depth += net_braces(line)
            seen_brace = seen_brace or "{" in line

        if depth < 0:
            logger.warning(
                "Dropping %s block %r at line %d: closing brace without opener",
                kind.value, name, start,
            )
            current = []
            depth = 0
            continue

        if seen_brace and depth == 0:
            blocks.append(TestBlock(
                name=name,
                start_line=start,
                content="\n".join(current),
                kind=kind,
            ))
            current = []

    if current:
        logger.warning(
            "Dropping unterminated %s block %r opened at line %d",
            kind.value, name, start,
        )

    return blocks


def extract_cases(content: str, first_line: int = 1) -> list[TestBlock]:
    """Return the test(...)/it(...) blocks of ``content`` in source order."""
    return extract_blocks(content, CASE_PATTERN, BlockKind.CASE, first_line)


def extract_suites(content: str) -> list[TestBlock]:
    """Return top-level describe blocks with their case blocks as children."""
    suites = []
    for suite in extract_blocks(content, SUITE_PATTERN, BlockKind.SUITE):
        inner = suite.content.split("\n", 1)
        children = (
            extract_cases(inner[1], first_line=suite.start_line + 1)
            if len(inner) > 1
            else []
        )
        suites.append(suite.model_copy(update={"children": children}))
    return suites


def extract_hooks(content: str, hook: str) -> list[TestBlock]:
    """Return every ``hook`` block (beforeEach, afterEach, ...) in ``content``."""
    if hook not in HOOK_NAMES:
        raise ValueError(f"Unsupported hook: {hook}")
    return extract_blocks(content, _hook_pattern(hook), BlockKind.HOOK)


def count_case_calls(content: str) -> int:
    return sum(1 for _ in CASE_PATTERN.finditer(content))


def count_suite_calls(content: str) -> int:
    return sum(1 for _ in SUITE_PATTERN.finditer(content))


def line_number_at(content: str, offset: int) -> int:
    """Return the 1-based line number of a character offset."""
    return content.count("\n", 0, offset) + 1
