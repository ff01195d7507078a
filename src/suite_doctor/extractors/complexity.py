"""Complexity scoring for blocks and whole files."""

import re

from suite_doctor.extractors.blocks import net_braces
from suite_doctor.models.feature_models import ComplexityBreakdown

CONDITIONAL_PATTERN = re.compile(r"\bif\s*\(|\belse\b|\bswitch\b|\bcase\b")
LOOP_PATTERN = re.compile(r"\bfor\s*\(|\bwhile\s*\(|\bforEach\b")
ASYNC_PATTERN = re.compile(r"\bawait\b|\.then\(|\.catch\(")

MAX_SCORE = 10.0


def max_nesting(content: str) -> int:
    """Maximum running brace depth across the lines of ``content``."""
    depth = 0
    deepest = 0
    for line in content.split("\n"):
        depth += net_braces(line)
        deepest = max(deepest, depth)
    return deepest


def score_complexity(content: str) -> ComplexityBreakdown:
    """Score ``content`` on a 0-10 scale.

    score = min(nesting*2, 10) + min(conditionals*0.5, 5)
            + min(loops, 5) + min(async_ops*0.3, 3), clipped to [0, 10].
    """
    nesting = max_nesting(content)
    conditionals = len(CONDITIONAL_PATTERN.findall(content))
    loops = len(LOOP_PATTERN.findall(content))
    async_ops = len(ASYNC_PATTERN.findall(content))

    score = (
        min(nesting * 2, 10)
        + min(conditionals * 0.5, 5)
        + min(loops * 1, 5)
        + min(async_ops * 0.3, 3)
    )
    score = max(0.0, min(float(score), MAX_SCORE))

    return ComplexityBreakdown(
        max_nesting=nesting,
        conditional_count=conditionals,
        loop_count=loops,
        async_op_count=async_ops,
        score=round(score, 2),
    )
