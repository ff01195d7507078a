"""Block extraction and pure per-block feature extractors."""

from suite_doctor.extractors.assertions import extract_assertions, parse_assertion
from suite_doctor.extractors.blocks import (
    count_case_calls,
    count_suite_calls,
    extract_blocks,
    extract_cases,
    extract_hooks,
    extract_suites,
    line_number_at,
    net_braces,
)
from suite_doctor.extractors.comments import find_uncommented_lines, has_nearby_comment
from suite_doctor.extractors.complexity import score_complexity
from suite_doctor.extractors.duplicates import count_duplicated_lines, find_duplicate_lines
from suite_doctor.extractors.steps import extract_steps
from suite_doctor.extractors.tags import infer_features, infer_tags

__all__ = [
    "count_case_calls",
    "count_duplicated_lines",
    "count_suite_calls",
    "extract_assertions",
    "extract_blocks",
    "extract_cases",
    "extract_hooks",
    "extract_steps",
    "extract_suites",
    "find_duplicate_lines",
    "find_uncommented_lines",
    "has_nearby_comment",
    "infer_features",
    "infer_tags",
    "line_number_at",
    "net_braces",
    "parse_assertion",
    "score_complexity",
]
