"""Diff, style and syntax helpers."""

from suite_doctor.utils.diff_generator import (
    detect_code_style,
    generate_unified_diff,
    quote_literal,
)
from suite_doctor.utils.syntax_check import (
    get_language_for_file,
    has_syntax_errors,
    introduces_syntax_errors,
)

__all__ = [
    "detect_code_style",
    "generate_unified_diff",
    "get_language_for_file",
    "has_syntax_errors",
    "introduces_syntax_errors",
    "quote_literal",
]
