"""Verbatim duplicate-line detection within a single file."""

from suite_doctor.models.feature_models import DuplicateLine

MIN_DUPLICATE_LENGTH = 20
COMMENT_PREFIXES = ("//", "/*", "*")


def is_comment_line(stripped: str) -> bool:
    return stripped.startswith(COMMENT_PREFIXES)


def find_duplicate_lines(
    content: str,
    min_occurrences: int = 2,
    min_length: int = MIN_DUPLICATE_LENGTH,
) -> list[DuplicateLine]:
    """Return trimmed lines that recur verbatim within ``content``.

    Lines are bucketed by their trimmed text, which yields the same result
    as comparing every pair of lines. Only lines longer than ``min_length``
    that are not comment-only are considered.

    Args:
        content: File text.
        min_occurrences: Minimum number of occurrences to report a line.
        min_length: Lines must be strictly longer than this.

    Returns:
        Duplicates ordered by first occurrence.
    """
    buckets: dict[str, list[int]] = {}
    for line_no, line in enumerate(content.split("\n"), start=1):
        stripped = line.strip()
        if len(stripped) <= min_length or is_comment_line(stripped):
            continue
        buckets.setdefault(stripped, []).append(line_no)

    return [
        DuplicateLine(text=text, line_numbers=line_numbers)
        for text, line_numbers in buckets.items()
        if len(line_numbers) >= min_occurrences
    ]


def count_duplicated_lines(content: str) -> int:
    """Number of distinct lines that occur at least twice."""
    return len(find_duplicate_lines(content, min_occurrences=2))
