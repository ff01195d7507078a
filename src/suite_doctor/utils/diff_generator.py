"""Unified diffs and code-style detection for refactored test files."""

import difflib


def generate_unified_diff(
    file_path: str,
    original_content: str,
    modified_content: str,
) -> str:
    """Generate a git-compatible unified diff.

    Args:
        file_path: Path shown in the diff headers (e.g. "e2e/login.spec.ts").
        original_content: File content before refactoring.
        modified_content: File content after refactoring.

    Returns:
        Unified diff string with a/ b/ prefixes. Empty string if no changes.
    """
    if original_content == modified_content:
        return ""

    original_lines = original_content.splitlines(keepends=True)
    modified_lines = modified_content.splitlines(keepends=True)

    diff_gen = difflib.unified_diff(
        original_lines,
        modified_lines,
        fromfile=f"a/{file_path}",
        tofile=f"b/{file_path}",
        lineterm="",
    )

    # Lines keep their own newline from keepends=True; strip before joining
    return "\n".join(line[:-1] if line.endswith("\n") else line for line in diff_gen)


def detect_code_style(source_code: str) -> dict[str, str]:
    """Detect indentation and quote conventions.

    Args:
        source_code: The source code to analyse.

    Returns:
        Dict with keys:
            "indent": e.g. "2 spaces", "4 spaces", "tabs"
            "quotes": "single" or "double"
    """
    indent_style = "2 spaces"
    quote_style = "single"

    if not source_code:
        return {"indent": indent_style, "quotes": quote_style}

    indent_counts: dict[int, int] = {}
    for line in source_code.splitlines():
        if not line or not line[0].isspace():
            continue
        if line[0] == "\t":
            indent_style = "tabs"
            break
        spaces = len(line) - len(line.lstrip(" "))
        if spaces > 0:
            indent_counts[spaces] = indent_counts.get(spaces, 0) + 1

    if indent_style != "tabs" and indent_counts:
        # Smallest indent level is the base unit
        indent_style = f"{min(indent_counts)} spaces"

    if source_code.count('"') > source_code.count("'"):
        quote_style = "double"

    return {"indent": indent_style, "quotes": quote_style}


def quote_literal(value: str, quotes: str) -> str:
    """Render ``value`` as a JS string literal in the given quote style."""
    quote = '"' if quotes == "double" else "'"
    escaped = value.replace("\\", "\\\\").replace(quote, "\\" + quote)
    return f"{quote}{escaped}{quote}"
