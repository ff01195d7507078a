"""Tree-sitter syntax checks for JavaScript/TypeScript test files."""

from pathlib import Path

import tree_sitter_javascript as tsjs
import tree_sitter_typescript as tsts
from tree_sitter import Language, Parser

JS_LANGUAGE = Language(tsjs.language())
TS_LANGUAGE = Language(tsts.language_typescript())
TSX_LANGUAGE = Language(tsts.language_tsx())

_EXTENSION_LANGUAGES = {
    ".js": "javascript",
    ".jsx": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".ts": "typescript",
    ".mts": "typescript",
    ".cts": "typescript",
    ".tsx": "tsx",
}


def get_language_for_file(file_path: str) -> str:
    """Map file extension to tree-sitter language name.

    Raises:
        ValueError: If file extension is not supported
    """
    ext = Path(file_path).suffix
    if ext not in _EXTENSION_LANGUAGES:
        raise ValueError(f"Unsupported file extension: {ext}")
    return _EXTENSION_LANGUAGES[ext]


def get_parser(language: str) -> Parser:
    """Return a tree-sitter Parser for the given language name."""
    parser = Parser()
    if language == "javascript":
        parser.language = JS_LANGUAGE
    elif language == "typescript":
        parser.language = TS_LANGUAGE
    elif language == "tsx":
        parser.language = TSX_LANGUAGE
    else:
        raise ValueError(f"Unsupported language: {language}")
    return parser


def has_syntax_errors(source: str, file_path: str) -> bool:
    """True when tree-sitter reports ERROR or MISSING nodes in ``source``.

    Raises:
        ValueError: If the file extension is not supported.
    """
    parser = get_parser(get_language_for_file(file_path))
    tree = parser.parse(source.encode("utf-8"))
    return tree.root_node.has_error


def introduces_syntax_errors(original: str, modified: str, file_path: str) -> bool:
    """True when ``original`` parses cleanly but ``modified`` does not.

    Files in unsupported languages are never reported.
    """
    try:
        if has_syntax_errors(original, file_path):
            return False
        return has_syntax_errors(modified, file_path)
    except ValueError:
        return False
