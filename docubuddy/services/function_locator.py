"""
Function Locator - Best-effort function boundaries in raw source text.

No parsing: a declaration regex finds the first line that introduces the
named function, then the end is approximated by counting braces (or, for
Python, by indentation). Good enough to show a function preview next to
its documentation; not meant to be exact.
"""

import re
from dataclasses import dataclass
from typing import List, Optional


LANGUAGE_MAP = {
    "js": "javascript",
    "jsx": "javascript",
    "ts": "typescript",
    "tsx": "typescript",
    "py": "python",
    "java": "java",
    "cpp": "cpp",
    "c": "c",
    "cs": "csharp",
    "php": "php",
    "rb": "ruby",
    "go": "go",
    "rs": "rust",
    "swift": "swift",
    "kt": "kotlin",
}


@dataclass
class FunctionSpan:
    """A located function. Line numbers are 1-based and inclusive."""
    start_line: int
    end_line: int
    code: str


def language_from_path(file_path: str) -> str:
    """Map a file path to a highlighting language name ("text" if unknown)."""
    name = file_path.rsplit("/", 1)[-1]
    if "." not in name:
        return "text"
    ext = name.rsplit(".", 1)[-1].lower()
    return LANGUAGE_MAP.get(ext, "text")


def declaration_pattern(function_name: str) -> re.Pattern:
    """Regex matching the common ways a function named ``function_name`` is declared."""
    # \b fails next to "$", which is legal in JS identifiers
    name = r"(?<![\w$])" + re.escape(function_name) + r"(?![\w$])"
    alternatives = [
        rf"function\s+{name}",
        rf"const\s+{name}\s*=",
        rf"{name}\s*[:=]\s*function",
        rf"{name}\s*[:=]\s*\(.*\)\s*=>",
        rf"\bdef\s+{name}",
        rf"\bclass\s+{name}",
        rf"\bfunc\s+{name}",
        rf"\bfn\s+{name}",
    ]
    return re.compile("(" + "|".join(alternatives) + ")", re.IGNORECASE)


def find_declaration(lines: List[str], function_name: str) -> Optional[int]:
    """Index of the first line declaring the function, or None."""
    pattern = declaration_pattern(function_name)
    for index, line in enumerate(lines):
        if pattern.search(line):
            return index
    return None


def brace_block_end(lines: List[str], start: int) -> int:
    """
    Index of the line closing the first brace block opened at or after ``start``.

    Returns ``start`` when no opening brace is ever seen or the braces never
    balance.
    """
    depth = 0
    seen_open = False
    for index in range(start, len(lines)):
        for char in lines[index]:
            if char == "{":
                depth += 1
                seen_open = True
            elif char == "}":
                depth -= 1
                if seen_open and depth == 0:
                    return index
    return start


def _indent(line: str) -> int:
    return len(line) - len(line.lstrip())


def header_end(lines: List[str], start: int) -> int:
    """Index of the line ending a (possibly multi-line) header, i.e. the first one ending with ":"."""
    for index in range(start, len(lines)):
        if lines[index].split("#", 1)[0].rstrip().endswith(":"):
            return index
    return start


def indent_block_end(lines: List[str], start: int) -> int:
    """Index of the last line of an indentation block whose header starts at ``start``."""
    base = _indent(lines[start])
    end = header_end(lines, start)
    for index in range(end + 1, len(lines)):
        line = lines[index]
        if not line.strip():
            continue
        if _indent(line) <= base:
            break
        end = index
    return end


def locate_function(
    source: str,
    function_name: str,
    language: str = "text"
) -> Optional[FunctionSpan]:
    """
    Find ``function_name`` in ``source``.

    Args:
        source: Full file content
        function_name: Name to look for
        language: Result of ``language_from_path``; selects the block rule

    Returns:
        FunctionSpan, or None when no declaration matches
    """
    if not function_name:
        return None

    lines = source.split("\n")
    start = find_declaration(lines, function_name)
    if start is None:
        return None

    if language == "python":
        end = indent_block_end(lines, start)
    else:
        end = brace_block_end(lines, start)

    return FunctionSpan(
        start_line=start + 1,
        end_line=end + 1,
        code="\n".join(lines[start:end + 1])
    )
