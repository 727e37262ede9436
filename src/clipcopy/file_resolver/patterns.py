"""
Allow-pattern parsing, validation, and matching.

Allow-patterns are simple globs (`*`, `?`, `[...]`) with optional single-level
brace groups (`*.{js,ts}`). They are always matched against a file's base name,
case-insensitively, so a pattern can never reach into other directories.
"""

from __future__ import annotations

import fnmatch
import re
from functools import lru_cache

from clipcopy.errors import ErrorKind, Failure, GlobError
from clipcopy.file_resolver.types import PatternSet

# Characters allowed in a single pattern. Braces are checked separately for balance.
_SAFE_PATTERN_RE = re.compile(r"^[A-Za-z0-9*?.\[\]/_{},-]+$")


def _brace_span(pattern: str) -> tuple[int, int] | None:
    """
    Index of the first `{` and its matching `}`, or `None` if the pattern has no braces.
    Raises `GlobError` on nested or unbalanced braces.
    """
    start = pattern.find("{")
    close = pattern.find("}")
    if start == -1 and close == -1:
        return None
    if start == -1 or close < start:
        raise GlobError("unbalanced braces")
    inner_open = pattern.find("{", start + 1)
    if inner_open != -1 and inner_open < close:
        raise GlobError("nested braces are not supported")
    return start, close


def split_top_level(text: str, sep: str = ",") -> list[str]:
    """Split on `sep` outside of brace groups, stripping whitespace around each part."""
    parts: list[str] = []
    depth = 0
    current: list[str] = []
    for char in text:
        if char == "{":
            depth += 1
        elif char == "}":
            depth = max(depth - 1, 0)
        if char == sep and depth == 0:
            parts.append("".join(current).strip())
            current = []
        else:
            current.append(char)
    parts.append("".join(current).strip())
    return parts


def expand_braces(pattern: str) -> list[str]:
    """
    Expand brace groups into plain globs: `src/*.{js,ts}` becomes
    `["src/*.js", "src/*.ts"]`. Sequential groups are expanded left to right.
    Raises `GlobError` for nested or unbalanced braces.
    """
    span = _brace_span(pattern)
    if span is None:
        return [pattern]
    start, close = span
    prefix, options, suffix = pattern[:start], pattern[start + 1 : close], pattern[close + 1 :]
    expanded: list[str] = []
    for option in options.split(","):
        expanded.extend(expand_braces(f"{prefix}{option.strip()}{suffix}"))
    return expanded


def validate_pattern(pattern: str) -> bool:
    """Check one pattern against the safety rules."""
    if not pattern or not _SAFE_PATTERN_RE.match(pattern):
        return False
    # Anything that could escape the workspace.
    if ".." in pattern or pattern.startswith("/") or "~" in pattern:
        return False
    try:
        expand_braces(pattern)
    except GlobError:
        return False
    return True


def validate_patterns(text: str | None) -> bool:
    """Validate a comma-separated pattern string. Empty input is invalid."""
    if not text or not text.strip():
        return False
    return all(validate_pattern(part) for part in split_top_level(text))


def parse_patterns(text: str | None) -> PatternSet | Failure:
    """Parse a comma-separated pattern string into a validated `PatternSet`."""
    if not text or not text.strip():
        return Failure(ErrorKind.no_patterns_specified)
    if not validate_patterns(text):
        return Failure(ErrorKind.invalid_patterns)
    return [part for part in split_top_level(text) if part]


@lru_cache(maxsize=256)
def _compile(pattern: str) -> re.Pattern[str]:
    return re.compile(fnmatch.translate(pattern), re.IGNORECASE | re.DOTALL)


def _base_name(file_name: str) -> str:
    return file_name.replace("\\", "/").rsplit("/", 1)[-1]


def matches_single(file_name: str, pattern: str) -> bool:
    """Match one brace-free glob against a base name."""
    return _compile(pattern).match(file_name) is not None


def matches(file_name: str, patterns: PatternSet) -> bool:
    """
    True if the base name of `file_name` matches any pattern. Patterns with a
    brace group match if any of their expansions match. An empty pattern list
    never matches.
    """
    name = _base_name(file_name)
    for pattern in patterns:
        try:
            expanded = expand_braces(pattern)
        except GlobError:
            expanded = [pattern]
        if any(matches_single(name, p) for p in expanded):
            return True
    return False
