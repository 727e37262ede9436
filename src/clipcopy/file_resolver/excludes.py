"""
Build the single exclusion glob applied while walking directories.

This is the coarse pre-filter: host exclude settings plus the user's custom
exclude patterns, merged into one glob. Anchored, per-directory rules come
later from ignore files.
"""

from __future__ import annotations

import logging

from clipcopy.errors import ErrorKind, Failure, GlobError
from clipcopy.file_resolver.patterns import expand_braces, split_top_level, validate_patterns
from clipcopy.file_resolver.types import CopySettings

log = logging.getLogger(__name__)


def _recursive(pattern: str) -> str:
    return pattern if pattern.startswith("**/") else f"**/{pattern}"


def _flatten(pattern: str) -> list[str]:
    # Brace groups are expanded up front so the combined union never nests braces.
    try:
        return expand_braces(pattern)
    except GlobError:
        log.warning("Skipping malformed exclude pattern: %s", pattern)
        return []


def build_exclude_glob(settings: CopySettings) -> str | None | Failure:
    """
    Merge enabled host excludes and custom exclude patterns into one glob.

    Returns `None` when there is nothing to exclude, and a `Failure` if the custom
    patterns do not pass validation.
    """
    patterns: list[str] = list(settings.host_excludes)

    custom = settings.custom_exclude_patterns
    if custom and custom.strip():
        if not validate_patterns(custom):
            return Failure(ErrorKind.invalid_patterns)
        patterns += [p for p in split_top_level(custom) if p]

    merged: list[str] = []
    for pattern in patterns:
        for expanded in _flatten(pattern):
            glob = _recursive(expanded)
            if glob not in merged:
                merged.append(glob)

    if not merged:
        return None
    if len(merged) == 1:
        return merged[0]
    return "{" + ",".join(merged) + "}"
