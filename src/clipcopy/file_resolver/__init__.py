"""
File selection with allow-patterns, host/custom exclusion globs, and
hierarchical `.gitignore` handling.

Usage::

    from clipcopy.file_resolver import CopySettings, FileResolver

    resolver = FileResolver(CopySettings(patterns="*.py,*.{js,ts}"))
    classification = await resolver.classify(["src", "README.md"])
    selection = await resolver.select(classification, ["*.py"], recursive=True)
"""

from clipcopy.file_resolver.defaults import (
    DEFAULT_FILES_EXCLUDE,
    DEFAULT_PATTERNS,
    DEFAULT_SEARCH_EXCLUDE,
)
from clipcopy.file_resolver.fs import LocalFileSystem
from clipcopy.file_resolver.patterns import matches, parse_patterns, validate_patterns
from clipcopy.file_resolver.resolver import FileResolver, Selection
from clipcopy.file_resolver.types import (
    Classification,
    CopySettings,
    FileSystem,
    Resource,
    Workspace,
)

__all__ = [
    "DEFAULT_FILES_EXCLUDE",
    "DEFAULT_PATTERNS",
    "DEFAULT_SEARCH_EXCLUDE",
    "Classification",
    "CopySettings",
    "FileResolver",
    "FileSystem",
    "LocalFileSystem",
    "Resource",
    "Selection",
    "Workspace",
    "matches",
    "parse_patterns",
    "validate_patterns",
]
