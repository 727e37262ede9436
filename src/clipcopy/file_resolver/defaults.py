"""
Default allow-patterns and host exclude settings for file discovery.

Host excludes are maps of glob to an enabled flag, in the same shape editors
use for their `files.exclude` and `search.exclude` settings. Only enabled
entries are applied.
"""

from __future__ import annotations

DEFAULT_PATTERNS: str = "*.py,*.js,*.ts"

IGNORE_FILE_NAME: str = ".gitignore"

# Editor-wide excludes: version control metadata and OS droppings.
DEFAULT_FILES_EXCLUDE: dict[str, bool] = {
    "**/.git": True,
    "**/.svn": True,
    "**/.hg": True,
    "**/CVS": True,
    "**/.DS_Store": True,
    "**/Thumbs.db": True,
}

# Search-wide excludes: dependency trees that are almost never worth copying.
DEFAULT_SEARCH_EXCLUDE: dict[str, bool] = {
    "**/node_modules": True,
    "**/bower_components": True,
    "**/*.code-search": True,
}
