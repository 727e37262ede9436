"""Core types for file selection: resources, settings, and collaborator protocols."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

import pathspec

from clipcopy.file_resolver.defaults import (
    DEFAULT_FILES_EXCLUDE,
    DEFAULT_PATTERNS,
    DEFAULT_SEARCH_EXCLUDE,
)

PatternSet = list[str]

# Directory path -> raw text of that directory's ignore file.
IgnoreRuleSet = dict[Path, str]


@dataclass(frozen=True)
class Resource:
    """A file or directory, with its absolute path and workspace-relative path."""

    path: Path
    relative: str

    @property
    def dedup_key(self) -> str:
        # Case-folded so case-insensitive filesystems don't yield duplicates.
        # Two distinct files differing only by case will be merged.
        return str(self.path).lower()


@dataclass(frozen=True)
class FileStat:
    is_directory: bool


@dataclass(frozen=True)
class Workspace:
    """
    The top-level directory boundary. Ignore files are only discovered and
    consulted inside it, and relative paths in output are computed against it.
    """

    root: Path

    @classmethod
    def at(cls, root: str | Path) -> Workspace:
        return cls(Path(os.path.abspath(root)))

    def relative_path(self, path: Path) -> str:
        """POSIX path relative to the root, or the absolute path if outside it."""
        try:
            return path.relative_to(self.root).as_posix()
        except ValueError:
            return str(path)

    def resource(self, path: str | Path) -> Resource:
        absolute = Path(os.path.abspath(path))
        return Resource(absolute, self.relative_path(absolute))

    def contains(self, path: Path) -> bool:
        return path == self.root or self.root in path.parents


@dataclass
class CopySettings:
    """
    Explicit configuration for one copy operation.

    `patterns` and `custom_exclude_patterns` are comma-separated strings, validated
    when the operation starts. Only entries set to `True` in `files_exclude` and
    `search_exclude` are applied, and only when `respect_host_excludes` is set.
    """

    patterns: str = DEFAULT_PATTERNS
    respect_gitignore: bool = True
    respect_host_excludes: bool = True
    custom_exclude_patterns: str = ""
    files_exclude: dict[str, bool] = field(default_factory=lambda: dict(DEFAULT_FILES_EXCLUDE))
    search_exclude: dict[str, bool] = field(default_factory=lambda: dict(DEFAULT_SEARCH_EXCLUDE))
    encoding: str = "utf-8"

    @property
    def host_excludes(self) -> list[str]:
        """Enabled host exclude globs, editor-wide first, then search-wide."""
        if not self.respect_host_excludes:
            return []
        enabled = [glob for glob, on in self.files_exclude.items() if on]
        enabled += [glob for glob, on in self.search_exclude.items() if on]
        return enabled


class FileSystem(Protocol):
    """Filesystem capabilities the selection engine needs. All calls may suspend."""

    async def find_files(self, root: Path, include: str, exclude: str | None = None) -> list[Path]:
        """
        Files under `root` whose root-relative path matches the `include` glob and
        not the `exclude` glob. Raises `GlobError` if a glob cannot be compiled.
        """
        ...

    async def stat(self, path: Path) -> FileStat:
        """Raises `OSError` if the path cannot be inspected."""
        ...

    async def read_bytes(self, path: Path) -> bytes:
        """Raises `OSError` if the file cannot be read."""
        ...

    async def real_path(self, path: Path) -> Path:
        """The path with all symlinks resolved."""
        ...


@dataclass
class OperationContext:
    """
    State owned by a single copy operation and discarded afterwards.

    The matcher cache is only touched between suspension points, so concurrent
    tasks on the event loop never see a half-populated entry.
    """

    workspace: Workspace
    fs: FileSystem
    settings: CopySettings
    matcher_cache: dict[Path, pathspec.GitIgnoreSpec | None] = field(default_factory=dict)


@dataclass(frozen=True)
class Classification:
    files: list[Resource]
    directories: list[Resource]
