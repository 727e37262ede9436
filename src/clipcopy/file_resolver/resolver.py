"""
FileResolver: main entry point for file selection.

Resolves a mix of selected files and folders into a deduplicated list of
resources, applying allow-patterns, host excludes, custom excludes, and
ignore files.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from clipcopy.errors import Failure
from clipcopy.file_resolver.classifier import classify
from clipcopy.file_resolver.excludes import build_exclude_glob
from clipcopy.file_resolver.fs import LocalFileSystem
from clipcopy.file_resolver.patterns import matches
from clipcopy.file_resolver.types import (
    Classification,
    CopySettings,
    FileSystem,
    OperationContext,
    PatternSet,
    Resource,
    Workspace,
)
from clipcopy.file_resolver.walker import dedupe, walk_all


@dataclass(frozen=True)
class Selection:
    """Resolved files, with where they came from."""

    direct: list[Resource]
    from_folders: list[Resource]
    resources: list[Resource]


class FileResolver:
    """
    Discovers files for one copy operation. Owns the operation's context (and
    so its ignore-matcher cache); create a new resolver per operation.
    """

    def __init__(
        self,
        settings: CopySettings,
        fs: FileSystem | None = None,
        workspace: Workspace | None = None,
    ) -> None:
        self.context: OperationContext = OperationContext(
            workspace=workspace or Workspace.at(Path.cwd()),
            fs=fs or LocalFileSystem(),
            settings=settings,
        )
        self._exclude_glob: str | None | Failure = None
        self._exclude_built: bool = False

    async def classify(self, paths: Sequence[str | Path]) -> Classification:
        return await classify(paths, self.context.fs, self.context.workspace)

    def filter_files(self, files: Sequence[Resource], patterns: PatternSet) -> list[Resource]:
        """Direct file selections whose base names match the allow-patterns."""
        return [f for f in files if matches(f.relative, patterns)]

    def exclude_glob(self) -> str | None | Failure:
        """The combined exclusion glob, built once per operation."""
        if not self._exclude_built:
            self._exclude_glob = build_exclude_glob(self.context.settings)
            self._exclude_built = True
        return self._exclude_glob

    async def walk_folders(
        self, folders: Sequence[Resource], patterns: PatternSet, recursive: bool
    ) -> list[Resource] | Failure:
        exclude = self.exclude_glob()
        if isinstance(exclude, Failure):
            return exclude
        return await walk_all(folders, patterns, recursive, exclude, self.context)

    async def select(
        self,
        classification: Classification,
        patterns: PatternSet,
        recursive: bool,
    ) -> Selection | Failure:
        """
        Pattern-filtered direct files plus everything found in the folders,
        deduplicated by case-folded path. Order is direct files first, then folder
        contents as the walks returned them.
        """
        direct = self.filter_files(classification.files, patterns)
        from_folders: list[Resource] = []
        if classification.directories:
            walked = await self.walk_folders(classification.directories, patterns, recursive)
            if isinstance(walked, Failure):
                return walked
            from_folders = walked
        return Selection(
            direct=direct,
            from_folders=from_folders,
            resources=dedupe([*direct, *from_folders]),
        )
