"""Split a mixed selection into files and directories."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from pathlib import Path

from clipcopy.file_resolver.types import (
    Classification,
    FileStat,
    FileSystem,
    Resource,
    Workspace,
)

log = logging.getLogger(__name__)


async def _stat_or_none(fs: FileSystem, resource: Resource) -> FileStat | None:
    try:
        return await fs.stat(resource.path)
    except OSError as e:
        # Missing or inaccessible inputs are dropped, not reported.
        log.debug("Skipping selection that cannot be inspected: %s (%s)", resource.relative, e)
        return None


async def classify(
    paths: Sequence[str | Path], fs: FileSystem, workspace: Workspace
) -> Classification:
    """
    Stat every input concurrently and partition into files and directories,
    preserving input order within each list. Inputs that fail to stat appear in
    neither list.
    """
    resources = [workspace.resource(p) for p in paths]
    stats = await asyncio.gather(*(_stat_or_none(fs, r) for r in resources))

    files: list[Resource] = []
    directories: list[Resource] = []
    for resource, stat in zip(resources, stats):
        if stat is None:
            continue
        if stat.is_directory:
            directories.append(resource)
        else:
            files.append(resource)
    return Classification(files=files, directories=directories)
