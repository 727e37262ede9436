"""
Directory walking: allow-patterns and the exclusion glob as one enumeration
query per root, followed by the hierarchical ignore-file check.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable, Sequence
from pathlib import Path

from clipcopy.errors import GlobError
from clipcopy.file_resolver.gitignore import is_ignored, resolve_ignore_rules
from clipcopy.file_resolver.types import OperationContext, PatternSet, Resource

log = logging.getLogger(__name__)


def include_glob(patterns: PatternSet, recursive: bool) -> str:
    """Combine allow-patterns into one root-relative glob, scoped by `recursive`."""
    adjusted = [f"**/{p}" if recursive else p for p in patterns]
    if len(adjusted) == 1:
        return adjusted[0]
    return "{" + ",".join(adjusted) + "}"


def dedupe(resources: Iterable[Resource]) -> list[Resource]:
    """Drop repeats by case-folded absolute path, keeping the first occurrence."""
    unique: dict[str, Resource] = {}
    for resource in resources:
        unique.setdefault(resource.dedup_key, resource)
    return list(unique.values())


async def _find(
    root: Path,
    patterns: PatternSet,
    recursive: bool,
    exclude_glob: str | None,
    context: OperationContext,
) -> list[Path]:
    fs = context.fs
    try:
        return await fs.find_files(root, include_glob(patterns, recursive), exclude_glob)
    except GlobError as e:
        log.debug("Combined include glob failed (%s), querying patterns one at a time", e)

    found: list[Path] = []
    for pattern in patterns:
        try:
            found += await fs.find_files(root, include_glob([pattern], recursive), exclude_glob)
        except GlobError as e:
            log.warning("Skipping pattern that cannot be searched: %s (%s)", pattern, e)
    return found


async def walk(
    root: Resource,
    patterns: PatternSet,
    recursive: bool,
    exclude_glob: str | None,
    context: OperationContext,
) -> list[Resource]:
    """Files under one root that pass the allow-patterns and every exclusion layer."""
    workspace = context.workspace
    paths = await _find(root.path, patterns, recursive, exclude_glob, context)
    resources = dedupe(workspace.resource(p) for p in paths)

    if context.settings.respect_gitignore:
        rules = await resolve_ignore_rules(root.path, context)
        resources = [r for r in resources if not is_ignored(r.path, workspace.root, rules, context)]

    log.debug("Found %d file(s) under %s", len(resources), root.relative)
    return resources


async def walk_all(
    roots: Sequence[Resource],
    patterns: PatternSet,
    recursive: bool,
    exclude_glob: str | None,
    context: OperationContext,
) -> list[Resource]:
    """Walk several roots concurrently and merge the results without duplicates."""
    results = await asyncio.gather(
        *(walk(root, patterns, recursive, exclude_glob, context) for root in roots)
    )
    return dedupe(resource for batch in results for resource in batch)
