"""
Hierarchical `.gitignore` handling using pathspec.

Rules are collected per directory and applied along the chain of directories
from the workspace root down to each file, with every file path tested relative
to the directory that owns the rules. This keeps anchored patterns (`/build`)
bound to the directory of their ignore file, as git does.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

import pathspec

from clipcopy.file_resolver.defaults import IGNORE_FILE_NAME
from clipcopy.file_resolver.types import FileSystem, IgnoreRuleSet, OperationContext

log = logging.getLogger(__name__)


def compile_rules(text: str) -> pathspec.GitIgnoreSpec | None:
    """
    Compile ignore-file text into a `GitIgnoreSpec`, or `None` if it has no
    rules once comments and blank lines are dropped.
    """
    lines = text.splitlines()
    lines = [line for line in lines if line.strip() and not line.strip().startswith("#")]
    if not lines:
        return None
    return pathspec.GitIgnoreSpec.from_lines(lines)


async def _read_ignore_file(fs: FileSystem, path: Path) -> str | None:
    """Text of an ignore file, or `None` if it is missing, unreadable, or not UTF-8."""
    try:
        return (await fs.read_bytes(path)).decode("utf-8")
    except (OSError, UnicodeDecodeError) as e:
        log.debug("Skipping unreadable ignore file %s: %s", path, e)
        return None


def _directories_above(root: Path, workspace_root: Path) -> list[Path]:
    """Directories from the workspace root down to, but excluding, `root`."""
    try:
        rel = root.relative_to(workspace_root)
    except ValueError:
        return []
    dirs: list[Path] = []
    current = workspace_root
    for part in rel.parts:
        dirs.append(current)
        current = current / part
    return dirs


async def resolve_ignore_rules(root: Path, context: OperationContext) -> IgnoreRuleSet:
    """
    Collect the ignore rules that can affect files under `root`: every ignore
    file inside `root` (no exclusions applied while searching), plus those in
    the directories between the workspace root and `root`.

    Ignore files whose real location is outside the workspace (e.g. reached
    through a symlink) are discarded.
    """
    fs = context.fs
    workspace = context.workspace
    real_root = await fs.real_path(workspace.root)

    candidates = await fs.find_files(root, f"**/{IGNORE_FILE_NAME}")
    candidates += [d / IGNORE_FILE_NAME for d in _directories_above(root, workspace.root)]

    async def load(path: Path) -> tuple[Path, str] | None:
        if not workspace.contains(path.parent):
            return None
        real = await fs.real_path(path)
        if real != real_root and real_root not in real.parents:
            log.warning(
                "Ignoring ignore file outside the workspace: %s", workspace.relative_path(path)
            )
            return None
        text = await _read_ignore_file(fs, path)
        if text is None:
            return None
        return path.parent, text

    rules: IgnoreRuleSet = {}
    for entry in await asyncio.gather(*(load(p) for p in candidates)):
        if entry is not None:
            directory, text = entry
            rules[directory] = text
    log.debug("Loaded %d ignore file(s) for %s", len(rules), workspace.relative_path(root))
    return rules


def _get_matcher(
    directory: Path, rules: IgnoreRuleSet, context: OperationContext
) -> pathspec.GitIgnoreSpec | None:
    """Compile and cache the matcher for one directory's rules."""
    if directory not in context.matcher_cache:
        context.matcher_cache[directory] = compile_rules(rules[directory])
    return context.matcher_cache[directory]


def is_ignored(
    path: Path, workspace_root: Path, rules: IgnoreRuleSet, context: OperationContext
) -> bool:
    """
    True if any ignore file on the chain from `workspace_root` to the file's
    directory excludes it. Each ancestor's rules see the path relative to
    that ancestor. Files outside the workspace are never ignored.
    """
    if not rules:
        return False
    try:
        rel_dir = path.parent.relative_to(workspace_root)
    except ValueError:
        return False

    chain = [workspace_root]
    for part in rel_dir.parts:
        chain.append(chain[-1] / part)

    for ancestor in chain:
        if ancestor not in rules:
            continue
        matcher = _get_matcher(ancestor, rules, context)
        if matcher is not None and matcher.match_file(path.relative_to(ancestor).as_posix()):
            return True
    return False
