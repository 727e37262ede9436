"""
Local-disk implementation of the `FileSystem` collaborator.

Globs passed to `find_files` are relative to the search root: `*.py` matches
only files directly in the root, `**/*.py` matches at any depth. A top-level
brace group (`{**/*.py,**/*.js}`) is a union of alternatives. Matching is
case-insensitive, like allow-pattern matching.

Include globs select files only, segment by segment, so a directory named
`vendor.js` never pulls its contents in. Exclude globs use gitignore semantics,
where excluding a directory excludes everything under it.

Blocking calls run in worker threads so that many stats, reads, and walks can
be in flight on one event loop.
"""

from __future__ import annotations

import asyncio
import os
import stat
from collections.abc import Sequence
from pathlib import Path, PurePath

import pathspec

from clipcopy.errors import GlobError
from clipcopy.file_resolver.patterns import expand_braces, matches_single
from clipcopy.file_resolver.types import FileStat

# One brace-free alternative, split into path segments.
IncludeGlob = list[tuple[str, ...]]


def _match_key(rel: PurePath) -> str:
    return rel.as_posix().lower()


def _alternatives(glob: str) -> list[str]:
    alternatives = expand_braces(glob)
    if not alternatives or any(not alt or alt.startswith("/") for alt in alternatives):
        raise GlobError("empty or absolute glob")
    return alternatives


def compile_include(glob: str) -> tuple[IncludeGlob, int | None]:
    """
    Split a root-relative include glob into per-segment alternatives, plus the
    maximum number of path segments it can match (`None` if it recurses with `**`).
    Raises `GlobError` if the glob is malformed.
    """
    compiled = [tuple(alt.split("/")) for alt in _alternatives(glob)]
    max_depth: int | None = 0
    for parts in compiled:
        if "**" in parts:
            max_depth = None
            break
        max_depth = max(max_depth, len(parts))
    return compiled, max_depth


def compile_exclude(glob: str) -> pathspec.GitIgnoreSpec:
    """Compile a root-relative exclude glob into an anchored gitignore spec."""
    try:
        return pathspec.GitIgnoreSpec.from_lines("/" + alt.lower() for alt in _alternatives(glob))
    except ValueError as e:
        raise GlobError(str(e)) from e


def _match_parts(pattern: Sequence[str], parts: Sequence[str]) -> bool:
    if not pattern:
        return not parts
    head, rest = pattern[0], pattern[1:]
    if head == "**":
        return any(_match_parts(rest, parts[i:]) for i in range(len(parts) + 1))
    return bool(parts) and matches_single(parts[0], head) and _match_parts(rest, parts[1:])


def include_matches(include: IncludeGlob, rel: PurePath) -> bool:
    """True if the file at root-relative `rel` matches any include alternative."""
    return any(_match_parts(alt, rel.parts) for alt in include)


class LocalFileSystem:
    """Reads the local disk. Symlinked directories are listed but not descended."""

    async def find_files(self, root: Path, include: str, exclude: str | None = None) -> list[Path]:
        include_glob, max_depth = compile_include(include)
        exclude_spec = compile_exclude(exclude) if exclude else None
        return await asyncio.to_thread(
            self._find_files_sync, root, include_glob, exclude_spec, max_depth
        )

    def _find_files_sync(
        self,
        root: Path,
        include: IncludeGlob,
        exclude: pathspec.GitIgnoreSpec | None,
        max_depth: int | None,
    ) -> list[Path]:
        found: list[Path] = []
        for dirpath, dirnames, filenames in os.walk(root):
            current = Path(dirpath)
            rel_dir = current.relative_to(root)

            # Prune excluded directories in-place (prevents descent)
            if exclude is not None:
                dirnames[:] = [
                    d for d in dirnames if not exclude.match_file(_match_key(rel_dir / d) + "/")
                ]
            if max_depth is not None and len(rel_dir.parts) + 2 > max_depth:
                dirnames[:] = []
            dirnames.sort()

            for filename in sorted(filenames):
                rel = rel_dir / filename
                if exclude is not None and exclude.match_file(_match_key(rel)):
                    continue
                if include_matches(include, rel):
                    found.append(current / filename)
        return found

    async def stat(self, path: Path) -> FileStat:
        st = await asyncio.to_thread(os.stat, path)
        return FileStat(is_directory=stat.S_ISDIR(st.st_mode))

    async def read_bytes(self, path: Path) -> bytes:
        return await asyncio.to_thread(path.read_bytes)

    async def real_path(self, path: Path) -> Path:
        return Path(await asyncio.to_thread(os.path.realpath, path))
