"""
The three copy operations (selected files, selected folders, or a mixed
selection) and a listing operation that resolves a selection without reading it.

Each operation validates its patterns before touching the filesystem, resolves
the selection, aggregates file contents, and hands the text to the clipboard
writer. Failures from any component come back as `Failure` values and are
turned into an `OperationResult` here; unexpected exceptions are caught once,
at the operation boundary, and reported with a generic message.
"""

from __future__ import annotations

import functools
import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from clipcopy.aggregate import AggregationOutcome, aggregate
from clipcopy.clipboard import ClipboardWriter
from clipcopy.errors import ErrorKind, Failure
from clipcopy.file_resolver.patterns import parse_patterns
from clipcopy.file_resolver.resolver import FileResolver
from clipcopy.file_resolver.types import CopySettings, FileSystem, Resource, Workspace

log = logging.getLogger(__name__)

OPERATION_CANCELLED = "Operation cancelled by user"

# Choices offered when folders are selected: (label, description).
Choice = tuple[str, str]
Prompter = Callable[[str, Sequence[Choice]], str | None]

RECURSIVE_CHOICES: tuple[Choice, ...] = (
    ("Yes", "Include files from subdirectories"),
    ("No", "Only files in the selected folders"),
)


class Status(str, Enum):
    info = "info"
    warning = "warning"
    error = "error"
    cancelled = "cancelled"


@dataclass(frozen=True)
class OperationResult:
    status: Status
    message: str
    content: str | None = None
    files: tuple[Resource, ...] = ()

    @property
    def ok(self) -> bool:
        return self.status in (Status.info, Status.warning)


def _plural(count: int, noun: str) -> str:
    return f"{count} {noun}{'s' if count != 1 else ''}"


def _error(failure: Failure) -> OperationResult:
    return OperationResult(Status.error, failure.message)


def failed_files_summary(failed: Sequence[str]) -> str:
    """Up to three failed paths, then a count of the rest."""
    if len(failed) <= 3:
        return ", ".join(failed)
    return f"{', '.join(failed[:3])} and {len(failed) - 3} more"


def operation_boundary(
    func: Callable[..., Awaitable[OperationResult]],
) -> Callable[..., Awaitable[OperationResult]]:
    """Map any exception escaping an operation to the generic copy failure."""

    @functools.wraps(func)
    async def wrapper(*args: object, **kwargs: object) -> OperationResult:
        try:
            return await func(*args, **kwargs)
        except Exception:
            log.debug("Copy operation failed", exc_info=True)
            return _error(Failure(ErrorKind.copy_failed))

    return wrapper


def _ask_recursive(
    folder_count: int, recursive: bool | None, prompt: Prompter | None
) -> bool | None:
    """Resolve the recursion choice; `None` means the user cancelled."""
    if recursive is not None:
        return recursive
    if prompt is None:
        return True
    question = (
        "Copy folder recursively?"
        if folder_count == 1
        else f"Copy {folder_count} folders recursively?"
    )
    choice = prompt(question, RECURSIVE_CHOICES)
    if choice is None:
        return None
    return choice == "Yes"


def _finish(
    outcome: AggregationOutcome,
    files: Sequence[Resource],
    success_message: str,
    clipboard: ClipboardWriter | None,
) -> OperationResult:
    if outcome.error_count == len(files):
        return _error(Failure(ErrorKind.read_failed))

    if clipboard is not None:
        clipboard(outcome.content)

    if outcome.error_count:
        message = f"{success_message}. Could not read: {failed_files_summary(outcome.failed)}"
        return OperationResult(Status.warning, message, outcome.content, tuple(files))
    return OperationResult(Status.info, success_message, outcome.content, tuple(files))


@dataclass
class _Prepared:
    resolver: FileResolver
    patterns: list[str]


def _prepare(
    settings: CopySettings, fs: FileSystem | None, workspace: Workspace | None
) -> _Prepared | Failure:
    """Validate allow-patterns and exclude patterns before any filesystem access."""
    patterns = parse_patterns(settings.patterns)
    if isinstance(patterns, Failure):
        return patterns
    resolver = FileResolver(settings, fs=fs, workspace=workspace)
    exclude = resolver.exclude_glob()
    if isinstance(exclude, Failure):
        return exclude
    return _Prepared(resolver, patterns)


@operation_boundary
async def copy_files(
    paths: Sequence[str | Path],
    settings: CopySettings,
    *,
    fs: FileSystem | None = None,
    workspace: Workspace | None = None,
    clipboard: ClipboardWriter | None = None,
    destination: str = "clipboard",
) -> OperationResult:
    """Copy selected files that match the allow-patterns. Folders are skipped."""
    if not paths:
        return _error(Failure(ErrorKind.no_files_selected))
    prepared = _prepare(settings, fs, workspace)
    if isinstance(prepared, Failure):
        return _error(prepared)
    resolver = prepared.resolver

    selection = await resolver.classify(paths)
    if not selection.files and selection.directories:
        return _error(Failure(ErrorKind.only_folders_selected))
    if not selection.files:
        return _error(Failure(ErrorKind.no_files_selected))

    matched = resolver.filter_files(selection.files, prepared.patterns)
    if not matched:
        return _error(Failure(ErrorKind.no_matching_files))

    outcome = await aggregate(matched, resolver.context.fs, settings.encoding)

    message = (
        f"File content copied to {destination}"
        if len(matched) == 1
        else f"{len(matched)} files copied to {destination}"
    )
    skipped: list[str] = []
    if selection.directories:
        skipped.append(f"{_plural(len(selection.directories), 'folder')} skipped")
    filtered_out = len(selection.files) - len(matched)
    if filtered_out:
        skipped.append(f"{_plural(filtered_out, 'file')} filtered out")
    if skipped:
        message += f" ({', '.join(skipped)})"

    return _finish(outcome, matched, message, clipboard)


@operation_boundary
async def copy_folders(
    paths: Sequence[str | Path],
    settings: CopySettings,
    *,
    fs: FileSystem | None = None,
    workspace: Workspace | None = None,
    clipboard: ClipboardWriter | None = None,
    destination: str = "clipboard",
    recursive: bool | None = None,
    prompt: Prompter | None = None,
) -> OperationResult:
    """Copy matching files found in selected folders. Selected files are skipped."""
    if not paths:
        return _error(Failure(ErrorKind.no_folder_selected))
    prepared = _prepare(settings, fs, workspace)
    if isinstance(prepared, Failure):
        return _error(prepared)
    resolver = prepared.resolver

    selection = await resolver.classify(paths)
    if not selection.directories and selection.files:
        return _error(Failure(ErrorKind.only_files_selected))
    if not selection.directories:
        return _error(Failure(ErrorKind.no_folder_selected))

    is_recursive = _ask_recursive(len(selection.directories), recursive, prompt)
    if is_recursive is None:
        return OperationResult(Status.cancelled, OPERATION_CANCELLED)

    found = await resolver.walk_folders(selection.directories, prepared.patterns, is_recursive)
    if isinstance(found, Failure):
        return _error(found)
    if not found:
        return _error(Failure(ErrorKind.no_matching_folder_files))

    outcome = await aggregate(found, resolver.context.fs, settings.encoding)

    folders = _plural(len(selection.directories), "folder")
    message = f"{len(found)} files from {folders} copied to {destination}"
    if selection.files:
        message += f" ({_plural(len(selection.files), 'file')} skipped)"

    return _finish(outcome, found, message, clipboard)


@operation_boundary
async def copy_content(
    paths: Sequence[str | Path],
    settings: CopySettings,
    *,
    fs: FileSystem | None = None,
    workspace: Workspace | None = None,
    clipboard: ClipboardWriter | None = None,
    destination: str = "clipboard",
    recursive: bool | None = None,
    prompt: Prompter | None = None,
) -> OperationResult:
    """Copy a mixed selection: matching files plus matching files inside folders."""
    if not paths:
        return _error(Failure(ErrorKind.no_items_selected))
    prepared = _prepare(settings, fs, workspace)
    if isinstance(prepared, Failure):
        return _error(prepared)
    resolver = prepared.resolver

    classification = await resolver.classify(paths)
    if not classification.files and not classification.directories:
        return _error(Failure(ErrorKind.no_valid_items))

    is_recursive = False
    if classification.directories:
        choice = _ask_recursive(len(classification.directories), recursive, prompt)
        if choice is None:
            return OperationResult(Status.cancelled, OPERATION_CANCELLED)
        is_recursive = choice

    selection = await resolver.select(classification, prepared.patterns, is_recursive)
    if isinstance(selection, Failure):
        return _error(selection)
    files = selection.resources
    if not files:
        return _error(Failure(ErrorKind.no_matching_files))

    outcome = await aggregate(files, resolver.context.fs, settings.encoding)

    folder_count = len(classification.directories)
    if classification.files and folder_count:
        parts = [f"{len(files)} files copied"]
        from_folders = len(files) - len(selection.direct)
        if from_folders > 0:
            parts.append(f"{from_folders} from {_plural(folder_count, 'folder')}")
        message = ", ".join(parts) + f" to {destination}"
    elif folder_count:
        folders = _plural(folder_count, "folder")
        message = f"{len(files)} files from {folders} copied to {destination}"
    else:
        message = f"{_plural(len(files), 'file')} copied to {destination}"

    return _finish(outcome, files, message, clipboard)


@operation_boundary
async def list_files(
    paths: Sequence[str | Path],
    settings: CopySettings,
    *,
    fs: FileSystem | None = None,
    workspace: Workspace | None = None,
    recursive: bool | None = None,
) -> OperationResult:
    """
    Resolve a mixed selection the way `copy_content` does, without reading any
    file. Folders are walked recursively unless `recursive` is `False`.
    """
    if not paths:
        return _error(Failure(ErrorKind.no_items_selected))
    prepared = _prepare(settings, fs, workspace)
    if isinstance(prepared, Failure):
        return _error(prepared)
    resolver = prepared.resolver

    classification = await resolver.classify(paths)
    if not classification.files and not classification.directories:
        return _error(Failure(ErrorKind.no_valid_items))

    selection = await resolver.select(
        classification, prepared.patterns, recursive if recursive is not None else True
    )
    if isinstance(selection, Failure):
        return _error(selection)
    files = selection.resources
    message = f"{_plural(len(files), 'file')} selected"
    return OperationResult(Status.info, message, files=tuple(files))
