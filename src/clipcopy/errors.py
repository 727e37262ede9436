"""
Error kinds shared by all clipcopy components.

Components return either their value or a `Failure` rather than raising, and
`clipcopy.operations` translates failures into the fixed set of public
messages below. Raw filesystem error text and full paths never appear in these
messages.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ErrorKind(str, Enum):
    """Public, non-sensitive messages. The value is the text shown to the user."""

    no_files_selected = "No files selected"
    no_folder_selected = "No folder selected"
    no_items_selected = "No items selected"
    no_valid_items = "No valid items selected"
    only_folders_selected = 'Only folders selected. Use "Copy Folder to Clipboard" instead.'
    only_files_selected = 'Only files selected. Use "Copy File to Clipboard" instead.'
    no_patterns_specified = "No file patterns specified"
    invalid_patterns = "Invalid file patterns provided"
    no_matching_files = "No selected files match the specified patterns"
    no_matching_folder_files = "No files found matching the specified patterns"
    read_failed = "Failed to read some files"
    copy_failed = "Failed to copy files"


@dataclass(frozen=True)
class Failure:
    """An error value threaded up to the operation boundary."""

    kind: ErrorKind

    @property
    def message(self) -> str:
        return self.kind.value


class GlobError(ValueError):
    """A glob string could not be compiled (e.g. nested or unbalanced braces)."""
