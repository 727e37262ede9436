"""
clipcopy: select files by pattern, respecting excludes and .gitignore files,
and copy their combined contents to the clipboard.
"""

from clipcopy.operations import (
    OperationResult,
    Status,
    copy_content,
    copy_files,
    copy_folders,
    list_files,
)

__all__ = [
    "OperationResult",
    "Status",
    "copy_content",
    "copy_files",
    "copy_folders",
    "list_files",
]
