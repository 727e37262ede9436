#!/usr/bin/env python3
"""
clipcopy: Copy the contents of files and folders to the clipboard as one text blob

Common usage:
  clipcopy src/ README.md
  clipcopy --mode folder --recursive src/
  clipcopy --patterns '*.py,*.{js,ts}' --exclude 'dist,*.min.js' .
  clipcopy --stdout src/app.py
  clipcopy --list-files --recursive .

Files are selected by allow-patterns (matched against file names), then
filtered by host excludes, custom excludes, and .gitignore files.
"""

from __future__ import annotations

import argparse
import asyncio
import importlib.metadata
import logging
import sys
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from strif import atomic_output_file

from clipcopy.clipboard import write_clipboard
from clipcopy.config import find_config_file, load_config, merge_cli_with_config
from clipcopy.file_resolver import (
    DEFAULT_FILES_EXCLUDE,
    DEFAULT_PATTERNS,
    DEFAULT_SEARCH_EXCLUDE,
    CopySettings,
    Workspace,
)
from clipcopy.operations import (
    OperationResult,
    Status,
    copy_content,
    copy_files,
    copy_folders,
    list_files,
)

_OPERATIONS = {
    "content": copy_content,
    "file": copy_files,
    "folder": copy_folders,
}


@dataclass
class Options:
    """Command-line options for the clipcopy tool."""

    paths: list[str]
    mode: str
    patterns: str | None
    custom_exclude_patterns: str | None
    respect_gitignore: bool | None
    respect_host_excludes: bool | None
    files_exclude: dict[str, bool] | None
    search_exclude: dict[str, bool] | None
    encoding: str | None
    recursive: bool | None
    workspace: str | None
    stdout: bool
    output: str | None
    list_files: bool
    verbose: bool
    version: bool

    def to_settings(self) -> CopySettings:
        """Settings for one operation, with built-in defaults for anything unset."""
        return CopySettings(
            patterns=self.patterns if self.patterns is not None else DEFAULT_PATTERNS,
            respect_gitignore=self.respect_gitignore is not False,
            respect_host_excludes=self.respect_host_excludes is not False,
            custom_exclude_patterns=self.custom_exclude_patterns or "",
            files_exclude=dict(
                self.files_exclude if self.files_exclude is not None else DEFAULT_FILES_EXCLUDE
            ),
            search_exclude=dict(
                self.search_exclude if self.search_exclude is not None else DEFAULT_SEARCH_EXCLUDE
            ),
            encoding=self.encoding or "utf-8",
        )


# Options fields a config file may supply when the flag is not given.
_CONFIGURABLE = (
    "patterns",
    "custom_exclude_patterns",
    "respect_gitignore",
    "respect_host_excludes",
    "encoding",
)


def _parse_args(args: list[str] | None = None) -> tuple[Options, set[str]]:
    """
    Parse command-line arguments.

    Returns the options and the set of configurable fields the user explicitly
    passed (for config merge precedence). Configurable flags default to `None`
    so that passing a flag with its default value still counts as explicit.
    """
    module_doc = __doc__ or ""
    doc_parts = module_doc.split("\n\n")
    description = doc_parts[0]
    epilog = "\n\n".join(doc_parts[1:])

    parser = argparse.ArgumentParser(
        description=description,
        epilog=epilog,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "paths",
        nargs="*",
        type=str,
        default=[],
        help="Files and folders to copy (use '.' for the current directory)",
    )
    parser.add_argument(
        "--mode",
        choices=sorted(_OPERATIONS),
        default="content",
        help="'file' copies only selected files, 'folder' only selected folders, "
        "'content' both (default: %(default)s)",
    )
    parser.add_argument(
        "-p",
        "--patterns",
        default=None,
        metavar="PATTERNS",
        help=f"Comma-separated allow-patterns matched against file names "
        f"(default: {DEFAULT_PATTERNS})",
    )
    parser.add_argument(
        "-e",
        "--exclude",
        dest="custom_exclude_patterns",
        default=None,
        metavar="PATTERNS",
        help="Comma-separated patterns to exclude anywhere in the walked folders",
    )
    recursion = parser.add_mutually_exclusive_group()
    recursion.add_argument(
        "-r",
        "--recursive",
        action="store_const",
        const=True,
        default=None,
        dest="recursive",
        help="Include files from subdirectories (otherwise you are asked)",
    )
    recursion.add_argument(
        "--no-recursive",
        action="store_const",
        const=False,
        dest="recursive",
        help="Only include files directly inside the selected folders",
    )
    parser.add_argument(
        "--no-respect-gitignore",
        action="store_const",
        const=False,
        default=None,
        dest="respect_gitignore",
        help="Disable .gitignore integration",
    )
    parser.add_argument(
        "--no-respect-host-excludes",
        action="store_const",
        const=False,
        default=None,
        dest="respect_host_excludes",
        help="Do not apply the files-exclude and search-exclude settings",
    )
    parser.add_argument(
        "--workspace",
        default=None,
        metavar="DIR",
        help="Workspace root for relative paths and .gitignore lookup (default: current directory)",
    )
    parser.add_argument(
        "--encoding",
        default=None,
        help="Text encoding used to decode files (default: utf-8)",
    )
    parser.add_argument(
        "--stdout",
        action="store_true",
        help="Print the copied text instead of writing it to the clipboard",
    )
    parser.add_argument(
        "-o",
        "--output",
        default=None,
        metavar="FILE",
        help="Write the copied text to a file instead of the clipboard",
    )
    parser.add_argument(
        "--list-files",
        action="store_true",
        dest="list_files",
        help="Print the selected files without reading them",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Show debug logging")
    parser.add_argument(
        "--version",
        action="store_true",
        help="Show version information and exit",
    )
    opts = parser.parse_args(args)

    explicit_flags = {name for name in _CONFIGURABLE if getattr(opts, name) is not None}

    return (
        Options(
            paths=opts.paths,
            mode=opts.mode,
            patterns=opts.patterns,
            custom_exclude_patterns=opts.custom_exclude_patterns,
            respect_gitignore=opts.respect_gitignore,
            respect_host_excludes=opts.respect_host_excludes,
            files_exclude=None,
            search_exclude=None,
            encoding=opts.encoding,
            recursive=opts.recursive,
            workspace=opts.workspace,
            stdout=opts.stdout,
            output=opts.output,
            list_files=opts.list_files,
            verbose=opts.verbose,
            version=opts.version,
        ),
        explicit_flags,
    )


def _setup_logging(verbose: bool) -> None:
    base = logging.getLogger("clipcopy")
    base.setLevel(logging.DEBUG if verbose else logging.WARNING)
    # Replace rather than reuse, so the handler follows the current sys.stderr.
    for old in list(base.handlers):
        base.removeHandler(old)
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    base.addHandler(handler)


def _prompt_stdin(question: str, choices: Sequence[tuple[str, str]]) -> str | None:
    """Ask on stderr, read a choice from stdin. Anything unrecognized cancels."""
    print(question, file=sys.stderr)
    for label, description in choices:
        print(f"  {label}: {description}", file=sys.stderr)
    print("> ", end="", file=sys.stderr, flush=True)
    answer = sys.stdin.readline().strip().lower()
    for label, _ in choices:
        if answer and (answer == label.lower() or answer == label[0].lower()):
            return label
    return None


def _list_files(options: Options, settings: CopySettings, workspace: Workspace) -> int:
    result = asyncio.run(
        list_files(options.paths, settings, workspace=workspace, recursive=options.recursive)
    )
    if result.status is Status.error:
        print(f"Error: {result.message}", file=sys.stderr)
        return 1
    for resource in result.files:
        print(resource.relative)
    return 0


def _run_operation(
    options: Options, settings: CopySettings, workspace: Workspace
) -> OperationResult:
    to_clipboard = not options.stdout and options.output is None
    if options.output is not None:
        destination = "file"
    elif options.stdout:
        destination = "output"
    else:
        destination = "clipboard"

    operation = _OPERATIONS[options.mode]
    kwargs: dict[str, object] = {
        "workspace": workspace,
        "clipboard": write_clipboard if to_clipboard else None,
        "destination": destination,
    }
    if options.mode != "file":
        kwargs["recursive"] = options.recursive
        kwargs["prompt"] = _prompt_stdin
    return asyncio.run(operation(options.paths, settings, **kwargs))


def main(args: list[str] | None = None) -> int:
    """
    Main entry point for the clipcopy CLI.

    Args:
        args: Command-line arguments (uses sys.argv if None)

    Returns:
        Exit code (0 for success or cancellation, 1 for errors)
    """
    options, explicit_flags = _parse_args(args)
    _setup_logging(options.verbose)

    if options.version:
        try:
            version = importlib.metadata.version("clipcopy")
            print(f"v{version}")
        except importlib.metadata.PackageNotFoundError:
            print("unknown (package not installed)")
        return 0

    if not options.paths:
        print(
            "Error: No input specified. Provide files or folders (use '.' for the current"
            " directory). Use --help for more options.",
            file=sys.stderr,
        )
        return 1

    # Load and merge config file settings
    config_path = find_config_file(Path.cwd())
    if config_path:
        config = load_config(config_path)
        merge_cli_with_config(options, config, explicit_flags)

    settings = options.to_settings()
    workspace = Workspace.at(options.workspace or Path.cwd())

    if options.list_files:
        return _list_files(options, settings, workspace)

    result = _run_operation(options, settings, workspace)

    if result.status is Status.error:
        print(f"Error: {result.message}", file=sys.stderr)
        return 1

    if result.ok and result.content is not None:
        if options.output is not None:
            try:
                with atomic_output_file(options.output, make_parents=True) as tmp_path:
                    Path(tmp_path).write_text(result.content, encoding="utf-8")
            except OSError as e:
                print(f"Error: Could not write output file: {e.strerror}", file=sys.stderr)
                return 1
        elif options.stdout:
            sys.stdout.write(result.content)

    print(result.message, file=sys.stderr)
    return 0


if __name__ == "__main__":
    sys.exit(main())
