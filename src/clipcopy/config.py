"""
TOML config files for clipcopy.

The nearest `.clipcopy.toml`, `clipcopy.toml`, or `pyproject.toml` with a
`[tool.clipcopy]` table is used, searching from the current directory upward.
An explicit CLI flag always beats the config file, which beats the built-in
defaults.

Example::

    [selection]
    patterns = "*.py,*.{js,ts}"
    respect-gitignore = true

    [excludes]
    respect-host-excludes = true
    custom-exclude-patterns = ["*.min.js", "dist"]

    [files-exclude]
    "**/.git" = true

    [search-exclude]
    "**/node_modules" = false

Section names (`[selection]`, `[excludes]`) are only for grouping; keys may
also sit at the top level.
"""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, TypeVar, cast

if sys.version_info >= (3, 11):
    import tomllib  # pyright: ignore[reportUnreachable]
else:
    import tomli as tomllib  # type: ignore[no-redef]  # pyright: ignore[reportUnreachable]

log = logging.getLogger(__name__)

PYPROJECT = "pyproject.toml"

# Per directory, the first of these that applies wins.
CONFIG_FILENAMES = (".clipcopy.toml", "clipcopy.toml", PYPROJECT)


@dataclass
class ClipcopyConfig:
    """
    Settings read from a config file. `None` means the file does not mention
    the setting, so the CLI default (or flag) stays in effect.
    """

    patterns: str | None = None
    respect_gitignore: bool | None = None
    respect_host_excludes: bool | None = None
    custom_exclude_patterns: str | None = None
    files_exclude: dict[str, bool] | None = None
    search_exclude: dict[str, bool] | None = None
    encoding: str | None = None


_FIELD_NAMES = frozenset(f.name for f in fields(ClipcopyConfig))

# Fields written as comma-separated strings, which TOML may give as arrays.
_COMMA_LIST_FIELDS = frozenset({"patterns", "custom_exclude_patterns"})


def _field_name(key: str) -> str:
    return key.replace("-", "_")


def _tool_table(data: dict[str, Any]) -> dict[str, Any] | None:
    tool = data.get("tool", {})
    if not isinstance(tool, dict):
        return None
    table = cast(dict[str, Any], tool).get("clipcopy")
    return cast(dict[str, Any], table) if isinstance(table, dict) else None


def _pyproject_has_clipcopy_section(path: Path) -> bool:
    try:
        return _tool_table(tomllib.loads(path.read_text())) is not None
    except (tomllib.TOMLDecodeError, OSError):
        return False


def _config_in(directory: Path) -> Path | None:
    for name in CONFIG_FILENAMES:
        candidate = directory / name
        if not candidate.is_file():
            continue
        if name != PYPROJECT or _pyproject_has_clipcopy_section(candidate):
            return candidate
    return None


def find_config_file(start_dir: Path) -> Path | None:
    """
    The config file nearest to `start_dir`, looking in it and then each parent.
    A `pyproject.toml` only counts if it has a `[tool.clipcopy]` table.
    """
    start = start_dir.resolve()
    for directory in (start, *start.parents):
        found = _config_in(directory)
        if found is not None:
            return found
    return None


def load_config(config_path: Path) -> ClipcopyConfig:
    """
    Read a config file. Malformed TOML is logged and treated as an empty
    config rather than stopping the run.
    """
    try:
        data = tomllib.loads(config_path.read_text())
    except tomllib.TOMLDecodeError as e:
        log.warning("Ignoring malformed config file %s: %s", config_path, e)
        return ClipcopyConfig()

    if config_path.name == PYPROJECT:
        data = _tool_table(data) or {}
    return _parse_config_data(data)


def _flatten_sections(data: dict[str, Any]) -> dict[str, Any]:
    # [files-exclude] and [search-exclude] are values, not grouping sections.
    flat: dict[str, Any] = {}
    for key, value in data.items():
        if isinstance(value, dict) and _field_name(key) not in _FIELD_NAMES:
            flat.update(cast(dict[str, Any], value))
        else:
            flat[key] = value
    return flat


def _normalize(name: str, value: Any) -> Any:
    if name in _COMMA_LIST_FIELDS and isinstance(value, list):
        return ",".join(str(item) for item in cast(list[Any], value))
    return value


def _parse_config_data(data: dict[str, Any]) -> ClipcopyConfig:
    values: dict[str, Any] = {}
    for key, value in _flatten_sections(data).items():
        name = _field_name(key)
        if name not in _FIELD_NAMES:
            log.warning("Ignoring unrecognized config key: %s", key)
            continue
        values[name] = _normalize(name, value)
    return ClipcopyConfig(**values)


_T = TypeVar("_T")


def merge_cli_with_config(
    cli_opts: _T,
    config: ClipcopyConfig | None,
    explicit_flags: set[str],
) -> _T:
    """
    Copy config values onto `cli_opts` for every setting the user did not pass
    on the command line. Settings the config leaves unset are not touched.
    """
    if config is None:
        return cli_opts

    for name in _FIELD_NAMES - explicit_flags:
        value = getattr(config, name)
        if value is not None and hasattr(cli_opts, name):
            setattr(cli_opts, name, value)
    return cli_opts
