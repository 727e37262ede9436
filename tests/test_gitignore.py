"""Tests for hierarchical .gitignore resolution."""

from __future__ import annotations

import asyncio
import os
from pathlib import Path

import pytest

from clipcopy.file_resolver.fs import LocalFileSystem
from clipcopy.file_resolver.gitignore import (
    _read_ignore_file,  # pyright: ignore[reportPrivateUsage]
    compile_rules,
    is_ignored,
    resolve_ignore_rules,
)
from clipcopy.file_resolver.types import CopySettings, OperationContext, Workspace


def _context(root: Path) -> OperationContext:
    return OperationContext(Workspace.at(root), LocalFileSystem(), CopySettings())


def _touch(path: Path, text: str = "x") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text)
    return path


def _ignored(path: Path, ctx: OperationContext, rules) -> bool:
    return is_ignored(path, ctx.workspace.root, rules, ctx)


def test_nested_rules_combine_with_parent(tmp_path: Path):
    (tmp_path / ".gitignore").write_text("*.log\n")
    _touch(tmp_path / "sub" / ".gitignore", "*.tmp\n")
    x_tmp = _touch(tmp_path / "sub" / "x.tmp")
    y_log = _touch(tmp_path / "sub" / "y.log")
    keep = _touch(tmp_path / "sub" / "keep.py")
    z_tmp = _touch(tmp_path / "other" / "z.tmp")

    ctx = _context(tmp_path)
    rules = asyncio.run(resolve_ignore_rules(tmp_path, ctx))

    assert _ignored(x_tmp, ctx, rules)
    assert _ignored(y_log, ctx, rules)
    assert not _ignored(keep, ctx, rules)
    # sub's rules do not reach outside sub
    assert not _ignored(z_tmp, ctx, rules)


def test_anchored_rule_binds_to_its_directory(tmp_path: Path):
    (tmp_path / ".gitignore").write_text("/build\n")
    top = _touch(tmp_path / "build" / "a.js")
    nested = _touch(tmp_path / "any" / "build" / "a.js")

    ctx = _context(tmp_path)
    rules = asyncio.run(resolve_ignore_rules(tmp_path, ctx))

    assert _ignored(top, ctx, rules)
    assert not _ignored(nested, ctx, rules)


def test_anchored_rule_in_nested_ignore_file(tmp_path: Path):
    _touch(tmp_path / "pkg" / ".gitignore", "/out\n")
    under_pkg = _touch(tmp_path / "pkg" / "out" / "a.js")
    deeper = _touch(tmp_path / "pkg" / "src" / "out" / "a.js")
    top_level = _touch(tmp_path / "out" / "a.js")

    ctx = _context(tmp_path)
    rules = asyncio.run(resolve_ignore_rules(tmp_path, ctx))

    assert _ignored(under_pkg, ctx, rules)
    assert not _ignored(deeper, ctx, rules)
    assert not _ignored(top_level, ctx, rules)


def test_directory_rule_excludes_contents(tmp_path: Path):
    (tmp_path / ".gitignore").write_text("generated/\n")
    gen = _touch(tmp_path / "src" / "generated" / "out.py")

    ctx = _context(tmp_path)
    rules = asyncio.run(resolve_ignore_rules(tmp_path, ctx))

    assert _ignored(gen, ctx, rules)


def test_negation_within_one_file(tmp_path: Path):
    (tmp_path / ".gitignore").write_text("*.log\n!keep.log\n")
    dropped = _touch(tmp_path / "debug.log")
    kept = _touch(tmp_path / "keep.log")

    ctx = _context(tmp_path)
    rules = asyncio.run(resolve_ignore_rules(tmp_path, ctx))

    assert _ignored(dropped, ctx, rules)
    assert not _ignored(kept, ctx, rules)


def test_rules_above_walked_root_are_included(tmp_path: Path):
    (tmp_path / ".gitignore").write_text("*.log\n")
    log_file = _touch(tmp_path / "sub" / "deep" / "y.log")

    ctx = _context(tmp_path)
    rules = asyncio.run(resolve_ignore_rules(tmp_path / "sub" / "deep", ctx))

    assert tmp_path in rules
    assert _ignored(log_file, ctx, rules)


def test_discovery_sees_ignore_files_in_excluded_dirs(tmp_path: Path):
    _touch(tmp_path / "node_modules" / "pkg" / ".gitignore", "*.js\n")

    ctx = _context(tmp_path)
    rules = asyncio.run(resolve_ignore_rules(tmp_path, ctx))

    assert tmp_path / "node_modules" / "pkg" in rules


def test_ignore_file_outside_workspace_is_never_consulted(tmp_path: Path):
    outside = _touch(tmp_path / "outside" / ".gitignore", "*.py\n")
    workspace = tmp_path / "ws"
    sub = workspace / "sub"
    sub.mkdir(parents=True)
    try:
        os.symlink(outside, sub / ".gitignore")
    except (OSError, NotImplementedError):
        pytest.skip("symlinks not supported")
    source = _touch(sub / "a.py")

    ctx = _context(workspace)
    rules = asyncio.run(resolve_ignore_rules(workspace, ctx))

    assert sub not in rules
    assert not _ignored(source, ctx, rules)


def test_file_outside_workspace_is_not_ignored(tmp_path: Path):
    workspace = tmp_path / "ws"
    workspace.mkdir()
    (workspace / ".gitignore").write_text("*.py\n")
    outside = _touch(tmp_path / "elsewhere" / "a.py")

    ctx = _context(workspace)
    rules = asyncio.run(resolve_ignore_rules(workspace, ctx))

    assert not _ignored(outside, ctx, rules)


def test_matchers_are_cached_per_directory(tmp_path: Path):
    (tmp_path / ".gitignore").write_text("*.log\n")
    a = _touch(tmp_path / "a.log")
    b = _touch(tmp_path / "b.py")

    ctx = _context(tmp_path)
    rules = asyncio.run(resolve_ignore_rules(tmp_path, ctx))
    assert _ignored(a, ctx, rules)
    cached = ctx.matcher_cache[tmp_path]
    assert not _ignored(b, ctx, rules)
    assert ctx.matcher_cache[tmp_path] is cached


def test_non_utf8_ignore_file_is_skipped(tmp_path: Path):
    (tmp_path / ".gitignore").write_bytes(b"\x80\x81\x82\xff\xfe")
    f = _touch(tmp_path / "a.py")

    ctx = _context(tmp_path)
    rules = asyncio.run(resolve_ignore_rules(tmp_path, ctx))

    assert rules == {}
    assert not _ignored(f, ctx, rules)


def test_read_ignore_file_missing(tmp_path: Path):
    result = asyncio.run(_read_ignore_file(LocalFileSystem(), tmp_path / "nonexistent"))
    assert result is None


def test_compile_rules_skips_comments_and_blanks():
    assert compile_rules("# just a comment\n\n   \n") is None
    spec = compile_rules("# comment\n*.log\n")
    assert spec is not None
    assert spec.match_file("debug.log")
    assert not spec.match_file("main.py")
