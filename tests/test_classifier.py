"""Tests for splitting a selection into files and directories."""

from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from clipcopy.file_resolver.classifier import classify
from clipcopy.file_resolver.fs import LocalFileSystem
from clipcopy.file_resolver.types import Workspace


def _tree(root: Path) -> None:
    (root / "a.py").write_text("a")
    (root / "b.js").write_text("b")
    (root / "src").mkdir()
    (root / "docs").mkdir()


def test_classify_splits_files_and_directories(tmp_path: Path):
    _tree(tmp_path)
    inputs = [tmp_path / "src", tmp_path / "a.py", tmp_path / "docs", tmp_path / "b.js"]

    result = asyncio.run(classify(inputs, LocalFileSystem(), Workspace.at(tmp_path)))

    assert [r.relative for r in result.files] == ["a.py", "b.js"]
    assert [r.relative for r in result.directories] == ["src", "docs"]


def test_classify_drops_missing_inputs(tmp_path: Path):
    _tree(tmp_path)
    inputs = [tmp_path / "missing.py", tmp_path / "a.py", tmp_path / "gone"]

    result = asyncio.run(classify(inputs, LocalFileSystem(), Workspace.at(tmp_path)))

    assert [r.relative for r in result.files] == ["a.py"]
    assert result.directories == []


def test_classify_is_idempotent(tmp_path: Path):
    _tree(tmp_path)
    inputs = [str(tmp_path / "src"), str(tmp_path / "a.py"), str(tmp_path / "nope")]
    fs = LocalFileSystem()
    workspace = Workspace.at(tmp_path)

    first = asyncio.run(classify(inputs, fs, workspace))
    second = asyncio.run(classify(inputs, fs, workspace))

    assert first == second


def test_classify_records_absolute_and_relative_paths(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
):
    _tree(tmp_path)
    monkeypatch.chdir(tmp_path)

    result = asyncio.run(classify(["src", "a.py"], LocalFileSystem(), Workspace.at(tmp_path)))

    assert result.files[0].path == tmp_path / "a.py"
    assert result.files[0].relative == "a.py"
    assert result.directories[0].path == tmp_path / "src"


def test_classify_path_outside_workspace_keeps_absolute_path(tmp_path: Path):
    workspace_dir = tmp_path / "ws"
    workspace_dir.mkdir()
    outside = tmp_path / "outside.py"
    outside.write_text("x")

    result = asyncio.run(classify([outside], LocalFileSystem(), Workspace.at(workspace_dir)))

    assert result.files[0].relative == str(outside)
