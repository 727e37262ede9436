"""Tests for allow-pattern parsing, validation, and matching."""

from __future__ import annotations

import pytest

from clipcopy.errors import ErrorKind, Failure, GlobError
from clipcopy.file_resolver.patterns import (
    expand_braces,
    matches,
    parse_patterns,
    split_top_level,
    validate_patterns,
)

_NAMES = ["app.js", "app.ts", "app.py", "APP.JS", "readme.md", "test_a.py", "b.tsx", ".env"]


def test_matches_simple_extension():
    assert matches("app.js", ["*.js"])
    assert not matches("app.py", ["*.js"])


def test_matches_any_pattern_in_set():
    assert matches("app.py", ["*.js", "*.py"])


def test_matches_empty_pattern_list_never_matches():
    assert not matches("app.py", [])


def test_matches_uses_base_name_only():
    assert matches("src/deep/app.py", ["*.py"])
    assert matches("src\\deep\\app.py", ["*.py"])
    # Directory parts in a pattern never match a base name
    assert not matches("src/app.py", ["src/*.py"])


def test_matches_is_case_insensitive():
    for name in _NAMES:
        for patterns in (["*.js"], ["*.{js,ts}"], ["test_?.py"], ["[ab]*"]):
            assert matches(name, patterns) == matches(name.upper(), patterns)
    assert matches("README.MD", ["readme.md"])


def test_matches_question_mark_is_exactly_one_char():
    assert matches("a1.py", ["a?.py"])
    assert not matches("a.py", ["a?.py"])
    assert not matches("a12.py", ["a?.py"])


def test_matches_bracket_class_and_range():
    assert matches("a.py", ["[ab].py"])
    assert matches("b.py", ["[ab].py"])
    assert not matches("c.py", ["[ab].py"])
    assert matches("c.txt", ["[a-c].txt"])
    assert not matches("d.txt", ["[a-c].txt"])


def test_matches_dot_is_literal():
    assert not matches("appXjs", ["app.js"])


def test_matches_is_anchored():
    assert not matches("app.json", ["*.js"])
    assert not matches("xapp.js", ["app.js"])


def test_brace_expansion_equivalent_to_alternatives():
    for name in _NAMES:
        expected = matches(name, ["*.js"]) or matches(name, ["*.ts"])
        assert matches(name, ["*.{js,ts}"]) == expected


def test_brace_expansion_with_prefix_and_suffix():
    for name in ["test_a.py", "test_b.py", "test_c.py", "test_a.pyc"]:
        expected = matches(name, ["test_a.py"]) or matches(name, ["test_b.py"])
        assert matches(name, ["test_{a,b}.py"]) == expected


def test_expand_braces():
    assert expand_braces("*.{js, ts}") == ["*.js", "*.ts"]
    assert expand_braces("*.py") == ["*.py"]
    assert expand_braces("{a,b}.{x,y}") == ["a.x", "a.y", "b.x", "b.y"]


def test_expand_braces_rejects_nested_and_unbalanced():
    with pytest.raises(GlobError):
        expand_braces("*.{js,{ts,tsx}}")
    with pytest.raises(GlobError):
        expand_braces("*.{js")
    with pytest.raises(GlobError):
        expand_braces("*.js}")


def test_split_top_level_keeps_brace_groups():
    assert split_top_level("*.py, *.{js,ts} ,README") == ["*.py", "*.{js,ts}", "README"]


def test_validate_patterns_accepts_safe_globs():
    assert validate_patterns("*.py,*.js,*.ts")
    assert validate_patterns("*.{js,ts},src/*.py,test_?.py,[ab]*.md")
    assert validate_patterns("my-file_name.txt")


@pytest.mark.parametrize(
    "text",
    [
        "",
        "   ",
        "../*.py",
        "src/../../etc/passwd",
        "/etc/*.conf",
        "~/*.py",
        "*.py,~",
        "*.py,,*.js",
        "*.py;rm",
        "a b.py",
        "*.{js,{ts,tsx}}",
        "*.{js",
        "!*.py",
    ],
)
def test_validate_patterns_rejects_unsafe(text: str):
    assert not validate_patterns(text)


def test_parse_patterns():
    assert parse_patterns("*.py, *.{js,ts}") == ["*.py", "*.{js,ts}"]


def test_parse_patterns_empty_is_failure():
    assert parse_patterns("") == Failure(ErrorKind.no_patterns_specified)
    assert parse_patterns(None) == Failure(ErrorKind.no_patterns_specified)


def test_parse_patterns_unsafe_is_failure():
    for text in ["../x.py", "/abs/*.py", "~/x.py"]:
        assert parse_patterns(text) == Failure(ErrorKind.invalid_patterns)
