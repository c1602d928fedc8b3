# ============================================================================
# FireSink - Relative URI Tests
#
# Purpose: Test relative-reference validation of resolved paths
# Inputs: None
# Outputs: Test pass/fail
# Dependencies: pytest, FireSink
# Usage: pytest tests/test_uri.py -v
#
# Changelog:
#   2026-09-05: Initial relative-ref tests
#   2026-10-19: Database path restrictions
# ============================================================================

import pytest

from FireSink.uri import is_database_path, is_relative_reference


@pytest.mark.parametrize(
    "path",
    [
        "/a/b",
        "/",
        "users/42",
        "/users/-Nabc_12~x",
        "/a%20b",
        "/a/b?print=silent",
        "/a/b#frag",
        "./relative",
        "../up",
        "//host/path",
        "/rooms/room:1",
    ],
)
def test_valid_relative_references(path):
    assert is_relative_reference(path)


@pytest.mark.parametrize(
    "path",
    [
        "",
        "not a valid uri!!",
        "/a b",
        "/a\nb",
        "/a/b\n",
        "/100%",
        "scheme:path",
        "/a/{b}",
        "/a|b",
    ],
)
def test_invalid_relative_references(path):
    assert not is_relative_reference(path)


@pytest.mark.parametrize("path", ["/a/b", "/", "users/42", "/a/b?print=silent", "/rooms/room:1"])
def test_database_paths(path):
    assert is_database_path(path)


@pytest.mark.parametrize(
    "path",
    ["//users/42", "#frag", "?x=1", "/a/b#frag", "./relative", "../up", "/a/../b", "/a/./b", "", "/a b"],
)
def test_references_that_are_not_database_paths(path):
    assert not is_database_path(path)
