# ============================================================================
# FireSink - Template Tests
#
# Purpose: Test %{field} resolution used for path and verb settings
# Inputs: None
# Outputs: Test pass/fail
# Dependencies: pytest, FireSink
# Usage: pytest tests/test_templating.py -v
#
# Changelog:
#   2026-09-09: Initial template tests
# ============================================================================

import pytest

from FireSink.errors import TemplateError
from FireSink.events import Event
from FireSink.templating import format_value, has_placeholders, resolve_template


class TestResolveTemplate:
    def test_literal_template_unchanged(self):
        assert resolve_template("/my-path", Event({})) == "/my-path"

    def test_single_placeholder(self):
        assert resolve_template("%{path}", Event({"path": "/x"})) == "/x"

    def test_multiple_and_nested_placeholders(self):
        event = Event({"kind": "users", "user": {"id": 42}})
        assert resolve_template("/%{kind}/%{[user][id]}", event) == "/users/42"

    def test_missing_field_raises(self):
        with pytest.raises(TemplateError) as exc_info:
            resolve_template("/users/%{id}", Event({}))
        assert exc_info.value.field == "id"

    def test_null_field_raises(self):
        with pytest.raises(TemplateError):
            resolve_template("%{verb}", Event({"verb": None}))

    def test_placeholder_helpers(self):
        assert has_placeholders("/a/%{b}")
        assert not has_placeholders("/a/b")


class TestFormatValue:
    def test_scalars(self):
        assert format_value(5) == "5"
        assert format_value(1.5) == "1.5"
        assert format_value(True) == "true"
        assert format_value("s") == "s"

    def test_list_joined_with_commas(self):
        assert format_value(["a", 1, False]) == "a,1,false"

    def test_mapping_as_compact_json(self):
        assert format_value({"b": 1, "a": 2}) == '{"a":2,"b":1}'
