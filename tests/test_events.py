# ============================================================================
# FireSink - Event Model Tests
#
# Purpose: Test Event field references, immutability, sentinel and JSON lines
# Inputs: None
# Outputs: Test pass/fail
# Dependencies: pytest, FireSink
# Usage: pytest tests/test_events.py -v
#
# Changelog:
#   2026-09-09: Initial event tests
# ============================================================================

import pytest

from FireSink.errors import EventDecodeError
from FireSink.events import SHUTDOWN, Event, _ShutdownSignal, decode_json_lines, parse_field_reference


class TestFieldReferences:
    def test_plain_name(self):
        assert parse_field_reference("data") == ["data"]

    def test_nested(self):
        assert parse_field_reference("[user][id]") == ["user", "id"]

    def test_malformed_brackets_are_literal(self):
        assert parse_field_reference("[user") == ["[user"]


class TestEvent:
    def test_get_top_level_and_nested(self):
        event = Event({"foo": 1, "user": {"id": 7}})
        assert event.get("foo") == 1
        assert event.get("[user][id]") == 7
        assert event.get("[user][missing]") is None
        assert event.get("missing", "dflt") == "dflt"

    def test_includes_null_field(self):
        """A field present with a null value still counts as included."""
        event = Event({"data": None})
        assert event.includes("data")
        assert not event.includes("other")

    def test_nested_lookup_through_scalar(self):
        event = Event({"user": 5})
        assert not event.includes("[user][id]")

    def test_input_mapping_is_copied(self):
        source = {"data": {"k": 1}}
        event = Event(source)
        source["data"]["k"] = 2
        assert event.get("[data][k]") == 1

    def test_returned_values_do_not_mutate_event(self):
        event = Event({"data": {"k": 1}})
        event.get("data")["k"] = 99
        event.to_dict()["data"]["k"] = 42
        assert event.get("[data][k]") == 1

    def test_coerce(self):
        event = Event({"a": 1})
        assert Event.coerce(event) is event
        assert Event.coerce({"a": 1}) == event

    def test_sprintf(self):
        assert Event({"p": "x"}).sprintf("/items/%{p}") == "/items/x"


class TestShutdownSentinel:
    def test_singleton(self):
        assert _ShutdownSignal() is SHUTDOWN
        assert repr(SHUTDOWN) == "SHUTDOWN"


class TestJsonLines:
    def test_from_json(self):
        assert Event.from_json('{"a": 1}').to_dict() == {"a": 1}

    def test_from_json_rejects_non_object(self):
        with pytest.raises(EventDecodeError):
            Event.from_json("[1, 2]")

    def test_from_json_rejects_garbage(self):
        with pytest.raises(EventDecodeError):
            Event.from_json("{not json")

    def test_decode_skips_blank_lines_and_numbers_lines(self):
        lines = ['{"a": 1}\n', "\n", '{"b": 2}\n']
        decoded = list(decode_json_lines(lines))
        assert [number for number, _ in decoded] == [1, 3]
        assert decoded[1][1].get("b") == 2

    def test_decode_reports_bad_lines(self):
        errors = []
        lines = ['{"a": 1}', "nope", '{"b": 2}']
        decoded = list(decode_json_lines(lines, on_error=lambda n, e: errors.append(n)))
        assert len(decoded) == 2
        assert errors == [2]

    def test_decode_raises_without_handler(self):
        with pytest.raises(EventDecodeError):
            list(decode_json_lines(["nope"]))
