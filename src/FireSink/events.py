# ============================================================================
# FireSink - Event Model
#
# Purpose: Read-only event wrapper with field references, shutdown sentinel,
#          and JSON-lines decoding for the CLI input
# Inputs: Mappings produced by the upstream pipeline, JSON lines
# Outputs: Event objects
# Dependencies: copy, json, re, templating
# Usage: event = Event({"user": {"id": 7}}); event.get("[user][id]")
#
# Changelog:
#   2026-09-02: Initial Event wrapper and SHUTDOWN sentinel
#   2026-09-09: Nested field references ([a][b]) for target and templates
#   2026-09-24: decode_json_lines() for the CLI input stream
# ============================================================================

import copy
import json
import re
from typing import Any, Callable, Dict, Iterable, Iterator, List, Mapping, Optional, Tuple, Union

from FireSink.errors import EventDecodeError

_NESTED_REF = re.compile(r"^(\[[^\[\]]+\])+$")
_REF_PART = re.compile(r"\[([^\[\]]+)\]")

_MISSING = object()


class _ShutdownSignal:
    """Marker delivered by the host pipeline when the output stage is stopping."""

    _instance: Optional["_ShutdownSignal"] = None

    def __new__(cls) -> "_ShutdownSignal":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "SHUTDOWN"


SHUTDOWN = _ShutdownSignal()


def parse_field_reference(reference: str) -> List[str]:
    """
    Split a field reference into its path of keys.

    ``"name"`` is a top-level key, ``"[a][b]"`` walks nested mappings.
    Anything that does not look like a bracketed reference is taken as a
    single literal key.

    Args:
        reference: Field reference string

    Returns:
        List of keys from outermost to innermost
    """
    if _NESTED_REF.match(reference):
        return _REF_PART.findall(reference)
    return [reference]


class Event:
    """
    Immutable view over one pipeline event.

    The underlying mapping is deep-copied on construction and on ``to_dict()``
    so nothing downstream can mutate what the pipeline handed over.
    """

    __slots__ = ("_data",)

    def __init__(self, data: Optional[Mapping[str, Any]] = None):
        self._data: Dict[str, Any] = copy.deepcopy(dict(data or {}))

    @classmethod
    def coerce(cls, value: Union["Event", Mapping[str, Any]]) -> "Event":
        """Return ``value`` as an Event, wrapping plain mappings."""
        if isinstance(value, Event):
            return value
        return cls(value)

    @classmethod
    def from_json(cls, line: str) -> "Event":
        """
        Decode a single JSON object into an Event.

        Raises:
            EventDecodeError: If the line is not JSON or not an object
        """
        try:
            data = json.loads(line)
        except json.JSONDecodeError as e:
            raise EventDecodeError("Input line is not valid JSON", details=str(e)) from e
        if not isinstance(data, dict):
            raise EventDecodeError(f"Expected a JSON object, got {type(data).__name__}")
        return cls(data)

    def _lookup(self, reference: str) -> Any:
        current: Any = self._data
        for key in parse_field_reference(reference):
            if not isinstance(current, Mapping) or key not in current:
                return _MISSING
            current = current[key]
        return current

    def get(self, reference: str, default: Any = None) -> Any:
        """Return a copy of the value at ``reference`` or ``default`` when absent."""
        value = self._lookup(reference)
        if value is _MISSING:
            return default
        return copy.deepcopy(value)

    def includes(self, reference: str) -> bool:
        """True when the field exists, even if its value is null."""
        return self._lookup(reference) is not _MISSING

    def to_dict(self) -> Dict[str, Any]:
        return copy.deepcopy(self._data)

    def sprintf(self, template: str) -> str:
        """Resolve ``%{field}`` placeholders against this event."""
        from FireSink.templating import resolve_template

        return resolve_template(template, self)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Event):
            return self._data == other._data
        return NotImplemented

    def __repr__(self) -> str:
        return f"Event({self._data!r})"


def decode_json_lines(
    lines: Iterable[str],
    on_error: Optional[Callable[[int, EventDecodeError], None]] = None,
) -> Iterator[Tuple[int, Event]]:
    """
    Yield ``(line_number, event)`` pairs from an iterable of JSON lines.

    Blank lines are skipped. A line that does not decode is passed to
    ``on_error`` and skipped; without ``on_error`` the error is raised.

    Raises:
        EventDecodeError: On a bad line when no ``on_error`` is given
    """
    for line_number, line in enumerate(lines, start=1):
        stripped = line.strip()
        if not stripped:
            continue
        try:
            event = Event.from_json(stripped)
        except EventDecodeError as e:
            if on_error is None:
                raise
            on_error(line_number, e)
            continue
        yield line_number, event
