# ============================================================================
# FireSink - Event Templates
#
# Purpose: Resolve %{field} placeholders in path and verb settings per event
# Inputs: Template string, Event
# Outputs: Resolved string
# Dependencies: json, re
# Usage: resolve_template("/users/%{[user][id]}", event)
#
# Changelog:
#   2026-09-02: Initial %{field} resolution
#   2026-09-09: Nested references, list and mapping formatting
# ============================================================================

import json
import re
from typing import Any

from FireSink.errors import TemplateError

PLACEHOLDER = re.compile(r"%\{([^{}]+)\}")


def has_placeholders(template: str) -> bool:
    return PLACEHOLDER.search(template) is not None


def format_value(value: Any) -> str:
    """
    Render a field value for substitution.

    Mappings become compact JSON, lists are joined with commas and booleans
    are lower-cased so templates read the same as the JSON input.
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, dict):
        return json.dumps(value, separators=(",", ":"), sort_keys=True)
    if isinstance(value, (list, tuple)):
        return ",".join(format_value(item) for item in value)
    return str(value)


def resolve_template(template: str, event: Any) -> str:
    """
    Substitute every ``%{field}`` in ``template`` with the event's value.

    Args:
        template: String with zero or more placeholders
        event: Object exposing ``get(ref)`` (None when absent)

    Returns:
        The resolved string (``template`` unchanged when it has no placeholders)

    Raises:
        TemplateError: If a referenced field is absent or null
    """
    if not has_placeholders(template):
        return template

    def _substitute(match: "re.Match[str]") -> str:
        reference = match.group(1).strip()
        value = event.get(reference)
        if value is None:
            raise TemplateError(
                f"Cannot resolve '%{{{reference}}}' in template '{template}'",
                field=reference,
            )
        return format_value(value)

    return PLACEHOLDER.sub(_substitute, template)
