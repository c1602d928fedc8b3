# ============================================================================
# FireSink - Relative URI Validation
#
# Purpose: Check that a resolved path is a syntactically valid relative
#          reference (RFC 3986 relative-ref) before it is sent anywhere
# Inputs: Path strings
# Outputs: bool
# Dependencies: re
# Usage: is_database_path("/users/42") -> True
#
# Changelog:
#   2026-09-02: Initial relative-ref grammar
#   2026-10-19: is_database_path rejects authority, fragment, empty path and dot segments
# ============================================================================

import re

_PCT = r"%[0-9A-Fa-f]{2}"
_UNRESERVED = r"A-Za-z0-9\-._~"
_SUB_DELIMS = r"!$&'()*+,;="

_PCHAR = rf"(?:[{_UNRESERVED}{_SUB_DELIMS}:@]|{_PCT})"
# First segment of a scheme-less path may not contain ':'
_PCHAR_NC = rf"(?:[{_UNRESERVED}{_SUB_DELIMS}@]|{_PCT})"

_SEGMENT = rf"{_PCHAR}*"
_PATH_ABEMPTY = rf"(?:/{_SEGMENT})*"
_PATH_ABSOLUTE = rf"/(?:{_PCHAR}+(?:/{_SEGMENT})*)?"
_PATH_NOSCHEME = rf"{_PCHAR_NC}+(?:/{_SEGMENT})*"
_AUTHORITY = rf"(?:[{_UNRESERVED}{_SUB_DELIMS}:@\[\]]|{_PCT})*"

_RELATIVE_PART = rf"(?://{_AUTHORITY}{_PATH_ABEMPTY}|{_PATH_ABSOLUTE}|{_PATH_NOSCHEME})?"
_QUERY = rf"(?:{_PCHAR}|[/?])*"

RELATIVE_REF = re.compile(rf"{_RELATIVE_PART}(?:\?{_QUERY})?(?:#{_QUERY})?")


def is_relative_reference(value: str) -> bool:
    """
    True when ``value`` is a non-empty relative reference.

    The grammar admits an empty string; it is rejected here because every
    write needs a location.
    """
    if not value:
        return False
    return RELATIVE_REF.fullmatch(value) is not None


def is_database_path(value: str) -> bool:
    """
    True when ``value`` names exactly one location under the database root.

    On top of the relative-reference grammar this rejects an authority
    (``//host/path``), a fragment, an empty path (``?x=1``) and ``.``/``..``
    segments. The REST URL would silently drop or rewrite each of them.
    """
    if not is_relative_reference(value):
        return False
    if value.startswith("//") or "#" in value:
        return False
    path = value.split("?", 1)[0]
    if not path:
        return False
    return not any(segment in (".", "..") for segment in path.split("/"))
