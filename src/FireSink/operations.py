# ============================================================================
# FireSink - Write Operations
#
# Purpose: The closed set of Firebase REST write semantics
# Inputs: Verb strings (put, patch, post, delete)
# Outputs: OperationKind members
# Dependencies: enum
# Usage: OperationKind.from_verb("patch") -> OperationKind.MERGE
#
# Changelog:
#   2026-09-02: Initial OperationKind enum
# ============================================================================

from enum import Enum

from FireSink.errors import InvalidOperationError


class OperationKind(Enum):
    """
    Write semantics at a database path.

    REPLACE  PUT     overwrite everything at the path
    MERGE    PATCH   update the given keys, leave the rest untouched
    APPEND   POST    add a child under a server-generated key
    DELETE   DELETE  remove everything at the path (payload ignored)
    """

    REPLACE = "put"
    MERGE = "patch"
    APPEND = "post"
    DELETE = "delete"

    @property
    def verb(self) -> str:
        return self.value

    @property
    def http_method(self) -> str:
        return self.value.upper()

    @property
    def sends_body(self) -> bool:
        return self is not OperationKind.DELETE

    @classmethod
    def from_verb(cls, verb: str) -> "OperationKind":
        """
        Map a verb to its operation. Matching is exact and case-sensitive.

        Raises:
            InvalidOperationError: If ``verb`` is not put, patch, post or delete
        """
        for kind in cls:
            if kind.value == verb:
                return kind
        raise InvalidOperationError(
            f"Expected verb to be one of {VERBS}, got '{verb}' instead",
            verb=verb,
        )


VERBS = [kind.value for kind in OperationKind]
