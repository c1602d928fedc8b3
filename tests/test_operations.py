# ============================================================================
# FireSink - Operation Tests
#
# Purpose: Test verb -> OperationKind mapping
# Inputs: None
# Outputs: Test pass/fail
# Dependencies: pytest, FireSink
# Usage: pytest tests/test_operations.py -v
#
# Changelog:
#   2026-09-05: Initial operation tests
# ============================================================================

import pytest

from FireSink.errors import InvalidOperationError
from FireSink.operations import VERBS, OperationKind


class TestOperationKind:
    @pytest.mark.parametrize(
        "verb,kind,method",
        [
            ("put", OperationKind.REPLACE, "PUT"),
            ("patch", OperationKind.MERGE, "PATCH"),
            ("post", OperationKind.APPEND, "POST"),
            ("delete", OperationKind.DELETE, "DELETE"),
        ],
    )
    def test_from_verb(self, verb, kind, method):
        assert OperationKind.from_verb(verb) is kind
        assert kind.http_method == method
        assert kind.verb == verb

    @pytest.mark.parametrize("verb", ["PUT", "get", "upsert", "", " put"])
    def test_unknown_verbs_rejected(self, verb):
        with pytest.raises(InvalidOperationError) as exc_info:
            OperationKind.from_verb(verb)
        assert exc_info.value.verb == verb

    def test_only_delete_has_no_body(self):
        assert [kind for kind in OperationKind if not kind.sends_body] == [OperationKind.DELETE]

    def test_verbs_list(self):
        assert sorted(VERBS) == ["delete", "patch", "post", "put"]
