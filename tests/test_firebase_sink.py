# ============================================================================
# FireSink - Firebase Sink Tests
#
# Purpose: Test the start/handle/stop lifecycle end to end against a mock session
# Inputs: Output configs, synthetic events
# Outputs: Test pass/fail
# Dependencies: pytest, requests (mocked), FireSink
# Usage: pytest tests/test_firebase_sink.py -v
#
# Changelog:
#   2026-09-06: Initial sink lifecycle tests
# ============================================================================

import json
import logging

import pytest
from conftest import make_response, make_session

from FireSink.config import FirebaseOutputConfig
from FireSink.errors import FireSinkError, SetupError
from FireSink.events import SHUTDOWN
from FireSink.sinks import FirebaseSink, Sink


class TestFirebaseSink:
    def test_is_a_sink(self):
        assert isinstance(FirebaseSink(), Sink)

    def test_end_to_end_put(self, make_config, mock_session):
        sink = FirebaseSink(session=mock_session)
        sink.start(make_config(secret="s3cr3t"))

        write = sink.handle({"foo": 1})
        sink.stop()

        assert write.path == "/a/b"
        method, url = mock_session.request.call_args.args
        kwargs = mock_session.request.call_args.kwargs
        assert method == "PUT"
        assert url == "https://x.io/a/b.json"
        assert json.loads(kwargs["data"]) == {"foo": 1}
        assert kwargs["params"]["auth"].count(".") == 2
        mock_session.close.assert_called_once()

    def test_end_to_end_templated(self, make_config, mock_session):
        sink = FirebaseSink(session=mock_session)
        sink.start(make_config(path="%{p}", verb="%{v}", target="data"))

        sink.handle({"p": "/x", "v": "patch", "data": {"k": 5}, "other": 9})

        method, url = mock_session.request.call_args.args
        assert method == "PATCH"
        assert url == "https://x.io/x.json"
        assert json.loads(mock_session.request.call_args.kwargs["data"]) == {"k": 5}

    def test_rejected_event_makes_no_request(self, make_config, mock_session):
        sink = FirebaseSink(session=mock_session)
        sink.start(make_config(path="not a valid uri!!"))
        assert sink.handle({"foo": 1}) is None
        mock_session.request.assert_not_called()

    def test_remote_failure_is_logged_not_raised(self, make_config, caplog):
        session = make_session(make_response(401, {"error": "Permission denied"}, reason="Unauthorized"))
        sink = FirebaseSink(session=session)
        sink.start(make_config())

        with caplog.at_level(logging.ERROR):
            write = sink.handle({"foo": 1})

        assert write is not None
        messages = [r.getMessage() for r in caplog.records if r.levelno == logging.ERROR]
        assert any("Error while writing to Firebase" in m for m in messages)

    def test_handle_batch_counts_dispatched(self, make_config, mock_session):
        sink = FirebaseSink(session=mock_session)
        sink.start(make_config(verb="%{v}"))
        sent = sink.handle_batch([{"v": "put"}, {"v": "nope"}, SHUTDOWN, {"v": "post"}])
        assert sent == 2
        assert mock_session.request.call_count == 2

    def test_handle_before_start_raises(self):
        with pytest.raises(FireSinkError):
            FirebaseSink().handle({"foo": 1})

    def test_handle_after_stop_raises(self, make_config, mock_session):
        sink = FirebaseSink(session=mock_session)
        sink.start(make_config())
        sink.stop()
        assert not sink.running
        with pytest.raises(FireSinkError):
            sink.handle({"foo": 1})

    def test_double_start_raises(self, make_config, mock_session):
        sink = FirebaseSink(session=mock_session)
        sink.start(make_config())
        with pytest.raises(FireSinkError):
            sink.start(make_config())

    def test_stop_is_idempotent(self, make_config, mock_session):
        sink = FirebaseSink(session=mock_session)
        sink.start(make_config(secret="s3cr3t"))
        sink.stop()
        sink.stop()
        mock_session.close.assert_called_once()
        assert sink.client.auth is None

    def test_stop_without_start(self):
        FirebaseSink().stop()

    def test_setup_failure_is_fatal(self, mock_session):
        config = FirebaseOutputConfig.model_construct(url="not a url", path="/a")
        sink = FirebaseSink(session=mock_session)
        with pytest.raises(SetupError):
            sink.start(config)
        assert not sink.running
