# ============================================================================
# FireSink - Firebase Sink
#
# Purpose: Output adapter that writes pipeline events to a Firebase realtime
#          database with put / patch / post / delete semantics
# Inputs: FirebaseOutputConfig, events
# Outputs: Firebase REST writes
# Dependencies: client, dispatcher, base
# Usage: sink = FirebaseSink(); sink.start(config.output); sink.handle(event); sink.stop()
#
# Changelog:
#   2026-09-05: Initial FirebaseSink
#   2026-09-24: Guard handle() outside of start/stop
# ============================================================================

from typing import Any, Callable, Optional

import requests

from FireSink.client import FirebaseClient, setup_client, shutdown_client
from FireSink.config import FirebaseOutputConfig
from FireSink.dispatcher import EventDispatcher, ResolvedWrite
from FireSink.errors import FireSinkError
from FireSink.logging_utils import get_logger, log_context
from FireSink.sinks.base import Sink

logger = get_logger(__name__)


class FirebaseSink(Sink):
    """
    Sink that forwards each event to Firebase.

    Examples of the settings it accepts (see FirebaseOutputConfig):

        url: https://test.firebaseio.com
        secret: s3cr3t
        path: "%{path}"           # static "/my-path" works too
        verb: "%{verb}"           # put (default), patch, post, delete
        target: data              # send only the event's "data" field
    """

    def __init__(
        self,
        *,
        session: Optional[requests.Session] = None,
        clock: Optional[Callable[[], float]] = None,
    ):
        self._session = session
        self._clock = clock
        self.config: Optional[FirebaseOutputConfig] = None
        self.client: Optional[FirebaseClient] = None
        self.dispatcher: Optional[EventDispatcher] = None
        self._stopped = False

    @property
    def running(self) -> bool:
        return self.dispatcher is not None and not self._stopped

    def start(self, config: FirebaseOutputConfig) -> None:
        if self.client is not None:
            raise FireSinkError("FirebaseSink already started")
        logger.info("Registering firebase output", extra=log_context(url=config.url))
        self.config = config
        self.client = setup_client(config, session=self._session, clock=self._clock)
        self.dispatcher = EventDispatcher(config, self.client)

    def handle(self, event: Any) -> Optional[ResolvedWrite]:
        dispatcher = self.dispatcher
        if dispatcher is None or self._stopped:
            raise FireSinkError("FirebaseSink is not running; call start() first and do not use it after stop()")
        return dispatcher.dispatch(event)

    def stop(self) -> None:
        if self._stopped or self.client is None:
            self._stopped = True
            return
        self._stopped = True
        shutdown_client(self.client)
        logger.info("Firebase output stopped", extra=log_context(url=self.client.url))
