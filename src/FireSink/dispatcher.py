# ============================================================================
# FireSink - Event Dispatcher
#
# Purpose: Turn one event into one validated write (path, operation, payload)
#          and hand it to the Firebase client, or reject it with a logged error
# Inputs: Event, FirebaseOutputConfig, FirebaseClient
# Outputs: ResolvedWrite (or None when the event was skipped/rejected)
# Dependencies: events, templating, operations, uri, client
# Usage: EventDispatcher(config.output, client).dispatch(event)
#
# Changelog:
#   2026-09-05: Initial dispatcher
#   2026-09-09: target accepts nested field references
#   2026-09-21: Structured log context (url, verb, path, error) on every error
# ============================================================================

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Union

from FireSink.client import FirebaseClient, WriteResult
from FireSink.config import FirebaseOutputConfig
from FireSink.errors import FireSinkError, InvalidOperationError, InvalidPathError, TemplateError
from FireSink.events import SHUTDOWN, Event
from FireSink.logging_utils import get_logger, log_context
from FireSink.operations import OperationKind
from FireSink.uri import is_database_path

logger = get_logger(__name__)


@dataclass(frozen=True)
class ResolvedWrite:
    """One write derived from one event. Never retained after dispatch."""

    path: str
    operation: OperationKind
    payload: Any

    def to_dict(self) -> dict:
        return {"path": self.path, "verb": self.operation.verb, "payload": self.payload}


class EventDispatcher:
    """
    Stateless per-event router.

    Every ``dispatch`` call is independent, so one dispatcher can be shared
    by concurrent pipeline workers together with the shared client.
    """

    def __init__(self, config: FirebaseOutputConfig, client: Optional[FirebaseClient] = None):
        """
        Args:
            config: Output settings
            client: Shared client; may be None when only ``resolve`` is used (dry runs)
        """
        self.config = config
        self.client = client

    def resolve_path(self, event: Event) -> str:
        try:
            path = event.sprintf(self.config.path)
        except TemplateError as e:
            raise InvalidPathError(
                f"Expected valid path, but template '{self.config.path}' could not be resolved",
                path=self.config.path,
                details=str(e),
            ) from e
        if not is_database_path(path):
            raise InvalidPathError(f"Expected valid path, but got '{path}' instead", path=path)
        return path

    def resolve_operation(self, event: Event) -> OperationKind:
        try:
            verb = event.sprintf(self.config.verb)
        except TemplateError as e:
            raise InvalidOperationError(
                f"Expected a verb, but template '{self.config.verb}' could not be resolved",
                verb=self.config.verb,
                details=str(e),
            ) from e
        return OperationKind.from_verb(verb)

    def extract_payload(self, event: Event, operation: OperationKind) -> Any:
        """
        Payload for ``operation``.

        DELETE sends nothing. A configured but missing target also sends an
        empty payload instead of falling back to the whole event.
        """
        if operation is OperationKind.DELETE:
            return {}
        target = self.config.target
        if target is None:
            return event.to_dict()
        if event.includes(target):
            return event.get(target)
        return {}

    def resolve(self, event: Union[Event, Mapping[str, Any]]) -> ResolvedWrite:
        """
        Resolve path, operation and payload without writing anything.

        Raises:
            InvalidPathError: Path template unresolved or not a relative reference
            InvalidOperationError: Verb template unresolved or not put/patch/post/delete
        """
        event = Event.coerce(event)
        path = self.resolve_path(event)
        operation = self.resolve_operation(event)
        return ResolvedWrite(path=path, operation=operation, payload=self.extract_payload(event, operation))

    def dispatch(self, event: Union[Event, Mapping[str, Any], object]) -> Optional[ResolvedWrite]:
        """
        Validate and send one event.

        Returns the write handed to the client, or None when the event was the
        shutdown sentinel or got rejected. Rejections are logged, never raised.
        """
        if event is SHUTDOWN:
            return None

        try:
            write = self.resolve(event)  # type: ignore[arg-type]
        except InvalidPathError as e:
            logger.error(
                e.message,
                extra=log_context(
                    url=self.config.url,
                    verb=self.config.verb,
                    path=e.path,
                    error=e.details or type(e).__name__,
                ),
            )
            return None
        except InvalidOperationError as e:
            logger.error(
                e.message,
                extra=log_context(
                    url=self.config.url,
                    verb=e.verb,
                    path=self.config.path,
                    error=e.details or type(e).__name__,
                ),
            )
            return None

        if self.client is None:
            raise FireSinkError("EventDispatcher has no client; only resolve() is available")

        logger.debug(
            "Sinking to Firebase",
            extra=log_context(url=self.config.url, verb=write.operation.verb, path=write.path),
        )
        self.client.write(write.path, write.operation, write.payload, on_complete=self._on_complete)
        return write

    def _on_complete(self, result: WriteResult) -> None:
        # May run on a client worker thread
        if result.ok:
            return
        logger.error(
            f"Error while writing to Firebase: {result.error}",
            extra=log_context(
                url=self.config.url,
                verb=result.operation.verb,
                path=result.path,
                error=type(result.error).__name__,
            ),
        )
