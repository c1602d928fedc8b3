# ============================================================================
# FireSink - Base Sink Interface
#
# Purpose: Lifecycle interface for output adapters driven by a host pipeline
# Inputs: Output configuration, events
# Outputs: None (side effects in the remote store)
# Dependencies: abc
# Usage: class MySink(Sink): ...
#
# Changelog:
#   2026-09-05: Initial Sink interface (start / handle / stop)
#   2026-09-24: handle_batch() default for hosts that deliver event batches
# ============================================================================

from abc import ABC, abstractmethod
from typing import Any, Iterable


class Sink(ABC):
    """
    Abstract base class for event output sinks.

    The host calls ``start`` once, then ``handle`` for every event (possibly
    from several threads), then ``stop`` once.
    """

    @abstractmethod
    def start(self, config: Any) -> None:
        """
        Acquire remote resources.

        Raises:
            SetupError: If the sink cannot start; the host must not deliver events
        """
        pass

    @abstractmethod
    def handle(self, event: Any) -> Any:
        """
        Forward one event. Per-event failures are logged, not raised.
        """
        pass

    def handle_batch(self, events: Iterable[Any]) -> int:
        """
        Forward a batch of events one by one.

        Returns:
            Number of events handed to the remote store
        """
        sent = 0
        for event in events:
            if self.handle(event) is not None:
                sent += 1
        return sent

    @abstractmethod
    def stop(self) -> None:
        """Release remote resources. Must be safe to call more than once."""
        pass
