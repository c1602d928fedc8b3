# ============================================================================
# FireSink - Package Initialization
#
# Purpose: Package-level exports and version information
# Inputs: None
# Outputs: Public API exports
# Dependencies: None
# Usage: from FireSink import FirebaseSink, Config
#
# Changelog:
#   2026-09-02: Initial package setup
# ============================================================================

__version__ = "0.1.0"
__license__ = "Apache-2.0"

from FireSink.client import FirebaseClient, WriteResult, setup_client, shutdown_client
from FireSink.config import Config, FirebaseOutputConfig
from FireSink.dispatcher import EventDispatcher, ResolvedWrite
from FireSink.events import SHUTDOWN, Event
from FireSink.operations import OperationKind
from FireSink.sinks.base import Sink
from FireSink.sinks.firebase_sink import FirebaseSink

__all__ = [
    "__version__",
    "Config",
    "FirebaseOutputConfig",
    "FirebaseClient",
    "WriteResult",
    "setup_client",
    "shutdown_client",
    "EventDispatcher",
    "ResolvedWrite",
    "Event",
    "SHUTDOWN",
    "OperationKind",
    "Sink",
    "FirebaseSink",
]
