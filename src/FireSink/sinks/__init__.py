# ============================================================================
# FireSink - Sinks Package
#
# Purpose: Output adapters driven by a host pipeline
# Inputs: None
# Outputs: Public API exports
# Dependencies: None
# Usage: from FireSink.sinks import Sink, FirebaseSink
#
# Changelog:
#   2026-09-05: Initial sinks package
# ============================================================================

from FireSink.sinks.base import Sink
from FireSink.sinks.firebase_sink import FirebaseSink

__all__ = ["Sink", "FirebaseSink"]
