"""
session_core — Session Telemetry Logger v1.2
============================================
Architecture: one main-loop thread owns all session state. Zero locks.

  constants.py    → Version, sampling window, file naming, log types
  config.py       → Paths, logging, LoggerSetup load/save
  state.py        → SessionState dataclass (single source of truth)
  session.py      → SessionAggregator (events, custom events, logs, FPS)
  snapshot.py     → SessionSnapshot JSON projection
  storage.py      → Local snapshot files (write, read, delete, list)
  http_client.py  → HTTP session with retry/pooling
  delivery.py     → DeliveryPipeline (save → upload → cleanup)
  sweeper.py      → Startup resend of undelivered snapshot files
  shutdown.py     → ShutdownCoordinator (bounded wait on exit)
  diagnostics.py  → logging.Handler feeding warnings/errors into the session
  loop.py         → MainLoop (after/call_soon scheduling)
  senders.py      → EventSender / CustomEventSender / LogSender helpers
  app.py          → SessionLoggerApp (composition root)
  runner.py       → main()
"""

from .constants import SDK_VERSION
from .config import LoggerSetup, ModeConfig, load_setup
from .state import Quaternion, Vector3, Viewpoint
from .app import SessionLoggerApp
from .senders import CustomEventSender, EventSender, LogSender

__version__ = SDK_VERSION

__all__ = [
    "LoggerSetup",
    "ModeConfig",
    "load_setup",
    "Quaternion",
    "Vector3",
    "Viewpoint",
    "SessionLoggerApp",
    "EventSender",
    "CustomEventSender",
    "LogSender",
]
