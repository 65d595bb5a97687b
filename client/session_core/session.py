"""
SessionAggregator — counts actions, stores custom events, collects log
entries and diagnostics, and tracks FPS extremes for one session.

Driven from the main loop only. Every validation problem is logged and the
call becomes a no-op; nothing here raises into the host.
"""

import time
from datetime import datetime, timezone

from .config import log
from .constants import (
    CUSTOM_EVENT_MESSAGE, EVENT_MESSAGE, FILE_TOKEN_FORMAT, FPS_NOISE_FLOOR,
    FPS_WINDOW_SIZE, SEVERITY_LOG, TRACED_SEVERITIES,
)
from .state import FpsData, LogEntry, SessionState


def utcnow():
    return datetime.now(timezone.utc)


class SessionAggregator:
    """Owns the mutable SessionState and its lifecycle."""

    def __init__(self, now=utcnow, monotonic=time.monotonic):
        self._now = now
        self._monotonic = monotonic
        self.state = SessionState()
        self.setup = None
        self.enabled = False

    # ── Lifecycle ─────────────────────────────────────────────

    def initialize(self, setup):
        """Start the session: zero every declared action, clear all stores."""
        if self.enabled:
            log.warning("SessionAggregator.initialize called twice — keeping the running session")
            return
        if setup is None:
            log.error("SessionAggregator: no setup — session logging disabled")
            return

        self.setup = setup
        started = self._now()
        state = self.state
        state.reset()
        state.app_name = setup.app_name
        state.app_version = setup.app_version
        state.bundle_version_code = setup.bundle_version_code or setup.app_version
        state.session_start = started.isoformat()
        state.start_monotonic = self._monotonic()
        state.file_token = started.strftime(FILE_TOKEN_FORMAT)
        for name in setup.action_names:
            state.action_counts[name] = 0

        self.enabled = True
        log.info(
            "Session started at %s (%d declared actions)",
            state.session_start, len(setup.action_names),
        )

    @property
    def action_names(self):
        return self.setup.action_names if self.setup else ()

    def duration_seconds(self):
        return self._monotonic() - self.state.start_monotonic

    def completed_actions(self):
        return sum(1 for name in self.action_names if self.state.action_counts.get(name, 0) > 0)

    # ── Explicit calls from the host ──────────────────────────

    def record_event(self, name):
        """Count a predefined action. Undeclared names are logged but not counted."""
        if not self.enabled:
            return
        counts = self.state.action_counts
        if name in counts:
            counts[name] += 1
        else:
            log.warning(
                "Logged event '%s' which is not in actionNames. It is kept in the log "
                "but not counted towards the completion percentage.", name,
            )
        self._append(name, EVENT_MESSAGE)

    def record_custom_event(self, name, value, overwrite=False):
        """Store name → value, keeping the first value unless overwrite is set."""
        if not self.enabled:
            return
        if not name:
            log.warning("record_custom_event called with an empty event name")
            return

        value = "" if value is None else str(value)
        events = self.state.custom_events
        if overwrite or name not in events:
            events[name] = value
            log.debug("Custom event %s = %s", name, value)
        else:
            log.debug(
                "Custom event '%s' already set to '%s' — pass overwrite=True to update",
                name, events[name],
            )
        self._append(f"{name} [{value}] overwrite:{overwrite}", CUSTOM_EVENT_MESSAGE)

    def record_log(self, entry_type, message):
        if not self.enabled:
            return
        if not entry_type:
            log.error("record_log: type cannot be empty")
            return
        if not message:
            log.error("record_log: message cannot be empty")
            return
        self._append(entry_type, message)

    # ── Host diagnostic channel ───────────────────────────────

    def capture_diagnostic(self, severity, text, trace=""):
        """
        First occurrence of each (severity, text) pair becomes a log entry.
        Plain informational messages are ignored.
        """
        if not self.enabled or severity == SEVERITY_LOG:
            return
        key = (severity, text)
        if key in self.state.seen_diagnostics:
            return
        self.state.seen_diagnostics.add(key)

        message = text
        if severity in TRACED_SEVERITIES:
            message = f"{text}\nStackTrace: {trace or ''}"
        self._append(severity, message)

    # ── FPS sampling ──────────────────────────────────────────

    def sample_fps(self, fps, viewpoint=None, scene=""):
        """
        Buffer one instantaneous FPS reading. Each full window updates the
        extremes, provided the host reported a viewpoint for it.
        """
        if not self.enabled:
            return
        state = self.state
        state.fps_buffer.append(float(fps))
        if len(state.fps_buffer) < FPS_WINDOW_SIZE:
            return

        avg = sum(state.fps_buffer) / len(state.fps_buffer)
        state.fps_buffer.clear()
        if viewpoint is None:
            return

        if avg > state.highest_avg_fps:
            state.highest_avg_fps = avg
            state.high_fps = FpsData(avg, viewpoint.position, viewpoint.rotation, scene)
        if FPS_NOISE_FLOOR < avg < state.lowest_avg_fps:
            state.lowest_avg_fps = avg
            state.low_fps = FpsData(avg, viewpoint.position, viewpoint.rotation, scene)

    # ── Internals ─────────────────────────────────────────────

    def _append(self, entry_type, message):
        self.state.logs.append(LogEntry(self._now().isoformat(), entry_type, message))
