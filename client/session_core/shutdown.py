"""
ShutdownCoordinator — holds process exit back until the final upload
finishes, but never longer than the configured ceiling.

  IDLE ──first exit request──▶ QUITTING ──callback or timeout──▶ COMPLETED

While QUITTING every exit request is vetoed. On completion the
coordinator re-issues the exit request itself through ``terminate``.
Losing the final snapshot is preferred over hanging the process.
"""

import time

from .config import log
from .constants import DEFAULT_QUIT_WAIT_SEC, QUIT_MONITOR_POLL_MS

IDLE = "idle"
QUITTING = "quitting"
COMPLETED = "completed"


class ShutdownCoordinator:

    def __init__(self, pipeline, loop, terminate, max_wait=DEFAULT_QUIT_WAIT_SEC, clock=time.monotonic):
        self._pipeline = pipeline
        self._loop = loop
        self._terminate = terminate
        self._clock = clock
        self.max_wait = max_wait
        self.state = IDLE
        self.send_complete = False
        self.send_succeeded = None
        self._quit_started = 0.0
        self._monitor_handle = None
        self._deciding = False

    def waited(self):
        if self.state == IDLE:
            return 0.0
        return self._clock() - self._quit_started

    def wants_to_quit(self) -> bool:
        """The host's "about to exit" hook. False vetoes this exit attempt."""
        if self.state != IDLE:
            return self._exit_allowed()

        self.state = QUITTING
        self._quit_started = self._clock()
        setup = self._pipeline.setup

        if self._pipeline.enabled and setup.send_to_server:
            log.info("Application is quitting. Sending logs before exit...")
            self._deciding = True
            try:
                self._pipeline.save_and_send_with_callback(self._on_send_complete)
            finally:
                self._deciding = False
            if self.state == COMPLETED:
                return True
            log.info("Waiting up to %.1f seconds for logs to be sent...", self.max_wait)
            self._monitor_handle = self._loop.after(QUIT_MONITOR_POLL_MS, self._monitor)
            return False

        if self._pipeline.enabled and setup.save_local:
            self._pipeline.save_and_send()
        self.state = COMPLETED
        return True

    def cancel(self):
        if self._monitor_handle is not None:
            self._loop.cancel(self._monitor_handle)
            self._monitor_handle = None

    # ─── Internals ───────────────────────────────────────────

    def _exit_allowed(self):
        if self.state == COMPLETED:
            return True
        waited = self.waited()
        if self.send_complete or waited >= self.max_wait:
            if self.send_complete:
                log.info("Allowing application to quit. Log sending completed.")
            else:
                log.info("Allowing application to quit. Log sending timed out after %.1f seconds.", waited)
            self.state = COMPLETED
            self.cancel()
            return True
        return False

    def _on_send_complete(self, success):
        self.send_complete = True
        self.send_succeeded = success
        log.info("Log sending completed with status: %s", "Success" if success else "Failed")
        if self.state != QUITTING:
            return
        self.state = COMPLETED
        self.cancel()
        if self._deciding:
            return  # wants_to_quit() is still on the stack and will answer True
        self._loop.call_soon(self._terminate)

    def _monitor(self):
        self._monitor_handle = None
        if self.state != QUITTING:
            return
        if self.waited() >= self.max_wait:
            log.warning(
                "Log sending timed out after %.1f seconds. Proceeding with application quit.",
                self.max_wait,
            )
            self.state = COMPLETED
            self._loop.call_soon(self._terminate)
            return
        self._monitor_handle = self._loop.after(QUIT_MONITOR_POLL_MS, self._monitor)
