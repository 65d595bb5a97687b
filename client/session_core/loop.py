"""
MainLoop — the single thread every piece of session state lives on.

Host-style event loop contract: after() schedules a
callback on the loop thread, call_soon() lets a worker thread hand a result
back, quit() ends run(). Worker threads never touch session state directly.
"""

import queue
import sched
import threading
import time

from .config import log
from .constants import IDLE_POLL_SEC, MIN_TIMER_MS


class MainLoop:

    def __init__(self, clock=time.monotonic):
        self._clock = clock
        self._sched = sched.scheduler(clock, time.sleep)
        self._inbox = queue.Queue()
        self._running = False
        # Until run() is called, the constructing thread owns the state.
        self._thread_id = threading.get_ident()

    # ─── Scheduling ──────────────────────────────────────────

    def after(self, ms, callback, *args):
        """Run callback(*args) on the loop thread after ``ms`` milliseconds."""
        delay = max(ms, MIN_TIMER_MS) / 1000.0
        return self._sched.enter(delay, 0, self._guarded, (callback, args))

    def cancel(self, handle):
        try:
            self._sched.cancel(handle)
        except ValueError:
            pass  # already ran

    def call_soon(self, callback, *args):
        """Thread-safe: queue callback(*args) for the loop thread."""
        self._inbox.put((callback, args))

    def call(self, callback, *args):
        """Run inline when already on the loop thread, otherwise queue it."""
        if self.on_loop_thread():
            return self._guarded(callback, args)
        self.call_soon(callback, *args)
        return None

    def on_loop_thread(self):
        return threading.get_ident() == self._thread_id

    # ─── Running ─────────────────────────────────────────────

    def run(self):
        """Block until quit(). Call from the thread that owns the session."""
        self._running = True
        self._thread_id = threading.get_ident()
        try:
            while self._running:
                delay = self._sched.run(blocking=False)
                self._drain_inbox(timeout=IDLE_POLL_SEC if delay is None else min(delay, IDLE_POLL_SEC))
        finally:
            self._running = False

    def run_pending(self):
        """Run due timers and queued callbacks once without blocking."""
        self._sched.run(blocking=False)
        self._drain_inbox(timeout=0)

    def quit(self):
        self._running = False

    @property
    def running(self):
        return self._running

    # ─── Internals ───────────────────────────────────────────

    def _drain_inbox(self, timeout):
        try:
            callback, args = self._inbox.get(timeout=timeout) if timeout > 0 else self._inbox.get_nowait()
        except queue.Empty:
            return
        self._guarded(callback, args)
        while True:
            try:
                callback, args = self._inbox.get_nowait()
            except queue.Empty:
                return
            self._guarded(callback, args)

    @staticmethod
    def _guarded(callback, args):
        try:
            return callback(*args)
        except Exception as e:
            log.error("Main loop callback %s failed: %s", getattr(callback, "__name__", callback), e, exc_info=True)
            return None
