"""
SessionLoggerApp — the composition root the host holds on to.

Everything that touches session state runs inside MainLoop via
loop.after() / loop.call(). Background threads: ONLY short-lived upload
workers, which hand their results back through loop.call().
"""

import signal
import time

from .config import log
from .constants import DEFAULT_QUIT_WAIT_SEC, FPS_SAMPLE_INTERVAL_SEC, SDK_VERSION
from .delivery import DeliveryPipeline, start_worker
from .loop import MainLoop
from .session import SessionAggregator, utcnow
from .shutdown import ShutdownCoordinator
from .sweeper import sweep_unsent_logs
from . import diagnostics
from . import http_client


class SessionLoggerApp:
    """
    Owns the main loop. Schedules everything via loop.after():
      _sample_fps()      — one FPS reading from the frame probe   (every 1s)
      _periodic_save()   — save_and_send()                        (every updateLogTime s)

    ``frame_probe`` is supplied by the host: a callable returning
    (fps, Viewpoint or None, scene_name), or None when no frame data exists.
    """

    def __init__(self, setup, frame_probe=None, loop=None, spawn=start_worker,
                 now=utcnow, monotonic=time.monotonic):
        self._setup = setup
        self._frame_probe = frame_probe
        self.loop = loop or MainLoop(clock=monotonic)
        self.session = SessionAggregator(now=now, monotonic=monotonic)
        self.pipeline = DeliveryPipeline(self.session, self.loop, spawn=spawn)
        self.shutdown = ShutdownCoordinator(
            self.pipeline, self.loop, self.request_exit,
            max_wait=setup.max_quit_wait if setup else DEFAULT_QUIT_WAIT_SEC,
            clock=monotonic,
        )
        self._fps_handle = None
        self._save_handle = None
        self._capture = None
        self._started = False

    @property
    def enabled(self):
        return self.session.enabled

    # ─── Lifecycle ───────────────────────────────────────────

    def start(self):
        """Begin the session: diagnostics hook, startup sweep, timers."""
        if self._started:
            return
        self._started = True

        self.session.initialize(self._setup)
        if not self.session.enabled:
            log.error("Session logger disabled — no usable configuration")
            return

        setup = self._setup
        self._capture = diagnostics.install(self.session, self.loop)

        if setup.send_to_server:
            sweep_unsent_logs(self.pipeline, self.session.state.file_token)

        if self._frame_probe is not None:
            self._fps_handle = self.loop.after(int(FPS_SAMPLE_INTERVAL_SEC * 1000), self._sample_fps)

        if setup.update_log_time > 0:
            log.info("Starting periodic save every %.0f seconds.", setup.update_log_time)
            self._save_handle = self.loop.after(int(setup.update_log_time * 1000), self._periodic_save)

        log.info(
            "v%s started (%s mode, save=%s, send=%s)",
            SDK_VERSION, setup.mode, setup.save_local, setup.send_to_server,
        )

    def run(self):
        """Start the session and block on the main loop until exit is allowed."""
        self.start()
        previous = self._install_signal_handlers()
        try:
            self.loop.run()
        finally:
            self._restore_signal_handlers(previous)
            self.teardown()

    def request_exit(self):
        """The host wants to exit. Quits the loop once the coordinator allows it."""
        if self.shutdown.wants_to_quit():
            log.info("Session logger shutting down.")
            self.loop.quit()

    def stop(self):
        """Quit immediately, without a final delivery attempt."""
        self.loop.quit()

    def teardown(self):
        for handle in (self._fps_handle, self._save_handle):
            if handle is not None:
                self.loop.cancel(handle)
        self._fps_handle = None
        self._save_handle = None
        self.shutdown.cancel()
        if self._capture is not None:
            diagnostics.uninstall(self._capture)
            self._capture = None
        http_client.http.close()
        log.info("SessionLoggerApp shut down.")

    # ─── Host entry points (safe from any thread) ────────────

    def record_event(self, name):
        self.loop.call(self.session.record_event, name)

    def record_custom_event(self, name, value, overwrite=False):
        self.loop.call(self.session.record_custom_event, name, value, overwrite)

    def record_log(self, entry_type, message):
        self.loop.call(self.session.record_log, entry_type, message)

    def save_and_send(self, on_complete=None):
        self.loop.call(self.pipeline.save_and_send, on_complete)

    def save_and_send_with_callback(self, on_complete):
        self.loop.call(self.pipeline.save_and_send_with_callback, on_complete)

    # ─── FPS sampling (every 1s) ─────────────────────────────

    def _sample_fps(self):
        try:
            sample = self._frame_probe()
            if sample is not None:
                fps, viewpoint, scene = sample
                self.session.sample_fps(fps, viewpoint, scene)
        except Exception as e:
            log.error("_sample_fps error: %s", e)
        self._fps_handle = self.loop.after(int(FPS_SAMPLE_INTERVAL_SEC * 1000), self._sample_fps)

    # ─── Periodic save (every updateLogTime s) ───────────────

    def _periodic_save(self):
        try:
            setup = self._setup
            if setup.save_local or setup.send_to_server:
                log.info("Performing periodic save.")
                self.pipeline.save_and_send()
        except Exception as e:
            log.error("_periodic_save error: %s", e, exc_info=True)
        self._save_handle = self.loop.after(int(self._setup.update_log_time * 1000), self._periodic_save)

    # ─── Signals ─────────────────────────────────────────────

    def _install_signal_handlers(self):
        previous = {}

        def on_signal(signum, frame):
            self.loop.call_soon(self.request_exit)

        for name in ("SIGINT", "SIGTERM"):
            signum = getattr(signal, name, None)
            if signum is None:
                continue
            try:
                previous[signum] = signal.signal(signum, on_signal)
            except ValueError:
                # Not on the main thread; the host drives request_exit itself.
                pass
        return previous

    @staticmethod
    def _restore_signal_handlers(previous):
        for signum, handler in previous.items():
            try:
                signal.signal(signum, handler)
            except ValueError:
                pass
