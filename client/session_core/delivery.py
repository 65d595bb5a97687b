"""
Delivery pipeline — save the snapshot locally, then upload it.

The upload is blocking and runs on a short-lived daemon thread. Its result
(file cleanup + completion callback) is handed back to the main loop, so
callbacks always run on the session's thread. Failures never raise: they
are logged, the local file stays for the next launch's sweep, and the
callback receives False.
"""

import threading

import requests

from .config import log
from .snapshot import serialize
from .storage import delete_snapshot, session_log_path, write_snapshot
from . import http_client


def start_worker(target):
    threading.Thread(target=target, daemon=True).start()


# ─── Upload ──────────────────────────────────────────────────────

def upload_snapshot(setup, json_text, retry=False):
    """POST one snapshot to the collector. Returns True on any 2xx."""
    label = " (retry)" if retry else ""
    auth = setup.auth_header
    headers = {auth[0]: auth[1]} if auth else None

    try:
        resp = http_client.post_json(
            setup.server_url, json_text, headers=headers, timeout=setup.request_timeout,
        )
    except requests.RequestException as e:
        log.warning("Failed to send session data%s: %s", label, e)
        return False

    if 200 <= resp.status_code < 300:
        log.info("Session data%s sent successfully to %s", label, setup.server_url)
        return True
    log.warning(
        "Failed to send session data%s: HTTP %d: %s",
        label, resp.status_code, (resp.text or "")[:200],
    )
    return False


# ─── Pipeline ────────────────────────────────────────────────────

class DeliveryPipeline:
    """
    save_and_send() may be triggered by the periodic timer, the host and the
    shutdown coordinator while an earlier upload is still in flight. Each
    attempt works on its own snapshot; same-minute attempts share one file.
    Every write of that file bumps its generation, and a 2xx only deletes the
    file when nothing newer has been written to it since the upload started.
    """

    def __init__(self, aggregator, loop, spawn=start_worker, uploader=upload_snapshot):
        self._aggregator = aggregator
        self._loop = loop
        self._spawn = spawn
        self._uploader = uploader
        self.in_flight = 0
        self._generations = {}

    @property
    def setup(self):
        return self._aggregator.setup

    @property
    def enabled(self):
        return self._aggregator.enabled

    def save_and_send(self, on_complete=None):
        if not self._aggregator.enabled:
            self._notify(on_complete, False)
            return

        setup = self.setup
        if not setup.save_local and not setup.send_to_server:
            log.info("Neither saving nor sending is enabled for this mode. Skipping.")
            self._notify(on_complete, False)
            return

        json_text, _, _ = serialize(self._aggregator)

        path = None
        saved = False
        if setup.save_local:
            path = session_log_path(setup.storage_path, self._aggregator.state.file_token)
            saved = write_snapshot(path, json_text)
            if saved:
                self._generations[path] = self._generations.get(path, 0) + 1
        else:
            log.debug("Local save disabled by configuration.")

        if not setup.send_to_server:
            self._notify(on_complete, saved)
            return

        if setup.save_local and not saved:
            log.warning("Upload skipped: the local save failed and sending requires it")
            self._notify(on_complete, False)
            return

        if not setup.server_url:
            log.error("Sending enabled, but serverUrl is not configured!")
            self._notify(on_complete, False)
            return

        self._send(json_text, path if saved else None, on_complete)

    def save_and_send_with_callback(self, on_complete):
        self.save_and_send(on_complete)

    def resend(self, path, json_text, on_complete=None):
        """Upload an already-saved snapshot file; delete it on success."""
        if not self.setup.server_url:
            log.error("Cannot resend %s: serverUrl is not configured", path)
            self._notify(on_complete, False)
            return
        self._send(json_text, path, on_complete, retry=True)

    # ─── Internals ───────────────────────────────────────────

    def _send(self, json_text, path, on_complete, retry=False):
        setup = self.setup
        self.in_flight += 1
        generation = self._generations.get(path, 0) if path is not None else None

        def work():
            ok = False
            try:
                ok = self._uploader(setup, json_text, retry)
            except Exception as e:
                log.error("Upload worker error: %s", e, exc_info=True)
            self._loop.call(self._on_sent, ok, path, generation, on_complete)

        self._spawn(work)

    def _on_sent(self, ok, path, generation, on_complete):
        self.in_flight -= 1
        if ok:
            if path is not None and self._generations.get(path, 0) == generation:
                delete_snapshot(path)
            elif path is not None:
                log.debug("Keeping %s: rewritten since this upload started", path)
        elif path is not None:
            log.warning("Log saved locally at %s. Will retry next launch.", path)
        else:
            log.warning("Session data was not saved locally and is lost.")
        self._notify(on_complete, ok)

    @staticmethod
    def _notify(on_complete, ok):
        if on_complete is None:
            return
        try:
            on_complete(ok)
        except Exception as e:
            log.error("Delivery callback failed: %s", e, exc_info=True)
