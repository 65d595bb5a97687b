"""
Local snapshot files — the durable half of delivery.

One file per session-start minute, "<dd_mm_yy_HH_MM>_SessionLog.json", in
the persistent storage directory. A file exists from its first successful
write until an upload of it gets a 2xx; whatever is left over is picked up
by the sweeper on the next launch.
"""

from pathlib import Path

from .config import log
from .constants import SESSION_LOG_GLOB, SESSION_LOG_SUFFIX


def session_log_path(storage_dir, file_token):
    return Path(storage_dir) / f"{file_token}{SESSION_LOG_SUFFIX}"


def write_snapshot(path, json_text):
    """Write the snapshot file. Returns True on success."""
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json_text, encoding="utf-8")
        log.info("Session log saved locally to: %s", path)
        return True
    except OSError as e:
        log.error("Error writing session log file %s: %s", path, e)
        return False


def read_snapshot(path):
    """Read a snapshot file. Raises OSError / UnicodeDecodeError to the caller."""
    return Path(path).read_text(encoding="utf-8")


def delete_snapshot(path):
    """Remove a delivered snapshot. Returns True if the file is gone afterwards."""
    try:
        Path(path).unlink(missing_ok=True)
        log.info("Deleted successfully sent log file: %s", path)
        return True
    except OSError as e:
        log.error("Error deleting sent log file %s: %s", path, e)
        return False


def list_unsent(storage_dir, exclude_token=None):
    """
    Snapshot files left over from earlier sessions, oldest first.
    The file belonging to ``exclude_token`` (the running session) is skipped.
    """
    directory = Path(storage_dir)
    if not directory.is_dir():
        return []
    found = []
    for path in directory.glob(SESSION_LOG_GLOB):
        if exclude_token and path.name.startswith(exclude_token):
            continue
        if path.is_file():
            found.append(path)
    found.sort(key=_mtime)
    return found


def _mtime(path):
    try:
        return path.stat().st_mtime
    except OSError:
        return 0.0
