"""
Startup sweep — resubmit snapshot files earlier sessions could not deliver.

Runs once, before the main loop starts, and only when sending is enabled.
A file that cannot be read or is not JSON is logged and skipped (and left on
disk); the rest are still sent.
"""

import json

from .config import log
from .storage import list_unsent, read_snapshot


def sweep_unsent_logs(pipeline, current_token):
    """
    Queue one upload per leftover snapshot file. Each file is deleted when
    its upload gets a 2xx and left untouched otherwise.
    Returns the number of files submitted.
    """
    setup = pipeline.setup
    if setup is None or not setup.send_to_server:
        return 0

    try:
        candidates = list_unsent(setup.storage_path, exclude_token=current_token)
    except OSError as e:
        log.error("Error scanning for unsent logs: %s", e)
        return 0

    submitted = 0
    for path in candidates:
        try:
            json_text = read_snapshot(path)
            json.loads(json_text)
        except (OSError, ValueError) as e:
            log.error("Error reading previous log file %s: %s", path, e)
            continue
        log.info("Found previous unsent log file: %s. Attempting to send.", path)
        pipeline.resend(path, json_text)
        submitted += 1

    if submitted:
        log.info("Resubmitting %d unsent session log(s)", submitted)
    return submitted
