"""
Entry point: load the setup, configure logging, run a session until exit.

A host embedding the logger builds SessionLoggerApp itself; this runner is
the standalone form (no frame probe) used for headless tools and smoke runs.
"""

import argparse
import sys

from .constants import MODE_BUILD, MODE_EDITOR, SDK_VERSION
from .config import configure_logging, load_setup, log, persistent_data_path, safe_print
from .app import SessionLoggerApp

DEFAULT_CONFIG_FILE = "session_logger.json"


def build_parser():
    parser = argparse.ArgumentParser(
        prog="session-logger",
        description="Record a telemetry session and deliver it on exit.",
    )
    parser.add_argument(
        "config", nargs="?", default=DEFAULT_CONFIG_FILE,
        help=f"logger config JSON (default: {DEFAULT_CONFIG_FILE})",
    )
    parser.add_argument(
        "--mode", choices=(MODE_EDITOR, MODE_BUILD), default=None,
        help="which save/send settings to use (default: $SESSIONLOG_MODE or build)",
    )
    return parser


def main(argv=None):
    """Primary entry point. Returns the process exit code."""
    args = build_parser().parse_args(argv)
    safe_print("Session Logger v" + SDK_VERSION)

    setup = load_setup(args.config, mode=args.mode)
    configure_logging(setup.storage_path if setup else persistent_data_path(None))
    if setup is None:
        safe_print("No usable config — nothing to record.")
        return 1

    app = SessionLoggerApp(setup)
    safe_print("Recording. Press Ctrl+C to finish the session.\n")
    try:
        app.run()
    except KeyboardInterrupt:
        log.info("Session logger stopped by user (Ctrl+C)")
    return 0


if __name__ == "__main__":
    sys.exit(main())
