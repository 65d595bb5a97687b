"""
Session Telemetry Logger — standalone runner
============================================
Records one telemetry session and delivers it to the collector on exit.
Leftover snapshots from earlier runs are resent at startup.

Usage:
    python session_logger.py [config.json] [--mode editor|build]
"""

import sys

from session_core.runner import main

if __name__ == "__main__":
    sys.exit(main())
