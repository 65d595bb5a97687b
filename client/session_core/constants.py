"""
Constants, thresholds, file naming and log-entry type names.
"""

SDK_VERSION = "1.2.0"

# ─── Timing ──────────────────────────────────────────────────────
FPS_SAMPLE_INTERVAL_SEC = 1.0  # One FPS sample per real-time second
FPS_WINDOW_SIZE = 10           # Samples averaged per window
FPS_NOISE_FLOOR = 1.0          # Windows at or below this are startup stalls
DEFAULT_QUIT_WAIT_SEC = 5.0    # Max time exit is delayed for the final upload
QUIT_MONITOR_POLL_MS = 100     # How often the shutdown monitor re-checks
IDLE_POLL_SEC = 0.25           # Main loop wait when no timer is due
MIN_TIMER_MS = 1               # Shortest delay MainLoop.after() accepts

# ─── Local storage ───────────────────────────────────────────────
# One file per session-start minute: "19_10_26_14_05_SessionLog.json".
# The sweeper finds leftovers with the same suffix.
FILE_TOKEN_FORMAT = "%d_%m_%y_%H_%M"
SESSION_LOG_SUFFIX = "_SessionLog.json"
SESSION_LOG_GLOB = "*" + SESSION_LOG_SUFFIX
LOG_FILE_NAME = "session_logger.log"
LOG_FILE_MAX_BYTES = 1_000_000

# ─── Log entry types / messages ──────────────────────────────────
EVENT_MESSAGE = "SessionEvent"
CUSTOM_EVENT_MESSAGE = "SessionCustomEvent"

# Diagnostic severities, named after the host's log channel.
SEVERITY_LOG = "Log"
SEVERITY_WARNING = "Warning"
SEVERITY_ASSERT = "Assert"
SEVERITY_ERROR = "Error"
SEVERITY_EXCEPTION = "Exception"
TRACED_SEVERITIES = frozenset({SEVERITY_ERROR, SEVERITY_EXCEPTION})

# ─── Config defaults ─────────────────────────────────────────────
DEFAULT_API_KEY_HEADER = "X-API-Key"
DEFAULT_ACTION_NAMES = (
    "Scene_00_Loaded",
    "Scene_01_Loaded",
    "TutorialCompleted",
    "ItemCollected",
    "TaskComplete",
)
MODE_EDITOR = "editor"
MODE_BUILD = "build"

# ─── Environment overrides ───────────────────────────────────────
ENV_MODE = "SESSIONLOG_MODE"
ENV_SERVER_URL = "SESSIONLOG_SERVER_URL"
ENV_API_KEY = "SESSIONLOG_API_KEY"
ENV_STORAGE_DIR = "SESSIONLOG_STORAGE_DIR"
