"""
Paths, logging, config load/save, safe_print.

The logger reads its settings once at startup from a JSON file with the
same camelCase keys as the setup asset it replaces. Everything after that
reads the frozen LoggerSetup.
"""

import os
import sys
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from .constants import (
    DEFAULT_ACTION_NAMES, DEFAULT_API_KEY_HEADER, DEFAULT_QUIT_WAIT_SEC,
    ENV_API_KEY, ENV_MODE, ENV_SERVER_URL, ENV_STORAGE_DIR,
    LOG_FILE_MAX_BYTES, LOG_FILE_NAME, MIN_TIMER_MS, MODE_BUILD, MODE_EDITOR,
)

log = logging.getLogger("sessionlog")

_LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"


class ConfigError(ValueError):
    """Raised for a configuration file that cannot be interpreted."""


# ─── Paths ───────────────────────────────────────────────────────

def persistent_data_path(app_name):
    """
    Per-user writable directory for this app, the equivalent of an
    engine's persistent data path. Not created here.
    """
    folder = app_name or "SessionLogger"
    if sys.platform == "win32":
        base = Path(os.environ.get("LOCALAPPDATA") or Path.home() / "AppData" / "Local")
    elif sys.platform == "darwin":
        base = Path.home() / "Library" / "Application Support"
    else:
        base = Path(os.environ.get("XDG_DATA_HOME") or Path.home() / ".local" / "share")
    return base / folder


# ─── Safe print (no crash when there is no console) ──────────────

def safe_print(*args, **kwargs):
    try:
        print(*args, **kwargs)
    except Exception:
        pass


# ─── Logging ─────────────────────────────────────────────────────

def configure_logging(log_dir, level=logging.INFO):
    """
    File + console logging for the package logger.
    The log file is truncated once it grows past LOG_FILE_MAX_BYTES.
    """
    log_file = Path(log_dir) / LOG_FILE_NAME
    try:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        if log_file.exists() and log_file.stat().st_size > LOG_FILE_MAX_BYTES:
            log_file.write_text("")
    except OSError:
        pass

    formatter = logging.Formatter(_LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
    log.setLevel(level)

    try:
        file_handler = logging.FileHandler(str(log_file), encoding="utf-8")
        file_handler.setFormatter(formatter)
        log.addHandler(file_handler)
    except OSError as e:
        safe_print(f"Could not open log file {log_file}: {e}")

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    log.addHandler(console_handler)
    return log


# ─── Setup model ─────────────────────────────────────────────────

@dataclass(frozen=True)
class ModeConfig:
    save_local_json: bool = True
    send_to_server: bool = False


def _default_editor():
    return ModeConfig(save_local_json=True, send_to_server=False)


def _default_build():
    return ModeConfig(save_local_json=True, send_to_server=True)


@dataclass(frozen=True)
class LoggerSetup:
    """Immutable logger settings, resolved once at startup."""

    editor_config: ModeConfig = field(default_factory=_default_editor)
    build_config: ModeConfig = field(default_factory=_default_build)
    server_url: str = ""
    api_key: str = ""
    api_key_header: str = DEFAULT_API_KEY_HEADER
    action_names: tuple = DEFAULT_ACTION_NAMES
    update_log_time: float = 0.0
    max_quit_wait: float = DEFAULT_QUIT_WAIT_SEC
    request_timeout: Optional[float] = None
    app_name: str = "SessionLogger"
    app_version: str = "0.0.0"
    bundle_version_code: str = ""
    storage_dir: Optional[str] = None
    mode: str = MODE_BUILD

    @property
    def mode_config(self) -> ModeConfig:
        return self.editor_config if self.mode == MODE_EDITOR else self.build_config

    @property
    def save_local(self) -> bool:
        return self.mode_config.save_local_json

    @property
    def send_to_server(self) -> bool:
        return self.mode_config.send_to_server

    @property
    def storage_path(self) -> Path:
        if self.storage_dir:
            return Path(self.storage_dir).expanduser()
        return persistent_data_path(self.app_name)

    @property
    def auth_header(self):
        """(name, value) when both are configured, else None."""
        if self.api_key and self.api_key_header:
            return self.api_key_header, self.api_key
        return None

    @classmethod
    def from_dict(cls, data, mode=None, env=None):
        """
        Build a setup from the JSON config dict.

        ``mode`` defaults to $SESSIONLOG_MODE, then "build". Environment
        overrides are read from ``env`` (os.environ by default).
        """
        if not isinstance(data, dict):
            raise ConfigError("config root must be a JSON object")
        env = os.environ if env is None else env

        mode = (mode or env.get(ENV_MODE) or MODE_BUILD).strip().lower()
        if mode not in (MODE_EDITOR, MODE_BUILD):
            raise ConfigError(f"unknown mode {mode!r} (expected 'editor' or 'build')")

        version = _str(data, "appVersion", "0.0.0")
        setup = cls(
            editor_config=_mode(data, "editorConfig", _default_editor()),
            build_config=_mode(data, "buildConfig", _default_build()),
            server_url=env.get(ENV_SERVER_URL) or _str(data, "serverUrl", ""),
            api_key=env.get(ENV_API_KEY) or _str(data, "serverApiKey", ""),
            api_key_header=_str(data, "serverApiKeyHeader", DEFAULT_API_KEY_HEADER),
            action_names=_action_names(data.get("actionNames", list(DEFAULT_ACTION_NAMES))),
            update_log_time=_interval(data, "updateLogTime"),
            max_quit_wait=_number(data, "maxQuitWaitTime", DEFAULT_QUIT_WAIT_SEC),
            request_timeout=_number(data, "requestTimeoutSec", None),
            app_name=_str(data, "appName", "SessionLogger"),
            app_version=version,
            bundle_version_code=_str(data, "bundleVersionCode", version),
            storage_dir=env.get(ENV_STORAGE_DIR) or data.get("storageDir") or None,
            mode=mode,
        )
        return setup

    def to_dict(self):
        return {
            "editorConfig": _mode_dict(self.editor_config),
            "buildConfig": _mode_dict(self.build_config),
            "serverUrl": self.server_url,
            "serverApiKey": self.api_key,
            "serverApiKeyHeader": self.api_key_header,
            "actionNames": list(self.action_names),
            "updateLogTime": self.update_log_time,
            "maxQuitWaitTime": self.max_quit_wait,
            "requestTimeoutSec": self.request_timeout,
            "appName": self.app_name,
            "appVersion": self.app_version,
            "bundleVersionCode": self.bundle_version_code,
            "storageDir": self.storage_dir,
        }


# ─── Field helpers ───────────────────────────────────────────────

def _str(data, key, default):
    value = data.get(key, default)
    if value is None:
        return default
    if not isinstance(value, str):
        raise ConfigError(f"{key} must be a string")
    return value


def _number(data, key, default):
    value = data.get(key, default)
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigError(f"{key} must be a number")
    return float(value)


def _interval(data, key):
    """Seconds between timer runs; 0 or less disables the timer."""
    value = _number(data, key, 0.0)
    if 0 < value < MIN_TIMER_MS / 1000.0:
        raise ConfigError(f"{key} must be 0 (disabled) or at least {MIN_TIMER_MS / 1000.0} seconds")
    return value


def _mode(data, key, default):
    raw = data.get(key)
    if raw is None:
        return default
    if not isinstance(raw, dict):
        raise ConfigError(f"{key} must be an object")
    values = {}
    for json_key, attr in (("saveLocalJson", "save_local_json"), ("sendToServer", "send_to_server")):
        value = raw.get(json_key, getattr(default, attr))
        if not isinstance(value, bool):
            raise ConfigError(f"{key}.{json_key} must be true or false")
        values[attr] = value
    return ModeConfig(**values)


def _mode_dict(mode):
    return {"saveLocalJson": mode.save_local_json, "sendToServer": mode.send_to_server}


def _action_names(raw):
    """Ordered, de-duplicated action names. Empty entries are skipped."""
    if not isinstance(raw, (list, tuple)):
        raise ConfigError("actionNames must be a list of strings")
    names = []
    for name in raw:
        if not isinstance(name, str):
            raise ConfigError("actionNames must be a list of strings")
        if not name:
            continue
        if name in names:
            log.warning("Duplicate action name '%s' in actionNames — only the first is used", name)
            continue
        names.append(name)
    return tuple(names)


# ─── Config Management ──────────────────────────────────────────

def load_setup(config_file, mode=None, env=None):
    """
    Load the setup from disk. Returns LoggerSetup, or None when the file is
    missing or unusable (the caller then runs with logging disabled).
    """
    path = Path(config_file)
    if not path.exists():
        log.error("Logger config %s not found — session logging will be disabled", path)
        return None
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        setup = LoggerSetup.from_dict(data, mode=mode, env=env)
    except (json.JSONDecodeError, OSError, ConfigError) as e:
        log.error("Invalid logger config %s: %s — session logging will be disabled", path, e)
        return None

    log.info(
        "Config loaded (%s mode) - Save Local: %s, Send Server: %s, Server URL: %s",
        setup.mode, setup.save_local, setup.send_to_server, setup.server_url or "(unset)",
    )
    return setup


def save_setup(setup, config_file):
    """Save a setup to disk as JSON."""
    with open(config_file, "w", encoding="utf-8") as f:
        json.dump(setup.to_dict(), f, indent=2)
    log.info("Config saved to %s", config_file)
