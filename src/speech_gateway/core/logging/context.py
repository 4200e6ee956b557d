"""
Request Context and Configuration State for Logging.

The request id lives in a ContextVar so concurrent requests on the same
event loop keep their own id. Level and file settings are process-wide.

Environment Variables:
    - SPEECH_GW_LOG_LEVEL: Log level (1-4 or name)
    - SPEECH_GW_LOG_DIR: Directory for the JSONL log file
    - SPEECH_GW_JSONL_FILE: JSONL filename (default speech-gateway.jsonl)
    - SPEECH_GW_LOG_ROTATE_BYTES: Max file size before rotation
    - SPEECH_GW_LOG_ROTATE_BACKUP: Number of rotated files to keep
"""
from __future__ import annotations

import os
from contextvars import ContextVar
from typing import Any, Dict

import yaml

from .levels import LEVEL_NAMES, LogLevel

# "-" outside of a request
_request_id: ContextVar[str] = ContextVar("request_id", default="-")

_configured: bool = False
_log_config: Dict[str, Any] = {}
_current_level: LogLevel = LogLevel.NORMAL


def get_request_id() -> str:
    """Return the request id bound to the current context, or "-"."""
    return _request_id.get()


def set_request_id(rid: str) -> None:
    """Bind a request id to the current context for log correlation."""
    _request_id.set(rid)


def get_level() -> LogLevel:
    return _current_level


def set_level(level: LogLevel) -> None:
    global _current_level
    _current_level = level


def get_level_name() -> str:
    return LEVEL_NAMES.get(_current_level, "NORMAL")


def is_configured() -> bool:
    return _configured


def set_configured(value: bool) -> None:
    global _configured
    _configured = value


def get_log_config() -> Dict[str, Any]:
    return _log_config


def set_log_config(config: Dict[str, Any]) -> None:
    global _log_config
    _log_config = config


def read_logging_config() -> Dict[str, Any]:
    """
    Read logging configuration from the settings file and environment.

    Priority (highest first): environment variables, the `logging`
    section of settings.yaml, defaults. The vault is not consulted here;
    logging must be available before secrets are fetched. Only used until
    a GatewayConfig is loaded; create_app() and the CLI then pass its
    logging section to configure_logging().
    """
    cfg: Dict[str, Any] = {}

    settings_path = os.getenv("SPEECH_GW_SETTINGS", "config/settings.yaml")
    try:
        from speech_gateway.core.config import load_settings
        settings = load_settings(settings_path, use_vault=False)
        cfg.update(settings.raw.get("logging") or {})
    except (OSError, ValueError, yaml.YAMLError):
        # Missing or unparseable settings file: defaults apply
        pass

    if os.getenv("SPEECH_GW_LOG_LEVEL"):
        cfg["level"] = os.environ["SPEECH_GW_LOG_LEVEL"]
    if os.getenv("SPEECH_GW_LOG_DIR"):
        cfg["log_dir"] = os.environ["SPEECH_GW_LOG_DIR"]
    if os.getenv("SPEECH_GW_JSONL_FILE"):
        cfg["jsonl_file"] = os.environ["SPEECH_GW_JSONL_FILE"]
    for env_name, key in (
        ("SPEECH_GW_LOG_ROTATE_BYTES", "rotate_max_bytes"),
        ("SPEECH_GW_LOG_ROTATE_BACKUP", "rotate_backup_count"),
    ):
        raw = os.getenv(env_name)
        if raw:
            try:
                cfg[key] = int(raw)
            except ValueError:
                pass  # Invalid value, ignore

    return cfg
