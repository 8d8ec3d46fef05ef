"""Reader configuration persisted as JSON in the per-user data directory."""
from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Dict

_DEFAULT_TRANSITION_DELAY_MS = 500
_DEFAULT_LOG_LEVEL = "WARNING"
_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


def get_user_data_dir() -> Path:
    """Return the per-user data directory."""
    if os.name == "nt":
        base = os.environ.get("APPDATA")
        if base:
            return Path(base) / "StoryGraph"
        return Path.home() / "StoryGraph"
    return Path.home() / ".config" / "storygraph"


def get_default_config_path() -> Path:
    """Return the default per-user config path."""
    return get_user_data_dir() / "config.json"


def default_config() -> Dict[str, object]:
    return {
        "transition_delay_ms": _DEFAULT_TRANSITION_DELAY_MS,
        "show_hidden_variables": False,
        "log_level": _DEFAULT_LOG_LEVEL,
    }


def _normalize_delay(value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        return _DEFAULT_TRANSITION_DELAY_MS
    return value


def _normalize_log_level(value: object) -> str:
    if isinstance(value, str) and value.upper() in _LOG_LEVELS:
        return value.upper()
    return _DEFAULT_LOG_LEVEL


def normalize_config(raw: Dict[str, object]) -> Dict[str, object]:
    return {
        "transition_delay_ms": _normalize_delay(raw.get("transition_delay_ms")),
        "show_hidden_variables": raw.get("show_hidden_variables") is True,
        "log_level": _normalize_log_level(raw.get("log_level")),
    }


def load_config(path: Path | None = None) -> Dict[str, object]:
    """Load config from disk or return defaults."""
    config_path = path or get_default_config_path()
    try:
        raw = json.loads(config_path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return default_config()
    except (OSError, json.JSONDecodeError):
        return default_config()
    if not isinstance(raw, dict):
        return default_config()
    return normalize_config(raw)


def save_config(config: Dict[str, object], path: Path | None = None) -> None:
    """Persist config to disk."""
    config_path = path or get_default_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)
    payload = normalize_config(config)
    config_path.write_text(json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8")
