from __future__ import annotations

import logging
import os
from typing import Any, Dict

from dotenv import load_dotenv

DEFAULT_CONFIG: Dict[str, Any] = {
    "address": "",
    "env_dir": "~/.rri-client",
    "connect_timeout": 10.0,
    "read_timeout": 0.0,  # seconds, 0 disables
    "log_level": "WARNING",
    "verbose": False,
}

CLIENT_CONFIG: Dict[str, Any] = DEFAULT_CONFIG.copy()

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
TRUE_WORDS = ("1", "true", "yes", "on")


class ConfigError(Exception):
    """An RRI_* setting could not be read or is out of range."""


def load_config(env_path: str = ".env") -> Dict[str, Any]:
    """Load client configuration from env file/environment variables (RRI_<KEY>)."""
    if os.path.exists(env_path):
        load_dotenv(env_path)

    for key, default_value in DEFAULT_CONFIG.items():
        env_key = f"RRI_{key.upper()}"
        value = os.getenv(env_key, default_value)
        CLIENT_CONFIG[key] = _convert(key, value)

    CLIENT_CONFIG["log_level"] = str(CLIENT_CONFIG["log_level"]).upper()
    _validate_config()
    logging.getLogger().setLevel(CLIENT_CONFIG["log_level"])
    return CLIENT_CONFIG


def _convert(key: str, raw: Any) -> Any:
    """Turn the raw RRI_<KEY> text into the type of the key's default."""
    default = DEFAULT_CONFIG[key]
    if isinstance(raw, type(default)) and not isinstance(raw, str):
        return raw
    if isinstance(default, bool):
        return str(raw).strip().lower() in TRUE_WORDS
    try:
        return type(default)(str(raw).strip())
    except ValueError as exc:
        raise ConfigError(f"RRI_{key.upper()} must be a {type(default).__name__}, got {raw!r}") from exc


def _validate_config() -> None:
    if CLIENT_CONFIG["connect_timeout"] <= 0:
        raise ConfigError("RRI_CONNECT_TIMEOUT must be positive")
    if CLIENT_CONFIG["read_timeout"] < 0:
        raise ConfigError("RRI_READ_TIMEOUT must not be negative")
    if CLIENT_CONFIG["log_level"] not in LOG_LEVELS:
        raise ConfigError(f"RRI_LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}")


def get(key: str, default: Any = None) -> Any:
    """Current value of ``key``, falling back to its built-in default."""
    return CLIENT_CONFIG.get(key, DEFAULT_CONFIG.get(key, default))


__all__ = ["CLIENT_CONFIG", "DEFAULT_CONFIG", "ConfigError", "get", "load_config"]
