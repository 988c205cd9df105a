from __future__ import annotations

import tomllib as _toml
from typing import Any, Dict


class ConfigError(ValueError):
    """Raised when the config file cannot be used."""


# key -> expected type, per section
_SCHEMA: Dict[str, Dict[str, tuple]] = {
    "serial": {
        "port": (str,),
        "baudrate": (int,),
        "message": (str,),
    },
    "poll": {
        "settle": (int, float),
        "attempts": (int,),
        "interval": (int, float),
        "buffer_size": (int,),
    },
}


def load_config(config_path: str) -> dict:
    """
    Load configuration from TOML file.
    Raises:
        ConfigError: If the file cannot be read or parsed
    """
    try:
        with open(config_path, "rb") as f:
            return _toml.load(f)
    except (OSError, _toml.TOMLDecodeError) as e:
        raise ConfigError(str(e)) from e


def get_option_defaults(config: dict) -> Dict[str, Any]:
    """
    Flatten the known keys of a parsed config into CLI parameter names.

    ``[serial] baudrate`` becomes ``baudrate``, ``[poll] attempts`` becomes
    ``attempts`` and so on. Unknown sections and keys are ignored.

    Raises:
        ConfigError: If a known key has the wrong type
    """
    defaults: Dict[str, Any] = {}
    for section, keys in _SCHEMA.items():
        values = config.get(section, {})
        if not isinstance(values, dict):
            raise ConfigError(f"[{section}] must be a table")
        for key, types in keys.items():
            if key not in values:
                continue
            value = values[key]
            # bool is an int subclass, never a valid number here
            if isinstance(value, bool) or not isinstance(value, types):
                raise ConfigError(f"[{section}] {key} has invalid type {type(value).__name__}")
            defaults[key] = value
    return defaults
