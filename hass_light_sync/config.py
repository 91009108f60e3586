"""
config.py
Configuration for the Home Assistant screen light sync application.
Settings are read once from settings.json and never change afterwards.
"""

import json

from hass_light_sync.errors import ConfigError

DEFAULT_SETTINGS_PATH = 'settings.json'

REQUIRED_KEYS = (
    'api_endpoint',
    'light_entity_name',
    'trigger_entity_name',
    'token',
    'transition',
    'grab_interval',
    'skip_pixels',
    'smoothing_factor',
    'monitor_id',
)


def _require_str(data, key):
    value = data[key]
    if not isinstance(value, str) or not value.strip():
        raise ConfigError(f"'{key}' must be a non-empty string")
    return value


def _require_int(data, key, minimum):
    value = data[key]
    # bool is an int subclass
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(f"'{key}' must be an integer, got {value!r}")
    if value < minimum:
        raise ConfigError(f"'{key}' must be >= {minimum}, got {value}")
    return value


def _require_number(data, key, minimum, maximum=None):
    value = data[key]
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigError(f"'{key}' must be a number, got {value!r}")
    value = float(value)
    if value < minimum or (maximum is not None and value > maximum):
        bounds = f"[{minimum}, {maximum}]" if maximum is not None else f">= {minimum}"
        raise ConfigError(f"'{key}' must be {bounds}, got {value}")
    return value


class Config:
    def __init__(self, settings):
        missing = [key for key in REQUIRED_KEYS if key not in settings]
        if missing:
            raise ConfigError("Missing settings: " + ", ".join(missing))

        # Home Assistant connection
        self.api_endpoint = _require_str(settings, 'api_endpoint')
        if not self.api_endpoint.startswith(('ws://', 'wss://')):
            raise ConfigError(
                f"'api_endpoint' must be a ws:// or wss:// URL, got {self.api_endpoint!r}"
            )
        self.token = _require_str(settings, 'token')
        # Entities
        self.light_entity_name = _require_str(settings, 'light_entity_name')
        self.trigger_entity_name = _require_str(settings, 'trigger_entity_name')
        # Light transition in seconds, passed through to light.turn_on
        self.transition = _require_number(settings, 'transition', 0.0)
        # Pause between active cycles (ms)
        self.grab_interval = _require_int(settings, 'grab_interval', 0)
        # Only every nth pixel (in capture order) is averaged
        self.skip_pixels = _require_int(settings, 'skip_pixels', 1)
        # 0 = follow the screen instantly, 1 = never move
        self.smoothing_factor = _require_number(settings, 'smoothing_factor', 0.0, 1.0)
        # Zero-based physical monitor index
        self.monitor_id = _require_int(settings, 'monitor_id', 0)

        # Runtime switches (CLI only, not part of settings.json)
        self.debug_commands = False

    @classmethod
    def from_dict(cls, data):
        if not isinstance(data, dict):
            raise ConfigError("Settings must be a JSON object")
        return cls(data)

    @classmethod
    def load(cls, path=DEFAULT_SETTINGS_PATH):
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except FileNotFoundError:
            raise ConfigError(f"{path} file does not exist") from None
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigError(
                f"Failed to parse {path}: {e}. Please read the configuration section in the README"
            ) from e
        return cls.from_dict(data)
