"""Flat dotted-key settings, YAML loading, and change propagation to listeners."""

import logging
import threading
from types import MappingProxyType
from typing import Any, Callable, Mapping

import yaml

from slowlog.units import parse_time_value

logger = logging.getLogger(__name__)

_TRUE_VALUES = ("true", "1", "yes", "on")
_FALSE_VALUES = ("false", "0", "no", "off")


def parse_bool(value) -> bool:
    if isinstance(value, bool):
        return value
    normalized = str(value).strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise ValueError(f"Invalid boolean: {value!r}")


def flatten(data: Mapping, prefix: str = "") -> dict[str, Any]:
    """Flatten nested mappings into dotted keys.

    {"index": {"indexing": {"slowlog": {"level": "warn"}}}}
    becomes {"index.indexing.slowlog.level": "warn"}.
    """
    flat: dict[str, Any] = {}
    for key, value in data.items():
        full_key = f"{prefix}.{key}" if prefix else str(key)
        if isinstance(value, Mapping):
            flat.update(flatten(value, full_key))
        else:
            flat[full_key] = value
    return flat


class Settings:
    """Immutable flat view of settings keyed by dotted names."""

    def __init__(self, data: Mapping | None = None):
        self._data = MappingProxyType(flatten(data or {}))

    def get(self, key: str, default=None):
        return self._data.get(key, default)

    def get_as_time(self, key: str, default_nanos: int) -> int:
        """Duration under key in nanoseconds, or default_nanos if absent."""
        value = self._data.get(key)
        if value is None:
            return default_nanos
        return parse_time_value(value)

    def get_as_boolean(self, key: str, default: bool) -> bool:
        value = self._data.get(key)
        if value is None:
            return default
        return parse_bool(value)

    def get_by_prefix(self, prefix: str) -> "Settings":
        """Settings under prefix, with the prefix stripped."""
        if not prefix.endswith("."):
            prefix += "."
        return Settings({
            k[len(prefix):]: v for k, v in self._data.items() if k.startswith(prefix)
        })

    def merged(self, other: "Settings") -> "Settings":
        combined = dict(self._data)
        combined.update(other.as_dict())
        return Settings(combined)

    def keys(self):
        return self._data.keys()

    def as_dict(self) -> dict[str, Any]:
        return dict(self._data)

    def __contains__(self, key) -> bool:
        return key in self._data

    def __len__(self) -> int:
        return len(self._data)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Settings):
            return NotImplemented
        return self.as_dict() == other.as_dict()

    def __repr__(self) -> str:
        return f"Settings({self.as_dict()!r})"


def load_yaml_settings(path: str | None) -> Settings:
    """Load a YAML settings file. Returns empty settings if the file is missing."""
    if not path:
        return Settings()
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except FileNotFoundError:
        logger.warning("Settings file %s not found, using defaults", path)
        return Settings()
    if not isinstance(data, Mapping):
        raise ValueError(f"Settings file {path} must contain a mapping")
    logger.info("Loaded settings from %s", path)
    return Settings(data)


Listener = Callable[[Settings], None]


class SettingsService:
    """Holds the current settings and notifies listeners of every refresh."""

    def __init__(self, initial: Settings | None = None):
        self._settings = initial or Settings()
        self._listeners: list[Listener] = []
        self._lock = threading.RLock()

    @property
    def settings(self) -> Settings:
        return self._settings

    def add_listener(self, listener: Listener) -> None:
        with self._lock:
            self._listeners.append(listener)

    def remove_listener(self, listener: Listener) -> None:
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def refresh_settings(self, settings: Settings) -> bool:
        """Merge settings over the current view and deliver the result to listeners.

        The merged view only becomes current if every listener accepts it, so a
        rejected value is not carried into later refreshes.
        """
        with self._lock:
            candidate = self._settings.merged(settings)
            accepted = True
            for listener in list(self._listeners):
                try:
                    listener(candidate)
                except Exception:
                    accepted = False
                    logger.warning(
                        "Failed to refresh settings for [%r]", listener, exc_info=True
                    )
            if accepted:
                self._settings = candidate
            return accepted
