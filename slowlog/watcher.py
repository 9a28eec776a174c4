"""Settings file watcher: reloads a YAML settings file and pushes it to listeners."""

import logging
import os
import threading
import time

import yaml
from watchdog.events import FileSystemEventHandler

from slowlog.settings import SettingsService, load_yaml_settings

logger = logging.getLogger(__name__)

DEBOUNCE_SECONDS = 0.5


class SettingsFileWatcher(FileSystemEventHandler):
    """Watches one settings file and refreshes the SettingsService when it changes."""

    def __init__(self, path: str, service: SettingsService, time_func=None,
                 timer_factory=None):
        super().__init__()
        self._path = os.path.abspath(path)
        self._service = service
        self._time_func = time_func or time.monotonic
        self._timer_factory = timer_factory or threading.Timer
        self._last_reload: float | None = None
        self._pending = None
        self._lock = threading.Lock()

    @property
    def watched_dir(self) -> str:
        return os.path.dirname(self._path)

    def on_created(self, event):
        self._on_event(event)

    def on_modified(self, event):
        self._on_event(event)

    def on_moved(self, event):
        # Editors that save via rename show up as a move onto the watched path.
        if not event.is_directory and os.path.abspath(event.dest_path) == self._path:
            self._handle()

    def _on_event(self, event):
        if not event.is_directory and os.path.abspath(event.src_path) == self._path:
            self._handle()

    def _handle(self):
        """Reload now, or once the debounce window closes if a reload just ran."""
        with self._lock:
            now = self._time_func()
            if self._last_reload is not None and now - self._last_reload < DEBOUNCE_SECONDS:
                # Edits inside the window collapse into one trailing reload.
                if self._pending is None:
                    delay = DEBOUNCE_SECONDS - (now - self._last_reload)
                    self._pending = self._timer_factory(delay, self._reload_pending)
                    self._pending.daemon = True
                    self._pending.start()
                return
            self._last_reload = now
        self.reload()

    def _reload_pending(self):
        with self._lock:
            self._pending = None
            self._last_reload = self._time_func()
        self.reload()

    def stop(self):
        """Cancel a scheduled trailing reload, if any."""
        with self._lock:
            if self._pending is not None:
                self._pending.cancel()
                self._pending = None

    def reload(self) -> bool:
        """Load the settings file and refresh listeners. Returns False if the file is invalid."""
        try:
            settings = load_yaml_settings(self._path)
        except (yaml.YAMLError, ValueError) as e:
            logger.error("Ignoring invalid settings file %s: %s", self._path, e)
            return False
        except OSError as e:
            logger.error("Failed to read %s: %s", self._path, e)
            return False
        if not self._service.refresh_settings(settings):
            logger.error("Settings from %s were rejected, keeping previous values", self._path)
            return False
        logger.info("Reloaded settings from %s", self._path)
        return True
