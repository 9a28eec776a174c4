"""ConfigController: owns the live slow log snapshot and applies settings changes."""

import logging
import threading

from slowlog.config import ConfigSnapshot, SlowLogSettingsSchema
from slowlog.settings import Settings
from slowlog.severity import Severity

logger = logging.getLogger(__name__)


class ConfigController:
    """Publishes immutable ConfigSnapshots and keeps the backend channels' level in step.

    Writers are serialized by a lock. Readers take no lock; they read the
    single attribute holding the current snapshot, which is only ever replaced
    as a whole.
    """

    def __init__(self, settings: Settings | None = None,
                 schema: SlowLogSettingsSchema | None = None,
                 logger_name: str | None = None):
        self._schema = schema or SlowLogSettingsSchema()
        self._logger_name = logger_name or self._schema.prefix
        self._index_logger = logging.getLogger(f"{self._logger_name}.index")
        self._delete_logger = logging.getLogger(f"{self._logger_name}.delete")
        self._write_lock = threading.Lock()

        snapshot = self._build_snapshot(settings or Settings(), ConfigSnapshot())
        self._set_backend_level(snapshot.level)
        self._snapshot = snapshot

    @property
    def schema(self) -> SlowLogSettingsSchema:
        return self._schema

    @property
    def index_logger(self) -> logging.Logger:
        return self._index_logger

    @property
    def delete_logger(self) -> logging.Logger:
        return self._delete_logger

    def current_snapshot(self) -> ConfigSnapshot:
        return self._snapshot

    def apply_settings(self, settings: Settings) -> ConfigSnapshot:
        """Apply a complete settings view and publish the resulting snapshot.

        Keys that are absent keep their current value. Raises ValueError on an
        unparsable value, in which case the current snapshot stays live.
        """
        with self._write_lock:
            current = self._snapshot
            updated = self._build_snapshot(settings, current)
            if updated == current:
                return current

            if updated.level != current.level:
                logger.info("Slow log level changed from %s to %s",
                            current.level.name, updated.level.name)
                self._set_backend_level(updated.level)

            self._snapshot = updated
            logger.debug("Applied slow log settings: %s", updated)
            return updated

    def _build_snapshot(self, settings: Settings, current: ConfigSnapshot) -> ConfigSnapshot:
        schema = self._schema
        level = settings.get(schema.level_key)
        return ConfigSnapshot(
            warn_threshold=settings.get_as_time(schema.warn_key, current.warn_threshold),
            info_threshold=settings.get_as_time(schema.info_key, current.info_threshold),
            debug_threshold=settings.get_as_time(schema.debug_key, current.debug_threshold),
            trace_threshold=settings.get_as_time(schema.trace_key, current.trace_threshold),
            level=Severity.parse(level) if level is not None else current.level,
            reformat=settings.get_as_boolean(schema.reformat_key, current.reformat),
        )

    def _set_backend_level(self, level: Severity) -> None:
        self._index_logger.setLevel(level.level)
        self._delete_logger.setLevel(level.level)
