"""Tests for the ConfigController."""

import logging
import threading

import pytest

from slowlog.config import DISABLED, ConfigSnapshot, SlowLogSettingsSchema
from slowlog.controller import ConfigController
from slowlog.settings import Settings
from slowlog.severity import TRACE, Severity
from slowlog.units import NANOS_PER_MILLI, NANOS_PER_SECOND

PREFIX = "index.indexing.slowlog"


def _settings(**values):
    """Settings from short names: warn="1s" -> index.indexing.slowlog.threshold.index.warn."""
    data = {}
    for key, value in values.items():
        if key in ("warn", "info", "debug", "trace"):
            data[f"{PREFIX}.threshold.index.{key}"] = value
        else:
            data[f"{PREFIX}.{key}"] = value
    return Settings(data)


class TestDefaults:
    def test_defaults_without_settings(self, logger_name):
        controller = ConfigController(logger_name=logger_name)
        snap = controller.current_snapshot()
        assert snap == ConfigSnapshot()
        assert snap.warn_threshold == DISABLED
        assert snap.info_threshold == DISABLED
        assert snap.debug_threshold == DISABLED
        assert snap.trace_threshold == DISABLED
        assert snap.level is Severity.TRACE
        assert snap.reformat is True

    def test_channels_start_at_trace(self, logger_name):
        controller = ConfigController(logger_name=logger_name)
        assert controller.index_logger.name == f"{logger_name}.index"
        assert controller.delete_logger.name == f"{logger_name}.delete"
        assert controller.index_logger.level == TRACE
        assert controller.delete_logger.level == TRACE

    def test_static_settings_override_defaults(self, logger_name):
        controller = ConfigController(
            _settings(warn="10s", info="5s", level="debug", reformat="false"),
            logger_name=logger_name,
        )
        snap = controller.current_snapshot()
        assert snap.warn_threshold == 10 * NANOS_PER_SECOND
        assert snap.info_threshold == 5 * NANOS_PER_SECOND
        assert snap.debug_threshold == DISABLED
        assert snap.level is Severity.DEBUG
        assert snap.reformat is False
        assert controller.index_logger.level == logging.DEBUG

    def test_default_logger_name_is_schema_prefix(self):
        controller = ConfigController()
        assert controller.index_logger.name == f"{PREFIX}.index"


class TestApplySettings:
    def test_updates_thresholds(self, logger_name):
        controller = ConfigController(logger_name=logger_name)
        controller.apply_settings(_settings(warn="500ms", trace="0ms"))
        snap = controller.current_snapshot()
        assert snap.warn_threshold == 500 * NANOS_PER_MILLI
        assert snap.trace_threshold == 0
        assert snap.info_threshold == DISABLED

    def test_absent_keys_keep_previous_values(self, logger_name):
        controller = ConfigController(
            _settings(warn="1s", info="500ms", reformat="false"), logger_name=logger_name
        )
        controller.apply_settings(_settings(info="200ms"))
        snap = controller.current_snapshot()
        assert snap.warn_threshold == NANOS_PER_SECOND
        assert snap.info_threshold == 200 * NANOS_PER_MILLI
        assert snap.reformat is False

    def test_threshold_can_be_disabled_again(self, logger_name):
        controller = ConfigController(_settings(warn="1s"), logger_name=logger_name)
        controller.apply_settings(_settings(warn=-1))
        assert controller.current_snapshot().warn_threshold < 0

    def test_level_pushed_to_both_channels(self, logger_name):
        controller = ConfigController(logger_name=logger_name)
        controller.apply_settings(_settings(level="warn"))
        assert controller.current_snapshot().level is Severity.WARN
        assert controller.index_logger.level == logging.WARNING
        assert controller.delete_logger.level == logging.WARNING

    def test_unrelated_keys_ignored(self, logger_name):
        controller = ConfigController(logger_name=logger_name)
        before = controller.current_snapshot()
        controller.apply_settings(Settings({"index.number_of_replicas": 2}))
        assert controller.current_snapshot() is before

    def test_unchanged_settings_keep_same_snapshot(self, logger_name):
        controller = ConfigController(_settings(warn="1s"), logger_name=logger_name)
        before = controller.current_snapshot()
        controller.apply_settings(_settings(warn="1000ms"))
        assert controller.current_snapshot() is before

    def test_new_snapshot_replaces_old(self, logger_name):
        controller = ConfigController(logger_name=logger_name)
        before = controller.current_snapshot()
        controller.apply_settings(_settings(reformat="false"))
        after = controller.current_snapshot()
        assert after is not before
        assert before.reformat is True
        assert after.reformat is False

    def test_invalid_value_leaves_snapshot_untouched(self, logger_name):
        controller = ConfigController(_settings(warn="1s"), logger_name=logger_name)
        before = controller.current_snapshot()
        with pytest.raises(ValueError):
            controller.apply_settings(_settings(info="200ms", level="loud"))
        assert controller.current_snapshot() is before
        assert controller.index_logger.level == TRACE

    def test_custom_schema(self, logger_name):
        schema = SlowLogSettingsSchema(prefix="shop.slowlog", operation="index")
        controller = ConfigController(
            Settings({"shop.slowlog.threshold.index.info": "50ms"}),
            schema=schema,
            logger_name=logger_name,
        )
        assert controller.schema is schema
        assert controller.current_snapshot().info_threshold == 50 * NANOS_PER_MILLI

    def test_nested_settings(self, logger_name):
        controller = ConfigController(logger_name=logger_name)
        controller.apply_settings(Settings({
            "index": {"indexing": {"slowlog": {"threshold": {"index": {"debug": "2s"}}}}}
        }))
        assert controller.current_snapshot().debug_threshold == 2 * NANOS_PER_SECOND


class TestAtomicity:
    def test_readers_never_see_mixed_snapshots(self, logger_name):
        controller = ConfigController(logger_name=logger_name)
        even = _settings(warn="1s", info="100ms", level="warn", reformat="true")
        odd = _settings(warn="2s", info="200ms", level="debug", reformat="false")
        consistent = {
            (NANOS_PER_SECOND, 100 * NANOS_PER_MILLI, Severity.WARN, True),
            (2 * NANOS_PER_SECOND, 200 * NANOS_PER_MILLI, Severity.DEBUG, False),
        }
        torn = []
        stop = threading.Event()

        def writer(offset):
            for i in range(500):
                controller.apply_settings(even if (i + offset) % 2 == 0 else odd)

        def reader():
            while not stop.is_set():
                snap = controller.current_snapshot()
                key = (snap.warn_threshold, snap.info_threshold, snap.level, snap.reformat)
                if key not in consistent:
                    torn.append(key)

        controller.apply_settings(even)
        readers = [threading.Thread(target=reader) for _ in range(4)]
        writers = [threading.Thread(target=writer, args=(n,)) for n in range(2)]
        for t in readers + writers:
            t.start()
        for t in writers:
            t.join()
        stop.set()
        for t in readers:
            t.join()

        assert torn == []
        final = controller.current_snapshot()
        expected_level = final.level.level
        assert controller.index_logger.level == expected_level
        assert controller.delete_logger.level == expected_level
