"""Slow log config snapshot, settings key schema and process config from env vars."""

import os
from dataclasses import dataclass

from slowlog.severity import Severity

DISABLED = -1

DEFAULT_PREFIX = "index.indexing.slowlog"
DEFAULT_OPERATION = "index"


@dataclass(frozen=True)
class ConfigSnapshot:
    """One complete, immutable view of the slow log configuration.

    Thresholds are in nanoseconds; a negative threshold is disabled.
    """

    warn_threshold: int = DISABLED
    info_threshold: int = DISABLED
    debug_threshold: int = DISABLED
    trace_threshold: int = DISABLED
    level: Severity = Severity.TRACE
    reformat: bool = True

    def threshold_for(self, severity: Severity) -> int:
        return {
            Severity.WARN: self.warn_threshold,
            Severity.INFO: self.info_threshold,
            Severity.DEBUG: self.debug_threshold,
            Severity.TRACE: self.trace_threshold,
        }[severity]


@dataclass(frozen=True)
class SlowLogSettingsSchema:
    """Names of the settings keys the controller reacts to."""

    prefix: str = DEFAULT_PREFIX
    operation: str = DEFAULT_OPERATION

    def threshold_key(self, severity: Severity) -> str:
        return f"{self.prefix}.threshold.{self.operation}.{severity.name.lower()}"

    @property
    def warn_key(self) -> str:
        return self.threshold_key(Severity.WARN)

    @property
    def info_key(self) -> str:
        return self.threshold_key(Severity.INFO)

    @property
    def debug_key(self) -> str:
        return self.threshold_key(Severity.DEBUG)

    @property
    def trace_key(self) -> str:
        return self.threshold_key(Severity.TRACE)

    @property
    def level_key(self) -> str:
        return f"{self.prefix}.level"

    @property
    def reformat_key(self) -> str:
        return f"{self.prefix}.reformat"

    @property
    def dynamic_keys(self) -> tuple[str, ...]:
        return (
            self.warn_key,
            self.info_key,
            self.debug_key,
            self.trace_key,
            self.reformat_key,
            self.level_key,
        )


@dataclass(frozen=True)
class Config:
    settings_file: str = "slowlog.yml"
    log_level: str = "INFO"
    ops: int = 0
    interval: float = 0.2
    index_name: str = "twitter"
    shard: int = 0


def load_config() -> Config:
    """Build Config from environment variables with sensible defaults."""
    return Config(
        settings_file=os.environ.get("SLOWLOG_CONFIG", Config.settings_file),
        log_level=os.environ.get("SLOWLOG_LOG_LEVEL", Config.log_level).upper(),
        ops=int(os.environ.get("SLOWLOG_OPS", Config.ops)),
        interval=float(os.environ.get("SLOWLOG_INTERVAL", Config.interval)),
        index_name=os.environ.get("SLOWLOG_INDEX", Config.index_name),
        shard=int(os.environ.get("SLOWLOG_SHARD", Config.shard)),
    )
