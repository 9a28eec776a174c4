"""SlowLogMonitor: per-operation entry point called by the write path."""

import functools
import logging
from typing import Callable

from slowlog.classifier import classify
from slowlog.controller import ConfigController
from slowlog.formatter import format_record
from slowlog.models import Operation, ShardId
from slowlog.severity import Severity

logger = logging.getLogger(__name__)


class SlowLogMonitor:
    def __init__(self, controller: ConfigController, shard_id: ShardId | None = None):
        self._controller = controller
        self._shard_id = shard_id

    def post_index(self, operation: Operation, took_nanos: int) -> None:
        self.on_operation_complete(operation, took_nanos)

    def post_create(self, operation: Operation, took_nanos: int) -> None:
        self.on_operation_complete(operation, took_nanos)

    def on_operation_complete(self, operation: Operation, took_nanos: int) -> None:
        """Classify a finished operation and log it if it was slow. Never raises."""
        snapshot = self._controller.current_snapshot()
        severity = classify(took_nanos, snapshot)
        if severity is None:
            return

        message = functools.partial(format_record, operation, took_nanos, snapshot.reformat)
        try:
            self._emit(self._controller.index_logger, severity, message)
        except Exception:
            logger.exception("Failed to write slow log record for [%s]", operation.doc_id)

    def _emit(self, channel: logging.Logger, severity: Severity,
              message: Callable[[], str]) -> None:
        # The line is only built once the channel accepts the severity.
        if not channel.isEnabledFor(severity.level):
            return
        line = message()
        if self._shard_id is not None:
            line = f"{self._shard_id} {line}"
        channel.log(severity.level, "%s", line)
