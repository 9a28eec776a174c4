#!/usr/bin/env python3
"""Indexing Slow Log demo entry point.

Drives simulated index/create operations through the slow log while watching
a YAML settings file, so thresholds, level and reformat can be changed live.
"""

import argparse
import json
import logging
import os
import random
import signal
import sys
import time
import uuid

from watchdog.observers import Observer

from slowlog.config import load_config
from slowlog.controller import ConfigController
from slowlog.models import Operation, OperationKind, ShardId
from slowlog.monitor import SlowLogMonitor
from slowlog.settings import SettingsService, load_yaml_settings
from slowlog.units import NANOS_PER_MILLI
from slowlog.watcher import SettingsFileWatcher

logger = logging.getLogger(__name__)

_running = True

DOC_TYPES = ("tweet", "user", "comment")
USERS = ("kimchy", "alice", "bob", "carol")
LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _signal_handler(sig, frame):
    global _running
    logger.info("Shutdown signal received, stopping...")
    _running = False


def build_cli_parser(config) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Indexing Slow Log demo")
    parser.add_argument(
        "--config", default=config.settings_file,
        help=f"Path to YAML slow log settings (default: {config.settings_file})",
    )
    parser.add_argument(
        "--ops", type=int, default=config.ops,
        help="Number of operations to simulate, 0 for unlimited",
    )
    parser.add_argument(
        "--interval", type=float, default=config.interval,
        help="Seconds between simulated operations",
    )
    parser.add_argument("--index", default=config.index_name, help="Index name")
    parser.add_argument("--shard", type=int, default=config.shard, help="Shard number")
    parser.add_argument(
        "--log-level", type=str.upper, choices=LOG_LEVELS, default=config.log_level.upper(),
        help="Root logging level",
    )
    return parser


def make_operation() -> Operation:
    """Random index/create operation with a small JSON source."""
    kind = random.choice((OperationKind.INDEX, OperationKind.CREATE))
    source = json.dumps({
        "user": random.choice(USERS),
        "message": f"trying out slowlog {uuid.uuid4().hex[:6]}",
        "likes": random.randint(0, 500),
    }).encode("utf-8")
    return Operation(
        kind=kind,
        doc_type=random.choice(DOC_TYPES),
        doc_id=uuid.uuid4().hex[:8],
        routing=random.choice((None, None, "user-1")),
        source=source,
    )


def simulate_took_nanos() -> int:
    """Mostly fast operations with an occasional slow tail."""
    millis = random.expovariate(1 / 40.0)
    if random.random() < 0.05:
        millis += random.uniform(500, 2000)
    return int(millis * NANOS_PER_MILLI)


def run(monitor: SlowLogMonitor, ops: int, interval: float) -> int:
    count = 0
    while _running and (ops <= 0 or count < ops):
        operation = make_operation()
        took = simulate_took_nanos()
        if operation.kind is OperationKind.CREATE:
            monitor.post_create(operation, took)
        else:
            monitor.post_index(operation, took)
        count += 1
        if interval > 0:
            time.sleep(interval)
    return count


def main(argv=None):
    global _running
    _running = True
    signal.signal(signal.SIGINT, _signal_handler)
    signal.signal(signal.SIGTERM, _signal_handler)

    config = load_config()
    parser = build_cli_parser(config)
    args = parser.parse_args(argv)
    if args.log_level not in LOG_LEVELS:
        # argparse does not check defaults, so SLOWLOG_LOG_LEVEL lands here.
        parser.error(f"invalid log level: {args.log_level!r}")

    logging.basicConfig(
        level=logging.getLevelName(args.log_level),
        format="%(asctime)s [SLOWLOG] %(levelname)s %(name)s %(message)s",
        stream=sys.stderr,
    )

    service = SettingsService(load_yaml_settings(args.config))
    controller = ConfigController(service.settings)
    service.add_listener(controller.apply_settings)
    monitor = SlowLogMonitor(controller, ShardId(args.index, args.shard))
    logger.info("Slow log config: %s", controller.current_snapshot())

    watcher = SettingsFileWatcher(args.config, service)
    os.makedirs(watcher.watched_dir, exist_ok=True)
    observer = Observer()
    observer.schedule(watcher, watcher.watched_dir, recursive=False)
    observer.start()
    logger.info("Watching settings file: %s", args.config)

    try:
        count = run(monitor, args.ops, args.interval)
    except KeyboardInterrupt:
        count = 0

    logger.info("Shutting down...")
    watcher.stop()
    observer.stop()
    observer.join(timeout=5)
    logger.info("Simulated %d operations.", count)


if __name__ == "__main__":
    main()
