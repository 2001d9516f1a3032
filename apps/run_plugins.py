from __future__ import annotations

import argparse
import logging
from pathlib import Path

from liveplug.api import coordinator_from_config, select_plugin_ids
from liveplug.configuration import load_engine_config
from liveplug.reporting import LoggingErrorSink
from liveplug.runtime.dispatch import TaskQueueDispatcher


class _CountingSink(LoggingErrorSink):
    def __init__(self) -> None:
        super().__init__()
        self.failed_plugins = 0

    def display(self, title: str, message: str, severity: str = "error") -> None:
        self.failed_plugins += 1
        super().display(title, message, severity)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run liveplug script plugins.")
    parser.add_argument("plugin_ids", nargs="*", help="Plugin ids to run (default: all)")
    parser.add_argument(
        "--config",
        type=Path,
        default=Path("liveplug.yaml"),
        help="Path to the engine YAML config",
    )
    parser.add_argument(
        "--startup",
        action="store_true",
        help="Run as host startup (uses startup_plugins when no ids are given)",
    )
    parser.add_argument("--log-level", default="INFO", help="Logging level")
    return parser.parse_args()


def main() -> int:
    args = parse_args()
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = load_engine_config(args.config)
    plugin_ids = select_plugin_ids(config, args.plugin_ids, is_startup=args.startup)
    sink = _CountingSink()
    # the main thread is the designated thread: it pumps plugin tasks while the worker loads
    dispatcher = TaskQueueDispatcher()

    with coordinator_from_config(
        config, dispatch=dispatcher, sink=sink, host_context=config
    ) as coordinator:
        batch = coordinator.run_plugins(plugin_ids, is_startup=args.startup)
        try:
            dispatcher.run_until(batch)
        finally:
            # fails tasks still waiting so the worker can finish before shutdown
            dispatcher.close()

    print(f"Ran {len(plugin_ids)} plugin(s), {sink.failed_plugins} failed")
    return 1 if sink.failed_plugins else 0


if __name__ == "__main__":
    raise SystemExit(main())
