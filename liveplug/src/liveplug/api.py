from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

from liveplug.configuration import environment_from_config, load_engine_config
from liveplug.contracts import Dispatch, EngineConfig, ErrorSink
from liveplug.orchestration.coordinator import ExecutionCoordinator, PluginPaths
from liveplug.orchestration.registry import discover_plugins
from liveplug.reporting import LoggingErrorSink
from liveplug.runners import DEFAULT_RUNNERS
from liveplug.runtime.dispatch import run_inline

logger = logging.getLogger(__name__)


def run_plugins(
    plugin_ids: Iterable[str],
    *,
    plugin_paths: PluginPaths,
    is_startup: bool = False,
    sink: ErrorSink | None = None,
    dispatch: Dispatch = run_inline,
    host_context: Any = None,
    environment: Mapping[str, str] | None = None,
    runner_names: Iterable[str] = DEFAULT_RUNNERS,
) -> None:
    """
    Run a batch of plugins synchronously on the calling thread.

    Errors never raise; they are delivered to `sink` (logged by default),
    one call per failing plugin.
    """
    with ExecutionCoordinator(
        plugin_paths,
        sink=sink or LoggingErrorSink(),
        dispatch=dispatch,
        host_context=host_context,
        environment=environment,
        runner_names=runner_names,
    ) as coordinator:
        coordinator.run_batch(plugin_ids, is_startup=is_startup)


def coordinator_from_config(
    config: EngineConfig,
    *,
    dispatch: Dispatch,
    sink: ErrorSink | None = None,
    host_context: Any = None,
) -> ExecutionCoordinator:
    """Coordinator that rediscovers `config.plugins_dir` for every batch."""
    return ExecutionCoordinator(
        lambda: discover_plugins(config.plugins_dir),
        sink=sink or LoggingErrorSink(),
        dispatch=dispatch,
        host_context=host_context,
        environment=environment_from_config(config),
        runner_names=config.runners,
    )


def select_plugin_ids(
    config: EngineConfig,
    plugin_ids: Iterable[str] | None = None,
    *,
    is_startup: bool = False,
) -> list[str]:
    """Explicit ids win; startup falls back to `startup_plugins`, then to every discovered plugin."""
    if plugin_ids is not None:
        selected = list(plugin_ids)
        if selected:
            return selected
    if is_startup and config.startup_plugins:
        return list(config.startup_plugins)
    return sorted(discover_plugins(config.plugins_dir))


def run_from_yaml(
    config_path: str | Path,
    plugin_ids: Iterable[str] | None = None,
    *,
    is_startup: bool = False,
    sink: ErrorSink | None = None,
    dispatch: Dispatch = run_inline,
    host_context: Any = None,
) -> list[str]:
    """Load an engine config, run the selected plugins and return their ids."""
    config = load_engine_config(config_path)
    selected = select_plugin_ids(config, plugin_ids, is_startup=is_startup)
    logger.info("Running %d plugin(s) from %s", len(selected), config.plugins_dir)
    with coordinator_from_config(
        config, dispatch=dispatch, sink=sink, host_context=host_context
    ) as coordinator:
        coordinator.run_batch(selected, is_startup=is_startup)
    return selected
