from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any

from liveplug.configuration import build_environment
from liveplug.contracts import Dispatch, ErrorSink, PluginRunner, create_binding
from liveplug.orchestration.registry import DictPluginRegistry, PluginNotRegisteredError
from liveplug.reporting import ErrorReporter
from liveplug.runners import DEFAULT_RUNNERS, create_plugin_runners
from liveplug.runtime.files import AmbiguousEntryScriptError
from liveplug.runtime.loading import ParentImport

logger = logging.getLogger(__name__)

PluginPaths = DictPluginRegistry | Mapping[str, str] | Callable[[], Mapping[str, str]]


class ExecutionCoordinator:
    """
    Runs batches of plugins on one background worker.

    Batches are processed strictly one after another in submission order.
    Within a batch, plugins run in the given order; each plugin's errors are
    flushed to the sink before the next plugin starts, and no plugin failure
    stops the batch.
    """

    def __init__(
        self,
        plugin_paths: PluginPaths,
        *,
        sink: ErrorSink,
        dispatch: Dispatch,
        host_context: Any = None,
        environment: Mapping[str, str] | None = None,
        runner_names: Iterable[str] = DEFAULT_RUNNERS,
        parent_import: ParentImport | None = None,
    ) -> None:
        self._plugin_paths = plugin_paths
        self._sink = sink
        self._dispatch = dispatch
        self._host_context = host_context
        self._environment = dict(environment) if environment is not None else None
        self._runner_names = tuple(runner_names)
        self._parent_import = parent_import
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="liveplug-worker")

    def __enter__(self) -> ExecutionCoordinator:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.shutdown()

    def run_plugins(self, plugin_ids: Iterable[str], *, is_startup: bool = False) -> Future[None]:
        """
        Queue a batch on the background worker.

        A queued batch can be cancelled through the returned future until it
        starts; a started batch always runs to completion.
        """
        return self._executor.submit(self.run_batch, list(plugin_ids), is_startup=is_startup)

    def run_batch(self, plugin_ids: Iterable[str], *, is_startup: bool = False) -> None:
        """Run a batch on the calling thread."""
        registry = DictPluginRegistry(plugins=self._snapshot_plugin_paths())
        environment = (
            dict(self._environment) if self._environment is not None else build_environment()
        )
        reporter = ErrorReporter()
        runners = create_plugin_runners(
            reporter,
            environment,
            names=self._runner_names,
            parent_import=self._parent_import,
        )

        for plugin_id in plugin_ids:
            self._run_plugin(plugin_id, registry, runners, reporter, is_startup=is_startup)
            self._flush(reporter)

    def shutdown(self, *, wait: bool = True, cancel_pending: bool = False) -> None:
        self._executor.shutdown(wait=wait, cancel_futures=cancel_pending)

    def _run_plugin(
        self,
        plugin_id: str,
        registry: DictPluginRegistry,
        runners: list[PluginRunner],
        reporter: ErrorReporter,
        *,
        is_startup: bool,
    ) -> None:
        try:
            plugin_root = registry.get(plugin_id).root_path
        except PluginNotRegisteredError:
            reporter.add_loading_error(plugin_id, f"Plugin '{plugin_id}' is not registered")
            return

        try:
            runner = next((it for it in runners if it.can_run(plugin_root)), None)
        except AmbiguousEntryScriptError as exc:
            reporter.add_loading_error(plugin_id, str(exc), exc)
            return
        if runner is None:
            tried = ", ".join(it.name for it in runners)
            reporter.add_loading_error(plugin_id, f"Startup script was not found. Tried: {tried}.")
            return

        binding = create_binding(
            plugin_root,
            plugin_id=plugin_id,
            host_context=self._host_context,
            is_startup=is_startup,
        )
        try:
            runner.run(plugin_root, plugin_id, binding, self._dispatch)
        except Exception as exc:
            reporter.add_running_error(plugin_id, exc, f"{runner.name} failed unexpectedly. {exc}")

    def _snapshot_plugin_paths(self) -> dict[str, str]:
        source = self._plugin_paths
        if isinstance(source, DictPluginRegistry):
            return source.snapshot()
        if callable(source):
            return dict(source())
        return dict(source)

    def _flush(self, reporter: ErrorReporter) -> None:
        try:
            reporter.flush(self._sink)
        except Exception:
            logger.warning("Error sink failed while reporting plugin errors", exc_info=True)
