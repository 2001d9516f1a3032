from __future__ import annotations

import importlib.util
import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping
from pathlib import Path
from typing import ClassVar

from liveplug.contracts import Binding, Dispatch, Task
from liveplug.reporting import ErrorReporter
from liveplug.runtime.classpath import directive_marker, find_classpath_additions
from liveplug.runtime.files import AmbiguousEntryScriptError, find_single_file
from liveplug.runtime.loading import LoadingContext, LoadingContextError, ParentImport, build_loading_context

THIS_SCRIPT = "THIS_SCRIPT"

logger = logging.getLogger(__name__)


class ScriptLoadError(Exception):
    pass


class ScriptPluginRunner(ABC):
    """
    Shared load/run sequence of all script runners.

    Subclasses name their entry script and comment syntax and implement
    `load_script`, which compiles the script inside a loading context and
    returns the task that executes its body.
    """

    entry_script: ClassVar[str]
    comment_prefix: ClassVar[str]

    def __init__(
        self,
        reporter: ErrorReporter,
        environment: Mapping[str, str],
        *,
        parent_import: ParentImport | None = None,
    ) -> None:
        self._reporter = reporter
        self._environment = dict(environment)
        self._parent_import = parent_import

    @property
    def name(self) -> str:
        return type(self).__name__

    @property
    def marker(self) -> str:
        return directive_marker(self.comment_prefix)

    @classmethod
    def is_available(cls) -> bool:
        return True

    def can_run(self, plugin_root: str) -> bool:
        return find_single_file(plugin_root, self.entry_script) is not None

    def run(
        self,
        plugin_root: str,
        plugin_id: str,
        binding: Binding,
        dispatch: Dispatch,
    ) -> None:
        loaded = self._load(plugin_root, plugin_id, binding)
        if loaded is None:
            return
        context, task = loaded

        def run_script() -> None:
            try:
                task()
            except (Exception, SystemExit) as exc:
                self._reporter.add_running_error(plugin_id, exc)

        logger.info("Running plugin '%s' with %s", plugin_id, self.name)
        try:
            dispatch(run_script)
        except Exception as exc:
            self._reporter.add_running_error(
                plugin_id, exc, f"Error while dispatching plugin. {exc}"
            )
        finally:
            context.close()

    @abstractmethod
    def load_script(
        self,
        entry: Path,
        source: str,
        context: LoadingContext,
        binding: Binding,
    ) -> Task:
        """Compile `source` inside `context`; raise ScriptLoadError on failure."""

    def _load(
        self, plugin_root: str, plugin_id: str, binding: Binding
    ) -> tuple[LoadingContext, Task] | None:
        try:
            entry = find_single_file(plugin_root, self.entry_script)
        except AmbiguousEntryScriptError as exc:
            self._reporter.add_loading_error(plugin_id, str(exc), exc)
            return None
        if entry is None:
            self._reporter.add_loading_error(
                plugin_id, f"Startup script {self.entry_script} was not found under {plugin_root}"
            )
            return None

        try:
            # honours a PEP 263 coding cookie, utf-8 otherwise
            source = importlib.util.decode_source(entry.read_bytes())
        except (OSError, UnicodeDecodeError, SyntaxError) as exc:
            self._reporter.add_loading_error(
                plugin_id, f"Error while reading script '{entry}'. {exc}", exc
            )
            return None

        environment = dict(self._environment)
        environment[THIS_SCRIPT] = str(entry)

        def on_missing_dependency(path: str) -> None:
            self._reporter.add_loading_error(plugin_id, f"Couldn't find dependency '{path}'")

        paths = find_classpath_additions(
            source.splitlines(),
            self.marker,
            environment,
            on_missing_dependency,
            base_dir=plugin_root,
        )
        paths.append(plugin_root)

        try:
            context = build_loading_context(
                paths, name=f"plugin:{plugin_id}", parent_import=self._parent_import
            )
        except LoadingContextError as exc:
            self._reporter.add_loading_error(
                plugin_id, f"Error while looking for dependencies in '{entry}'. {exc}", exc
            )
            return None

        try:
            return context, self.load_script(entry, source, context, binding)
        except ScriptLoadError as exc:
            context.close()
            self._reporter.add_loading_error(plugin_id, str(exc), exc.__cause__ or exc)
            return None
        except BaseException:
            context.close()
            raise
