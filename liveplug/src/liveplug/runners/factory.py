from __future__ import annotations

from collections.abc import Iterable, Mapping

from liveplug.reporting import ErrorReporter
from liveplug.runners.base import ScriptPluginRunner
from liveplug.runners.manifest_runner import ManifestPluginRunner
from liveplug.runners.python_runner import PythonPluginRunner
from liveplug.runtime.loading import ParentImport

# Entry script names must stay disjoint: runner selection takes the first match.
RUNNER_TYPES: dict[str, type[ScriptPluginRunner]] = {
    "python": PythonPluginRunner,
    "manifest": ManifestPluginRunner,
}

DEFAULT_RUNNERS = ("python", "manifest")


def create_plugin_runners(
    reporter: ErrorReporter,
    environment: Mapping[str, str],
    *,
    names: Iterable[str] = DEFAULT_RUNNERS,
    parent_import: ParentImport | None = None,
) -> list[ScriptPluginRunner]:
    runners: list[ScriptPluginRunner] = []
    for name in names:
        try:
            runner_type = RUNNER_TYPES[name]
        except KeyError as e:
            raise ValueError(f"Unknown plugin runner '{name}'") from e
        if runner_type.is_available():
            runners.append(runner_type(reporter, environment, parent_import=parent_import))
    return runners
