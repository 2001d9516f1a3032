from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

from liveplug.contracts.run_contracts.dispatch import Dispatch


@dataclass(frozen=True, slots=True)
class PluginDescriptor:
    id: str
    root_path: str


@runtime_checkable
class PluginRunner(Protocol):
    """
    Runner contract for one scripting language.

    A runner owns a plugin folder if the folder contains its entry script.
    Runners never raise out of `run`; every outcome is recorded with the
    error reporter they were created with.
    """

    @property
    def name(self) -> str: ...

    def can_run(self, plugin_root: str) -> bool:
        """
        Return True if the entry script exists exactly once under `plugin_root`.

        Raises AmbiguousEntryScriptError if it exists more than once.
        """
        ...

    def run(
        self,
        plugin_root: str,
        plugin_id: str,
        binding: Mapping[str, Any],
        dispatch: Dispatch,
    ) -> None:
        """Load the plugin off the designated thread and run it through `dispatch`."""
        ...
