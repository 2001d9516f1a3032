from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from liveplug.configuration import format_validation_error
from liveplug.contracts import Binding, Task
from liveplug.runners.base import ScriptLoadError, ScriptPluginRunner
from liveplug.runtime.loading import LoadingContext

_ENTRY_POINT_PATTERN = r"^[A-Za-z_][A-Za-z0-9_.]*:[A-Za-z_][A-Za-z0-9_.]*$"


class PluginManifest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    entry: str = Field(pattern=_ENTRY_POINT_PATTERN)
    kwargs: dict[str, Any] = Field(default_factory=dict)
    description: str | None = None


class ManifestPluginRunner(ScriptPluginRunner):
    """
    Runs declarative `plugin.yaml` plugins.

    The manifest names a `module:callable` entry point that is imported
    through the loading context while loading, and called on the designated
    thread as `callable(binding, **kwargs)`.
    """

    entry_script = "plugin.yaml"
    comment_prefix = "#"

    def load_script(
        self,
        entry: Path,
        source: str,
        context: LoadingContext,
        binding: Binding,
    ) -> Task:
        manifest = _parse_manifest(source)
        module_name, _, attribute = manifest.entry.partition(":")
        try:
            target: Any = context.import_module(module_name)
            for part in attribute.split("."):
                target = getattr(target, part)
        except Exception as exc:
            raise ScriptLoadError(
                f"Error while loading entry point '{manifest.entry}'. {type(exc).__name__}: {exc}"
            ) from exc
        if not callable(target):
            raise ScriptLoadError(f"Entry point '{manifest.entry}' is not callable")

        kwargs = dict(manifest.kwargs)

        def execute() -> None:
            target(binding, **kwargs)

        return execute


def _parse_manifest(source: str) -> PluginManifest:
    try:
        payload = yaml.safe_load(source) or {}
    except yaml.YAMLError as exc:
        raise ScriptLoadError(f"Error while compiling script. {exc}") from exc
    try:
        return PluginManifest.model_validate(payload)
    except ValidationError as exc:
        raise ScriptLoadError(
            f"Error while compiling script. {format_validation_error('manifest', exc)}"
        ) from exc
