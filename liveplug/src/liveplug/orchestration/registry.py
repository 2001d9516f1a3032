from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from liveplug.contracts import PluginDescriptor


class PluginNotRegisteredError(KeyError):
    pass


@dataclass
class DictPluginRegistry:
    """Plugin id to plugin root mapping owned by the host."""

    plugins: dict[str, str] = field(default_factory=dict)

    def get(self, plugin_id: str) -> PluginDescriptor:
        try:
            return PluginDescriptor(id=plugin_id, root_path=self.plugins[plugin_id])
        except KeyError as e:
            raise PluginNotRegisteredError(plugin_id) from e

    def snapshot(self) -> dict[str, str]:
        return dict(self.plugins)


def discover_plugins(plugins_dir: str | Path) -> dict[str, str]:
    """Each immediate, non-hidden subdirectory of `plugins_dir` is a plugin named after it."""
    root = Path(plugins_dir)
    if not root.is_dir():
        return {}
    return {
        child.name: str(child.resolve())
        for child in sorted(root.iterdir())
        if child.is_dir() and not child.name.startswith((".", "__"))
    }


def plugin_id_for_path(path: str | Path, plugins: Mapping[str, str]) -> str | None:
    """Return the id of the plugin whose folder contains `path`, if any."""
    target = Path(path).resolve()
    for plugin_id, plugin_root in plugins.items():
        if target.is_relative_to(Path(plugin_root).resolve()):
            return plugin_id
    return None
