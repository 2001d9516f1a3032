from .base import THIS_SCRIPT, ScriptLoadError, ScriptPluginRunner
from .factory import DEFAULT_RUNNERS, RUNNER_TYPES, create_plugin_runners
from .manifest_runner import ManifestPluginRunner, PluginManifest
from .python_runner import PythonPluginRunner

__all__ = [
    "THIS_SCRIPT",
    "ScriptLoadError",
    "ScriptPluginRunner",
    "PythonPluginRunner",
    "ManifestPluginRunner",
    "PluginManifest",
    "RUNNER_TYPES",
    "DEFAULT_RUNNERS",
    "create_plugin_runners",
]
