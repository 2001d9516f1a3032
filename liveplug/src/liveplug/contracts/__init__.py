from .run_contracts import (
    HOST_CONTEXT,
    IS_STARTUP,
    LOGGER,
    PLUGIN_PATH,
    Binding,
    Dispatch,
    EngineConfig,
    ErrorSink,
    ExecutionError,
    Phase,
    RunnerName,
    Task,
    create_binding,
)
from .plugin_contracts import PluginDescriptor, PluginRunner

__all__ = [
    "Binding",
    "create_binding",
    "HOST_CONTEXT",
    "IS_STARTUP",
    "PLUGIN_PATH",
    "LOGGER",
    "Dispatch",
    "Task",
    "EngineConfig",
    "RunnerName",
    "ErrorSink",
    "ExecutionError",
    "Phase",
    "PluginDescriptor",
    "PluginRunner",
]
