from .binding import HOST_CONTEXT, IS_STARTUP, LOGGER, PLUGIN_PATH, Binding, create_binding
from .dispatch import Dispatch, Task
from .engine_config import EngineConfig, RunnerName
from .execution_error import ErrorSink, ExecutionError, Phase

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
]
