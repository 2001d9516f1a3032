"""Runtime helpers for loading and running plugin scripts."""

from liveplug.runtime.classpath import ClasspathEntry, find_classpath_additions
from liveplug.runtime.dispatch import (
    DedicatedThreadDispatcher,
    DispatchError,
    TaskQueueDispatcher,
    run_inline,
)
from liveplug.runtime.files import AmbiguousEntryScriptError, find_single_file
from liveplug.runtime.loading import LoadingContext, LoadingContextError, build_loading_context

__all__ = [
    "ClasspathEntry",
    "find_classpath_additions",
    "DedicatedThreadDispatcher",
    "DispatchError",
    "TaskQueueDispatcher",
    "run_inline",
    "AmbiguousEntryScriptError",
    "find_single_file",
    "LoadingContext",
    "LoadingContextError",
    "build_loading_context",
]
