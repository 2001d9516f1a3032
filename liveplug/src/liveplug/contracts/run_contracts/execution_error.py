from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Protocol, runtime_checkable


class Phase(str, Enum):
    LOADING = "loading"
    RUNNING = "running"


@dataclass(frozen=True, slots=True)
class ExecutionError:
    plugin_id: str
    phase: Phase
    message: str
    cause: BaseException | None = None


@runtime_checkable
class ErrorSink(Protocol):
    """
    Host-side display for plugin errors.
    """

    def display(self, title: str, message: str, severity: str = "error") -> None:
        """Show all accumulated errors of one plugin."""
        ...
