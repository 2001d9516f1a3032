from __future__ import annotations

import threading
import traceback

from liveplug.contracts import ErrorSink, ExecutionError, Phase

_PHASE_LABELS = {
    Phase.LOADING: "Loading error",
    Phase.RUNNING: "Running error",
}


class ErrorReporter:
    """
    Accumulates plugin errors across the loading and running phases.

    Records are kept in insertion order until `flush` hands them to a sink.
    Running errors are added from the designated thread, so all access is
    serialized.
    """

    def __init__(self) -> None:
        self._errors: list[ExecutionError] = []
        self._lock = threading.Lock()

    @property
    def errors(self) -> list[ExecutionError]:
        """Return the records that have not been flushed yet."""
        with self._lock:
            return list(self._errors)

    def has_errors(self, plugin_id: str | None = None) -> bool:
        with self._lock:
            if plugin_id is None:
                return bool(self._errors)
            return any(error.plugin_id == plugin_id for error in self._errors)

    def add_error(
        self,
        plugin_id: str,
        phase: Phase,
        message: str,
        cause: BaseException | None = None,
    ) -> None:
        record = ExecutionError(plugin_id=plugin_id, phase=phase, message=message, cause=cause)
        with self._lock:
            self._errors.append(record)

    def add_loading_error(
        self, plugin_id: str, message: str, cause: BaseException | None = None
    ) -> None:
        self.add_error(plugin_id, Phase.LOADING, message, cause)

    def add_running_error(
        self, plugin_id: str, exc: BaseException, message: str | None = None
    ) -> None:
        text = message if message is not None else f"{type(exc).__name__}: {exc}"
        self.add_error(plugin_id, Phase.RUNNING, text, exc)

    def flush(self, sink: ErrorSink) -> int:
        """
        Deliver pending records to `sink`, one call per plugin id.

        Each plugin's records are removed right before its `display` call, so
        they are never delivered twice. If the sink raises, records of the
        remaining plugins stay pending. Returns the number of display calls.
        """
        delivered = 0
        for plugin_id in self._pending_plugin_ids():
            records = self._take(plugin_id)
            if not records:
                continue
            sink.display(format_title(plugin_id), format_message(records), severity="error")
            delivered += 1
        return delivered

    def _pending_plugin_ids(self) -> list[str]:
        with self._lock:
            return list(dict.fromkeys(error.plugin_id for error in self._errors))

    def _take(self, plugin_id: str) -> list[ExecutionError]:
        with self._lock:
            taken = [error for error in self._errors if error.plugin_id == plugin_id]
            self._errors = [error for error in self._errors if error.plugin_id != plugin_id]
        return taken


def format_title(plugin_id: str) -> str:
    return f"Plugin '{plugin_id}' failed"


def format_message(records: list[ExecutionError]) -> str:
    lines: list[str] = []
    for record in records:
        lines.append(f"{_PHASE_LABELS[record.phase]}: {record.message}")
        if record.phase is Phase.RUNNING and record.cause is not None:
            lines.append("".join(traceback.format_exception(record.cause)).rstrip("\n"))
    return "\n".join(lines)
