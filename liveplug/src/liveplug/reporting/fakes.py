from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class DisplayCall:
    """Record of a sink call for assertions in tests."""

    title: str
    message: str
    severity: str


class CollectingErrorSink:
    """
    In-memory ErrorSink for unit tests.
    """

    def __init__(self) -> None:
        self._calls: list[DisplayCall] = []

    @property
    def calls(self) -> list[DisplayCall]:
        """Return the recorded calls in order."""
        return list(self._calls)

    @property
    def titles(self) -> list[str]:
        return [call.title for call in self._calls]

    def display(self, title: str, message: str, severity: str = "error") -> None:
        self._calls.append(DisplayCall(title=title, message=message, severity=severity))

    def messages_for(self, plugin_id: str) -> list[str]:
        return [call.message for call in self._calls if f"'{plugin_id}'" in call.title]
