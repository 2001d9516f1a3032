from __future__ import annotations

import textwrap
import threading
from collections.abc import Mapping
from pathlib import Path

from liveplug.contracts import Task


def write_plugin(plugins_dir: Path, plugin_id: str, files: Mapping[str, str]) -> Path:
    """Create a plugin folder with the given relative files; text is dedented."""
    root = plugins_dir / plugin_id
    root.mkdir(parents=True, exist_ok=True)
    for relative_path, text in files.items():
        path = root / relative_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(textwrap.dedent(text).lstrip("\n"), encoding="utf-8")
    return root


class RecordingDispatch:
    """Dispatch that runs tasks inline and remembers which thread ran them."""

    def __init__(self) -> None:
        self.thread_ids: list[int] = []

    @property
    def calls(self) -> int:
        return len(self.thread_ids)

    def __call__(self, task: Task) -> None:
        self.thread_ids.append(threading.get_ident())
        task()


class FailingDispatch:
    """Dispatch whose handoff to the designated thread always fails."""

    def __init__(self, message: str = "designated thread is gone") -> None:
        self._message = message

    def __call__(self, task: Task) -> None:
        raise RuntimeError(self._message)
