from __future__ import annotations

import importlib.util
import sys
from pathlib import Path

import pytest

from liveplug.runtime.dispatch import TaskQueueDispatcher

REPO_ROOT = Path(__file__).resolve().parents[1]


def _load_app(name: str):
    spec = importlib.util.spec_from_file_location(name, REPO_ROOT / "apps" / "run_plugins.py")
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def test_cli_runs_plugins_and_reports_success(monkeypatch, capsys) -> None:
    app = _load_app("lp_run_plugins_app_ok")
    monkeypatch.setattr(
        sys, "argv", ["run_plugins", "--config", str(REPO_ROOT / "liveplug.yaml"), "hello_world"]
    )

    assert app.main() == 0
    assert "Ran 1 plugin(s), 0 failed" in capsys.readouterr().out


def test_cli_closes_dispatcher_when_pumping_fails(monkeypatch) -> None:
    app = _load_app("lp_run_plugins_app_failing")
    created: list[TaskQueueDispatcher] = []

    class _BrokenPumpDispatcher(TaskQueueDispatcher):
        def __init__(self) -> None:
            super().__init__()
            created.append(self)

        def run_until(self, future, *, poll_interval: float = 0.05) -> None:
            raise RuntimeError("pump failed")

    monkeypatch.setattr(app, "TaskQueueDispatcher", _BrokenPumpDispatcher)
    monkeypatch.setattr(
        sys, "argv", ["run_plugins", "--config", str(REPO_ROOT / "liveplug.yaml"), "hello_world"]
    )

    with pytest.raises(RuntimeError, match="pump failed"):
        app.main()

    [dispatcher] = created
    assert dispatcher.closed
