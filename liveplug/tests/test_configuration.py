from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest
import yaml

from liveplug.configuration import (
    LIBS_PATH_VAR,
    PLUGINS_PATH_VAR,
    ConfigError,
    build_environment,
    environment_from_config,
    load_engine_config,
    resolve_env_vars,
)
from liveplug.contracts import EngineConfig


def _write_yaml(path: Path, payload: Any) -> Path:
    path.write_text(yaml.safe_dump(payload, sort_keys=False), encoding="utf-8")
    return path


def test_load_engine_config_anchors_relative_dirs_at_config_file(tmp_path: Path) -> None:
    config_path = _write_yaml(
        tmp_path / "engine.yaml",
        {"plugins_dir": "plugins", "libs_dir": "shared/libs", "startup_plugins": ["hello"]},
    )

    config = load_engine_config(config_path)

    assert config.plugins_dir == str(tmp_path / "plugins")
    assert config.libs_dir == str(tmp_path / "shared" / "libs")
    assert config.runners == ["python", "manifest"]
    assert config.startup_plugins == ["hello"]


def test_load_engine_config_resolves_env_vars(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setenv("LP_TEST_PLUGINS", str(tmp_path / "elsewhere"))
    config_path = _write_yaml(
        tmp_path / "engine.yaml",
        {"plugins_dir": "${LP_TEST_PLUGINS}", "environment": {"MODE": "${LP_TEST_PLUGINS}/mode"}},
    )

    config = load_engine_config(config_path)

    assert config.plugins_dir == str(tmp_path / "elsewhere")
    assert config.libs_dir is None
    assert config.environment == {"MODE": f"{tmp_path / 'elsewhere'}/mode"}


def test_missing_env_var_names_its_location(monkeypatch) -> None:
    monkeypatch.delenv("LP_TEST_MISSING", raising=False)

    with pytest.raises(ConfigError, match=r"Missing environment variable 'LP_TEST_MISSING' at \$\.paths\[1\]"):
        resolve_env_vars({"paths": ["ok", "${LP_TEST_MISSING}"]})


def test_invalid_runner_names_are_reported_with_location(tmp_path: Path) -> None:
    config_path = _write_yaml(tmp_path / "engine.yaml", {"plugins_dir": "p", "runners": ["groovy"]})

    with pytest.raises(ConfigError, match=r"engine\.runners\.0"):
        load_engine_config(config_path)


@pytest.mark.parametrize(
    ("payload", "expected"),
    [
        ({"plugins_dir": "p", "runners": []}, "at least one runner is required"),
        ({"plugins_dir": "p", "runners": ["python", "python"]}, "runners must not repeat"),
        ({"plugins_dir": "p", "unknown": 1}, "engine.unknown"),
        ({}, "engine.plugins_dir"),
    ],
)
def test_engine_config_validation_errors(tmp_path: Path, payload: dict, expected: str) -> None:
    config_path = _write_yaml(tmp_path / "engine.yaml", payload)

    with pytest.raises(ConfigError) as excinfo:
        load_engine_config(config_path)

    assert expected in str(excinfo.value)


def test_yaml_root_must_be_a_mapping(tmp_path: Path) -> None:
    config_path = _write_yaml(tmp_path / "engine.yaml", ["plugins"])

    with pytest.raises(ConfigError, match="YAML root must be a mapping"):
        load_engine_config(config_path)


def test_build_environment_layers_host_entries_over_base() -> None:
    environment = build_environment(
        plugins_path="/srv/plugins",
        libs_path="/srv/libs",
        extra={"EXTRA": "1", LIBS_PATH_VAR: "/override"},
        base={"HOME": "/home/host"},
    )

    assert environment == {
        "HOME": "/home/host",
        PLUGINS_PATH_VAR: "/srv/plugins",
        LIBS_PATH_VAR: "/override",
        "EXTRA": "1",
    }


def test_build_environment_defaults_to_process_environment(monkeypatch) -> None:
    monkeypatch.setenv("LP_TEST_PROCESS", "visible")

    assert build_environment()["LP_TEST_PROCESS"] == "visible"


def test_environment_from_config_exports_plugin_and_lib_dirs(monkeypatch) -> None:
    monkeypatch.delenv(LIBS_PATH_VAR, raising=False)
    config = EngineConfig(plugins_dir="/srv/plugins", environment={"MODE": "dev"})

    environment = environment_from_config(config)

    assert environment[PLUGINS_PATH_VAR] == "/srv/plugins"
    assert LIBS_PATH_VAR not in environment
    assert environment["MODE"] == "dev"
