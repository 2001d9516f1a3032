from __future__ import annotations

import os
import re
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from liveplug.contracts import EngineConfig

PLUGINS_PATH_VAR = "LIVEPLUG_PLUGINS_PATH"
LIBS_PATH_VAR = "LIVEPLUG_LIBS"

_ENV_VAR_PATTERN = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)\}")


class ConfigError(ValueError):
    pass


def load_yaml(path: str | Path) -> dict[str, Any]:
    with Path(path).open("r", encoding="utf-8") as handle:
        payload = yaml.safe_load(handle) or {}
    if not isinstance(payload, dict):
        raise ConfigError(f"YAML root must be a mapping: {path}")
    return payload


def load_engine_config(path: str | Path) -> EngineConfig:
    """Load an engine config; relative directories are anchored at the config file."""
    payload = resolve_env_vars(load_yaml(path))
    try:
        config = EngineConfig.model_validate(payload)
    except ValidationError as exc:
        raise ConfigError(format_validation_error("engine", exc)) from exc

    base_dir = Path(path).resolve().parent
    updates: dict[str, Any] = {"plugins_dir": str(base_dir / config.plugins_dir)}
    if config.libs_dir is not None:
        updates["libs_dir"] = str(base_dir / config.libs_dir)
    return config.model_copy(update=updates)


def resolve_env_vars(payload: Any) -> Any:
    return _resolve_env_vars(payload, path="$")


def _resolve_env_vars(payload: Any, *, path: str) -> Any:
    if isinstance(payload, Mapping):
        return {
            str(key): _resolve_env_vars(value, path=f"{path}.{key}")
            for key, value in payload.items()
        }
    if isinstance(payload, list):
        return [
            _resolve_env_vars(value, path=f"{path}[{index}]") for index, value in enumerate(payload)
        ]
    if isinstance(payload, str):
        return _substitute_env(payload, path=path)
    return payload


def _substitute_env(value: str, *, path: str) -> str:
    def replace(match: re.Match[str]) -> str:
        key = match.group(1)
        env_value = os.environ.get(key)
        if env_value is None:
            raise ConfigError(f"Missing environment variable '{key}' at {path}")
        return env_value

    return _ENV_VAR_PATTERN.sub(replace, value)


def build_environment(
    *,
    plugins_path: str | None = None,
    libs_path: str | None = None,
    extra: Mapping[str, str] | None = None,
    base: Mapping[str, str] | None = None,
) -> dict[str, str]:
    """
    Snapshot of the variables visible to classpath directives.

    Starts from the process environment (or `base`), then adds host entries.
    """
    environment = dict(os.environ if base is None else base)
    if plugins_path is not None:
        environment[PLUGINS_PATH_VAR] = plugins_path
    if libs_path is not None:
        environment[LIBS_PATH_VAR] = libs_path
    environment.update(extra or {})
    return environment


def environment_from_config(config: EngineConfig) -> dict[str, str]:
    return build_environment(
        plugins_path=config.plugins_dir,
        libs_path=config.libs_dir,
        extra=config.environment,
    )


def format_validation_error(prefix: str, exc: ValidationError) -> str:
    details: list[str] = []
    for error in exc.errors(include_url=False):
        loc = ".".join(str(part) for part in error["loc"])
        details.append(f"{prefix}.{loc}: {error['msg']}" if loc else f"{prefix}: {error['msg']}")
    return "; ".join(details)
