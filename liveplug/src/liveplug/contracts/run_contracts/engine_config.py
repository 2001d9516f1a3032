from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

RunnerName = Literal["python", "manifest"]


class EngineConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    plugins_dir: str = Field(min_length=1)
    libs_dir: str | None = None
    environment: dict[str, str] = Field(default_factory=dict)
    runners: list[RunnerName] = Field(default_factory=lambda: ["python", "manifest"])
    startup_plugins: list[str] = Field(default_factory=list)

    @field_validator("runners")
    @classmethod
    def _unique_runners(cls, value: list[str]) -> list[str]:
        if not value:
            raise ValueError("at least one runner is required")
        if len(set(value)) != len(value):
            raise ValueError("runners must not repeat")
        return value
