from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

from textkit import slugify


def greet(binding: Mapping[str, Any], *, greeting: str) -> None:
    plugin_name = slugify(Path(binding["plugin_path"]).name)
    binding["logger"].info("%s from %s", greeting, plugin_name)
