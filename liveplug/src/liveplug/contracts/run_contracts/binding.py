from __future__ import annotations

import logging
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

HOST_CONTEXT = "host_context"
IS_STARTUP = "is_startup"
PLUGIN_PATH = "plugin_path"
LOGGER = "logger"

Binding = Mapping[str, Any]


def create_binding(
    plugin_path: str,
    *,
    plugin_id: str,
    host_context: Any,
    is_startup: bool,
) -> Binding:
    """Build the read-only set of values exposed to a running plugin."""
    return MappingProxyType(
        {
            HOST_CONTEXT: host_context,
            IS_STARTUP: is_startup,
            PLUGIN_PATH: plugin_path,
            LOGGER: logging.getLogger(f"liveplug.plugin.{plugin_id}"),
        }
    )
