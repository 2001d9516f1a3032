from .plugin import PluginDescriptor, PluginRunner

__all__ = [
    "PluginDescriptor",
    "PluginRunner",
]
