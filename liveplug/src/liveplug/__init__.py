"""Run script plugins discovered on disk inside isolated import scopes."""

__version__ = "0.1.0"
