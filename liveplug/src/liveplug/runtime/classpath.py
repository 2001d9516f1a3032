from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from pathlib import Path

ADD_TO_CLASSPATH_KEYWORD = "add-to-classpath"

_ENV_VAR_PATTERN = re.compile(r"\$(?:\{([A-Za-z_][A-Za-z0-9_]*)\}|([A-Za-z_][A-Za-z0-9_]*))")

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ClasspathEntry:
    raw_directive: str
    resolved_path: str
    exists: bool


def directive_marker(comment_prefix: str) -> str:
    """Return the line prefix that marks a classpath directive for a comment syntax."""
    return f"{comment_prefix} {ADD_TO_CLASSPATH_KEYWORD} "


def inline_environment_variables(text: str, environment: Mapping[str, str]) -> str:
    """
    Replace `$NAME` and `${NAME}` tokens with values from `environment`.

    Unknown names are left as they are. Substituted values are not scanned
    again, so each token is replaced at most once.
    """

    def replace(match: re.Match[str]) -> str:
        key = match.group(1) or match.group(2)
        value = environment.get(key)
        if value is None:
            return match.group(0)
        return value

    return _ENV_VAR_PATTERN.sub(replace, text)


def parse_classpath_entries(
    lines: Iterable[str],
    marker: str,
    environment: Mapping[str, str],
    *,
    base_dir: str | Path | None = None,
) -> list[ClasspathEntry]:
    entries: list[ClasspathEntry] = []
    for line in lines:
        if not line.startswith(marker):
            continue
        raw_path = line[len(marker) :].strip()
        path = inline_environment_variables(raw_path, environment)
        if path != raw_path:
            logger.info("Additional classpath with inlined env variables: %s", path)
        if base_dir is not None and path and not Path(path).is_absolute():
            path = str(Path(base_dir) / path)
        exists = bool(path) and Path(path).exists()
        entries.append(ClasspathEntry(raw_directive=line, resolved_path=path, exists=exists))
    return entries


def find_classpath_additions(
    lines: Iterable[str],
    marker: str,
    environment: Mapping[str, str],
    on_error: Callable[[str], None],
    *,
    base_dir: str | Path | None = None,
) -> list[str]:
    """
    Collect the dependency paths declared by classpath directives.

    Paths that do not exist are passed to `on_error` and left out. Order is
    preserved and duplicates are kept.
    """
    paths: list[str] = []
    for entry in parse_classpath_entries(lines, marker, environment, base_dir=base_dir):
        if entry.exists:
            paths.append(entry.resolved_path)
        else:
            on_error(entry.resolved_path)
    return paths
