from __future__ import annotations

import os
from pathlib import Path


class AmbiguousEntryScriptError(RuntimeError):
    pass


def all_files_in_directory(directory: str | Path) -> list[Path]:
    """List files under `directory` recursively; unreadable folders are skipped."""
    result: list[Path] = []
    for dirpath, dirnames, filenames in os.walk(directory):
        dirnames.sort()
        for filename in sorted(filenames):
            result.append(Path(dirpath) / filename)
    return result


def find_single_file(directory: str | Path, file_name: str) -> Path | None:
    matches = [path for path in all_files_in_directory(directory) if path.name == file_name]
    if not matches:
        return None
    if len(matches) > 1:
        found = ", ".join(str(path) for path in matches)
        raise AmbiguousEntryScriptError(
            f"Found several {file_name} files under {directory}: {found}"
        )
    return matches[0]
