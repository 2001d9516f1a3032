from __future__ import annotations

from collections.abc import Callable

Task = Callable[[], None]

# Runs a task on the host's designated thread and blocks until it finished.
# A failure of the task (or of the handoff itself) is raised to the caller.
Dispatch = Callable[[Task], None]
