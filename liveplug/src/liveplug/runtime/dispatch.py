from __future__ import annotations

import queue
import threading
from concurrent.futures import Future

from liveplug.contracts import Task


class DispatchError(RuntimeError):
    pass


def run_inline(task: Task) -> None:
    """Dispatch for hosts whose calling thread already is the designated thread."""
    task()


class TaskQueueDispatcher:
    """
    Hand tasks to one designated thread and wait for them.

    The designated thread is whichever thread pumps the queue through
    `run_pending`, `run_until` or `serve`. Calling `invoke_and_wait` from that
    thread runs the task directly instead of queueing it.
    """

    def __init__(self) -> None:
        self._tasks: queue.Queue[tuple[Task, Future[None]] | None] = queue.Queue()
        self._owner: int | None = None
        self._closed = threading.Event()
        self._lock = threading.Lock()

    def __call__(self, task: Task) -> None:
        self.invoke_and_wait(task)

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def is_designated_thread(self) -> bool:
        return self._owner == threading.get_ident()

    def invoke_and_wait(self, task: Task) -> None:
        if self.is_designated_thread():
            task()
            return
        future: Future[None] = Future()
        with self._lock:
            if self.closed:
                raise DispatchError("Dispatcher is closed")
            self._tasks.put((task, future))
        future.result()

    def run_pending(self, timeout: float | None = None) -> int:
        """Run queued tasks on the calling thread; wait up to `timeout` for the first one."""
        self._claim()
        executed = 0
        block = timeout is None or timeout > 0
        while True:
            try:
                item = self._tasks.get(block=block, timeout=timeout if block else None)
            except queue.Empty:
                return executed
            if item is None:
                return executed
            self._execute(*item)
            executed += 1
            block = False

    def run_until(self, future: Future, *, poll_interval: float = 0.05) -> None:
        """Pump tasks until `future` completes, then return or raise its outcome."""
        while not future.done():
            self.run_pending(timeout=poll_interval)
        self.run_pending(timeout=0)
        future.result()

    def serve(self) -> None:
        """Pump tasks until `close` is called."""
        self._claim()
        while not self.closed:
            item = self._tasks.get()
            if item is None:
                break
            self._execute(*item)

    def close(self) -> None:
        with self._lock:
            self._closed.set()
            self._fail_queued()
            self._tasks.put(None)

    def _claim(self) -> None:
        ident = threading.get_ident()
        if self._owner is None:
            self._owner = ident
        elif self._owner != ident:
            raise DispatchError("Tasks can only be pumped by the designated thread")

    def _fail_queued(self) -> None:
        while True:
            try:
                item = self._tasks.get_nowait()
            except queue.Empty:
                return
            if item is not None:
                item[1].set_exception(DispatchError("Dispatcher closed before the task ran"))

    @staticmethod
    def _execute(task: Task, future: Future[None]) -> None:
        if not future.set_running_or_notify_cancel():
            return
        try:
            task()
        except BaseException as exc:
            future.set_exception(exc)
        else:
            future.set_result(None)


class DedicatedThreadDispatcher(TaskQueueDispatcher):
    """Designated thread owned by the dispatcher itself."""

    def __init__(self, name: str = "liveplug-designated") -> None:
        super().__init__()
        self._thread = threading.Thread(target=self._serve, name=name, daemon=True)
        self._started = threading.Event()
        self._thread.start()
        self._started.wait()

    def _serve(self) -> None:
        self._claim()
        self._started.set()
        self.serve()

    def close(self, *, wait: bool = True) -> None:
        super().close()
        if wait and self._thread is not threading.current_thread():
            self._thread.join()
