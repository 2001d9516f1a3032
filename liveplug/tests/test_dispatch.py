from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from liveplug.runtime.dispatch import (
    DedicatedThreadDispatcher,
    DispatchError,
    TaskQueueDispatcher,
    run_inline,
)


def test_run_inline_executes_on_calling_thread() -> None:
    ran_on: list[int] = []

    run_inline(lambda: ran_on.append(threading.get_ident()))

    assert ran_on == [threading.get_ident()]


def test_task_queue_dispatcher_runs_tasks_on_pumping_thread() -> None:
    dispatcher = TaskQueueDispatcher()
    ran_on: list[int] = []

    with ThreadPoolExecutor(max_workers=1) as pool:
        waiter = pool.submit(
            dispatcher.invoke_and_wait, lambda: ran_on.append(threading.get_ident())
        )
        dispatcher.run_until(waiter)

    assert ran_on == [threading.get_ident()]


def test_invoke_and_wait_blocks_until_task_completed() -> None:
    dispatcher = TaskQueueDispatcher()
    events: list[str] = []

    def worker() -> None:
        dispatcher.invoke_and_wait(lambda: events.append("task"))
        events.append("after")

    with ThreadPoolExecutor(max_workers=1) as pool:
        waiter = pool.submit(worker)
        dispatcher.run_until(waiter)

    assert events == ["task", "after"]


def test_task_failure_is_raised_in_waiting_thread() -> None:
    dispatcher = TaskQueueDispatcher()

    def failing_task() -> None:
        raise ValueError("task failed")

    with ThreadPoolExecutor(max_workers=1) as pool:
        waiter = pool.submit(dispatcher.invoke_and_wait, failing_task)
        with pytest.raises(ValueError, match="task failed"):
            dispatcher.run_until(waiter)


def test_invoke_from_designated_thread_runs_inline() -> None:
    dispatcher = TaskQueueDispatcher()
    assert dispatcher.run_pending(timeout=0) == 0
    events: list[str] = []

    dispatcher.invoke_and_wait(lambda: events.append("inline"))

    assert events == ["inline"]
    assert dispatcher.is_designated_thread()


def test_only_designated_thread_may_pump() -> None:
    dispatcher = TaskQueueDispatcher()
    dispatcher.run_pending(timeout=0)

    with ThreadPoolExecutor(max_workers=1) as pool:
        attempt = pool.submit(dispatcher.run_pending, 0)
        with pytest.raises(DispatchError):
            attempt.result()


def test_closed_dispatcher_rejects_tasks() -> None:
    dispatcher = TaskQueueDispatcher()
    dispatcher.close()

    with pytest.raises(DispatchError, match="closed"):
        dispatcher.invoke_and_wait(lambda: None)


def test_dedicated_thread_dispatcher_uses_its_own_thread() -> None:
    dispatcher = DedicatedThreadDispatcher(name="lp-test-designated")
    names: list[str] = []
    try:
        dispatcher(lambda: names.append(threading.current_thread().name))
        dispatcher(lambda: names.append(threading.current_thread().name))
    finally:
        dispatcher.close()

    assert names == ["lp-test-designated", "lp-test-designated"]
    assert dispatcher.closed
