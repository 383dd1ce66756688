"""
Tasks — the side effects the scheduler fires.

A task exposes a single no-argument ``execute()``; the scheduler never looks
at what it returns, except to drive it to completion when it is awaitable.
Plain callables are accepted everywhere a task is, via ``as_task``.
"""

from __future__ import annotations

import sys
from collections.abc import Callable
from typing import Any, Protocol, TextIO, runtime_checkable


@runtime_checkable
class Task(Protocol):
    """Protocol for schedulable side effects."""

    def execute(self) -> Any:
        """Run the side effect. A returned awaitable is run to completion."""
        ...


class FunctionTask:
    """Adapts a callable (sync or ``async def``) plus bound arguments into a Task."""

    def __init__(self, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> None:
        self.fn = fn
        self.args = args
        self.kwargs = kwargs

    def execute(self) -> Any:
        return self.fn(*self.args, **self.kwargs)

    def __repr__(self) -> str:
        name = getattr(self.fn, "__qualname__", repr(self.fn))
        return f"FunctionTask({name})"


class PrintingTask:
    """Writes a fixed message each time it fires."""

    def __init__(
        self,
        message: str = "Running printing Task... Goodbye",
        stream: TextIO | None = None,
    ) -> None:
        self.message = message
        self.stream = stream

    def execute(self) -> None:
        print(self.message, file=self.stream or sys.stdout, flush=True)

    def __repr__(self) -> str:
        return f"PrintingTask({self.message!r})"


def as_task(task: Task | Callable[[], Any]) -> Task:
    """Return ``task`` itself if it is a Task, otherwise wrap the callable."""
    if isinstance(task, Task):
        return task
    if callable(task):
        return FunctionTask(task)
    raise TypeError(f"Expected a Task or callable, got {type(task).__name__}")


__all__ = ["Task", "FunctionTask", "PrintingTask", "as_task"]
