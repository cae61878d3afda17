"""Errors raised around background job dispatch and execution."""

from __future__ import annotations


class TaskIQError(Exception):
    """Base for job errors.

    ``transient`` tells operators whether the broker's retry can help or the
    job should be parked for inspection.
    """

    transient: bool = False


class TaskIQDispatchError(TaskIQError):
    """No task is registered under the requested job name.

    Producer and worker disagree about the task modules they import, so a
    retry cannot succeed.
    """

    def __init__(self, task_name: str) -> None:
        self.task_name = task_name
        super().__init__(f"No task registered under name '{task_name}'")
