"""
Background workers for the Error Code Viewer application.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

from PySide6.QtCore import QObject, QThread, Signal, Slot

from ..core import ViewerError

logger = logging.getLogger(__name__)


@dataclass
class TaskResult:
    """Outcome of one background task, tagged with its request generation."""
    generation: int
    ok: bool
    value: Any = None
    error_message: Optional[str] = None


class RequestTracker:
    """
    Hands out request generations for one surface.

    Only the newest generation is current; results from older requests are
    dropped instead of being applied.
    """

    def __init__(self):
        self._generation = 0

    @property
    def generation(self) -> int:
        return self._generation

    def next(self) -> int:
        """Start a new request, making every earlier one stale."""
        self._generation += 1
        return self._generation

    def is_current(self, generation: int) -> bool:
        return generation == self._generation


class TaskWorker(QThread):
    """Runs one callable off the GUI thread and reports a TaskResult."""

    finished_with_result = Signal(object)

    def __init__(self, generation: int, func: Callable[..., Any], *args: Any, **kwargs: Any):
        super().__init__()
        self.generation = generation
        self.func = func
        self.args = args
        self.kwargs = kwargs

    def run(self) -> None:
        try:
            value = self.func(*self.args, **self.kwargs)
            result = TaskResult(generation=self.generation, ok=True, value=value)
        except ViewerError as exc:
            result = TaskResult(generation=self.generation, ok=False, error_message=str(exc))
        except Exception as exc:  # noqa: BLE001
            logger.exception("Background task failed")
            result = TaskResult(generation=self.generation, ok=False, error_message=str(exc))

        # Emit result back to the main (GUI) thread.
        self.finished_with_result.emit(result)


class TaskRunner(QObject):
    """
    Starts TaskWorkers and keeps each one alive until its thread has stopped.

    Results are handed to the callback given at start, unless a newer request
    on the same tracker has started since. A worker is released (and deleted)
    only on QThread.finished, never from its result signal, which is emitted
    while run() is still executing.
    """

    worker_class = TaskWorker

    def __init__(self, parent: Optional[QObject] = None):
        super().__init__(parent)
        self._tasks: dict[TaskWorker, tuple[RequestTracker, Callable[[TaskResult], None]]] = {}

    @property
    def active_count(self) -> int:
        return len(self._tasks)

    def start(
        self,
        tracker: RequestTracker,
        callback: Callable[[TaskResult], None],
        func: Callable[..., Any],
        *args: Any,
        **kwargs: Any
    ) -> TaskWorker:
        """Run func in a new worker tagged with the tracker's next generation."""
        worker = self.worker_class(tracker.next(), func, *args, **kwargs)
        self._tasks[worker] = (tracker, callback)
        worker.finished_with_result.connect(self._on_result)
        worker.finished.connect(self._on_thread_finished)
        worker.start()
        return worker

    @Slot(object)
    def _on_result(self, result: TaskResult) -> None:
        task = self._tasks.get(self.sender())
        if task is None:
            return

        tracker, callback = task
        if not tracker.is_current(result.generation):
            logger.debug("Dropping stale result (generation %d)", result.generation)
            return
        callback(result)

    @Slot()
    def _on_thread_finished(self) -> None:
        worker = self.sender()
        if self._tasks.pop(worker, None) is not None:
            worker.deleteLater()

    def wait_all(self) -> None:
        """Block until every running worker has stopped."""
        for worker in list(self._tasks):
            worker.wait()
