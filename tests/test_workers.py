"""
Tests for background task plumbing and dialog helpers.
"""
import time

from PySide6.QtCore import QCoreApplication, QEvent

from errorcode_viewer.app.dialogs import clean_links, split_lines
from errorcode_viewer.app.workers import (
    RequestTracker,
    TaskResult,
    TaskRunner,
    TaskWorker,
)
from errorcode_viewer.core import ManualLink, SourceUnavailableError


class TestRequestTracker:
    """Tests for RequestTracker."""

    def test_newest_generation_wins(self):
        tracker = RequestTracker()
        first = tracker.next()
        second = tracker.next()

        assert tracker.generation == second
        assert tracker.is_current(second)
        assert not tracker.is_current(first)

    def test_starts_with_nothing_current(self):
        tracker = RequestTracker()
        assert tracker.generation == 0
        assert not tracker.is_current(1)


class TestTaskWorker:
    """Tests for TaskWorker, run synchronously."""

    def _run(self, worker):
        results = []
        worker.finished_with_result.connect(results.append)
        worker.run()
        return results

    def test_success(self, qapp):
        worker = TaskWorker(3, lambda a, b=0: a + b, 2, b=5)

        results = self._run(worker)

        assert results == [TaskResult(generation=3, ok=True, value=7)]

    def test_viewer_error(self, qapp):
        def fail():
            raise SourceUnavailableError("Cannot reach http://api.test")

        results = self._run(TaskWorker(1, fail))

        assert len(results) == 1
        assert not results[0].ok
        assert results[0].generation == 1
        assert results[0].error_message == "Cannot reach http://api.test"

    def test_unexpected_error(self, qapp):
        def fail():
            raise KeyError("boom")

        results = self._run(TaskWorker(2, fail))

        assert not results[0].ok
        assert "boom" in results[0].error_message


def wait_until(app, predicate, timeout=5.0):
    """Process Qt events until predicate() holds or the timeout expires."""
    deadline = time.monotonic() + timeout
    while not predicate() and time.monotonic() < deadline:
        app.processEvents()
        time.sleep(0.01)
    app.processEvents()
    return predicate()


def flush_deferred_deletes():
    QCoreApplication.sendPostedEvents(None, QEvent.Type.DeferredDelete)


class LingeringWorker(TaskWorker):
    """Keeps its thread alive for a moment after reporting the result."""

    def run(self) -> None:
        super().run()
        time.sleep(0.3)


class TestTaskRunner:
    """Tests for TaskRunner."""

    def test_result_delivered_and_worker_released(self, qapp):
        runner = TaskRunner()
        tracker = RequestTracker()
        results = []

        runner.start(tracker, results.append, lambda: 42)

        assert wait_until(qapp, lambda: runner.active_count == 0)
        flush_deferred_deletes()
        assert [r.value for r in results] == [42]

    def test_worker_kept_until_thread_stops(self, qapp):
        runner = TaskRunner()
        runner.worker_class = LingeringWorker
        tracker = RequestTracker()
        seen = []

        worker = runner.start(
            tracker,
            lambda result: seen.append((result.value, runner.active_count)),
            lambda: "done"
        )

        assert wait_until(qapp, lambda: bool(seen))
        # The result arrived while run() is still sleeping
        flush_deferred_deletes()
        assert seen == [("done", 1)]
        assert runner.active_count == 1
        assert worker.isRunning()

        assert wait_until(qapp, lambda: runner.active_count == 0)
        flush_deferred_deletes()

    def test_stale_result_dropped(self, qapp):
        runner = TaskRunner()
        tracker = RequestTracker()
        results = []

        runner.start(tracker, results.append, time.sleep, 0.2)
        runner.start(tracker, results.append, lambda: "newest")

        assert wait_until(qapp, lambda: runner.active_count == 0)
        flush_deferred_deletes()
        assert [r.value for r in results] == ["newest"]

    def test_wait_all(self, qapp):
        runner = TaskRunner()
        results = []

        runner.start(RequestTracker(), results.append, time.sleep, 0.1)
        runner.wait_all()

        assert wait_until(qapp, lambda: runner.active_count == 0)
        flush_deferred_deletes()
        assert len(results) == 1
        assert results[0].ok

class TestDialogHelpers:
    """Tests for the record form helpers."""

    def test_split_lines(self):
        text = "  Falla en el circuito \n\n  Capacitor dañado\n   \n"
        assert split_lines(text) == ["Falla en el circuito", "Capacitor dañado"]
        assert split_lines("") == []

    def test_clean_links(self):
        pairs = [
            (" Manual ", " https://x.test/manual.pdf "),
            ("", "https://x.test/other"),
            ("No url", "  "),
        ]

        assert clean_links(pairs) == [ManualLink("Manual", "https://x.test/manual.pdf")]
