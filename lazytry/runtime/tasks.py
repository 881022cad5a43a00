"""Background worker threads for collaborator tasks."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from queue import Empty, Queue

from ..errors import LazyTryError
from ..selection import TaskFailed, TaskKind, TaskResult

logger = logging.getLogger(__name__)

# Kinds that change the filesystem. Their threads are not daemons, so the
# interpreter waits for them at exit instead of killing them midway.
MUTATING_KINDS = frozenset({TaskKind.CREATE, TaskKind.DELETE, TaskKind.CLONE, TaskKind.WORKTREE})


class BackgroundTaskRunner:
    """Run at most one task per kind, each on its own thread.

    Scans run on daemon threads. Mutating tasks outlive the session: quitting
    stops input but the process exits only after they finish.

    Every started task posts exactly one ``TaskSucceeded`` or ``TaskFailed``
    message; the event loop collects them with :meth:`drain_results`.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._running: dict[TaskKind, threading.Thread] = {}
        self._results: Queue[TaskResult] = Queue()

    def is_running(self, kind: TaskKind) -> bool:
        with self._lock:
            return kind in self._running

    def submit(self, kind: TaskKind, work: Callable[[], TaskResult]) -> bool:
        """Start ``work`` in the background; refuse when ``kind`` is busy."""
        with self._lock:
            if kind in self._running:
                logger.debug("refusing %s task: already running", kind.value)
                return False
            worker = threading.Thread(
                target=self._worker,
                args=(kind, work),
                name=f"lazytry-{kind.value}",
                daemon=kind not in MUTATING_KINDS,
            )
            self._running[kind] = worker
        worker.start()
        return True

    def _worker(self, kind: TaskKind, work: Callable[[], TaskResult]) -> None:
        try:
            result = work()
        except LazyTryError as exc:
            logger.info("%s task failed: %s", kind.value, exc)
            result = TaskFailed(kind, str(exc))
        except Exception as exc:
            logger.exception("%s task crashed", kind.value)
            result = TaskFailed(kind, str(exc) or type(exc).__name__)
        with self._lock:
            self._running.pop(kind, None)
            self._results.put(result)

    def drain_results(self) -> list[TaskResult]:
        """Drain all completed task messages."""
        out: list[TaskResult] = []
        while True:
            try:
                out.append(self._results.get_nowait())
            except Empty:
                break
        return out

    def join(self, timeout: float | None = None) -> None:
        """Wait for every running task; used by tests and one-shot callers."""
        with self._lock:
            workers = list(self._running.values())
        for worker in workers:
            worker.join(timeout)


__all__ = ["BackgroundTaskRunner", "MUTATING_KINDS"]
