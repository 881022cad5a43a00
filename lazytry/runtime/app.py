"""Runtime composition layer for the picker.

Builds the index, scorer, and controller for one session, executes the
intents the controller emits, and starts the event loop.
"""

from __future__ import annotations

import logging
import os
import sys
import time
from collections.abc import Callable
from pathlib import Path

from .. import git
from ..config import load_half_life_days
from ..directory_index import DirectoryIndex, normalize_name
from ..errors import LazyTryError
from ..scoring import Scorer
from ..selection import (
    CloneRepository,
    CreateDirectory,
    CreateWorktree,
    DeleteDirectory,
    Intent,
    Quit,
    ReloadCandidates,
    SelectionController,
    SelectPath,
    SessionOutcome,
    TaskFailed,
    TaskIntent,
    TaskKind,
    TaskResult,
    TaskSucceeded,
)
from .loop import RuntimeLoopTiming, run_main_loop
from .tasks import BackgroundTaskRunner
from .terminal import TerminalController

logger = logging.getLogger(__name__)


def worktree_branch_name(name: str, timestamp: float) -> str:
    """Unique branch for a picker-created worktree."""
    return f"worktree-{normalize_name(name)}-{int(timestamp)}"


def clone_into_root(index: DirectoryIndex, url: str) -> Path:
    """Clone ``url`` into a fresh dated directory under the root."""
    destination = index.allocate(git.repo_name_from_url(url))
    return git.clone(url, destination).absolute()


def worktree_into_root(
    index: DirectoryIndex,
    repo_path: Path,
    name: str,
    branch: str | None = None,
) -> Path:
    """Add a worktree of ``repo_path`` as a fresh dated directory."""
    destination = index.allocate(name)
    return git.add_worktree(repo_path, destination, branch).absolute()


class IntentExecutor:
    """Carry out controller intents against the index, git, and the runner.

    Directory creation is synchronous; deletion, cloning, worktree creation
    and rescans run on the background runner and report back through
    :meth:`apply_results`.
    """

    def __init__(
        self,
        index: DirectoryIndex,
        controller: SelectionController,
        runner: BackgroundTaskRunner,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.index = index
        self.controller = controller
        self.runner = runner
        self._clock = clock

    def execute(self, intent: Intent | None) -> bool:
        """Run ``intent`` and any follow-ups; return whether input should stop."""
        while intent is not None:
            if isinstance(intent, (SelectPath, Quit)):
                return True
            if isinstance(intent, CreateDirectory):
                intent = self.controller.handle_task_result(self._create(intent))
                continue
            intent = self._submit(intent)
        return self.controller.finished

    def apply_results(self) -> bool:
        """Feed finished background work to the controller; True if any."""
        results = self.runner.drain_results()
        for result in results:
            self.execute(self.controller.handle_task_result(result))
        return bool(results)

    def _create(self, intent: CreateDirectory) -> TaskResult:
        try:
            path = self.index.create(intent.name)
        except LazyTryError as exc:
            logger.info("create failed: %s", exc)
            return TaskFailed(TaskKind.CREATE, str(exc))
        return TaskSucceeded(TaskKind.CREATE, path=path)

    def _submit(self, intent: TaskIntent) -> Intent | None:
        work = self._work_for(intent)
        if self.runner.submit(intent.task_kind, work):
            return None
        return self.controller.handle_task_result(
            TaskFailed(intent.task_kind, f"{intent.task_kind.value} already in progress")
        )

    def _work_for(self, intent: TaskIntent) -> Callable[[], TaskResult]:
        index = self.index
        if isinstance(intent, DeleteDirectory):
            path = intent.candidate.path

            def delete() -> TaskResult:
                index.delete(path)
                return TaskSucceeded(TaskKind.DELETE, path=path)

            return delete
        if isinstance(intent, CloneRepository):
            url = intent.url

            def clone() -> TaskResult:
                return TaskSucceeded(TaskKind.CLONE, path=clone_into_root(index, url))

            return clone
        if isinstance(intent, CreateWorktree):
            repo_path, name = intent.repo_path, intent.name
            stamp = self._clock()

            def add_worktree() -> TaskResult:
                branch = worktree_branch_name(name, stamp)
                return TaskSucceeded(
                    TaskKind.WORKTREE,
                    path=worktree_into_root(index, repo_path, name, branch),
                )

            return add_worktree
        if isinstance(intent, ReloadCandidates):

            def scan() -> TaskResult:
                return TaskSucceeded(TaskKind.SCAN, candidates=tuple(index.scan()))

            return scan
        raise TypeError(f"not a background intent: {intent!r}")


def run_picker(
    root: Path,
    query: str = "",
    half_life_days: float | None = None,
    timing: RuntimeLoopTiming | None = None,
) -> SessionOutcome:
    """Run one interactive picker session over ``root``.

    Returns the session outcome; ``path`` is the directory to hand off to the
    shell, or ``None`` when the user cancelled without creating anything.
    """
    if not os.isatty(sys.stdin.fileno()):
        raise LazyTryError("the interactive picker needs a terminal on stdin")

    index = DirectoryIndex(root)
    index.ensure_root()
    scorer = Scorer(load_half_life_days() if half_life_days is None else half_life_days)
    controller = SelectionController(index.scan(), query=query, scorer=scorer)
    runner = BackgroundTaskRunner()
    executor = IntentExecutor(index, controller, runner)

    stdin_fd = sys.stdin.fileno()
    stdout_fd = sys.stdout.fileno()
    terminal = TerminalController(stdin_fd, stdout_fd)
    logger.debug("picker started on %s with %d candidates", root, len(controller.candidates))
    run_main_loop(controller, terminal, stdin_fd, executor, timing)

    outcome = controller.outcome or SessionOutcome(path=controller.fallback_path, cancelled=True)
    logger.debug("picker finished: %s", outcome)
    return outcome
