"""Runtime tests: background runner, intent execution, and the event loop.

The loop is driven with a scripted key source and a recording terminal so no
real tty is needed.
"""

from __future__ import annotations

import contextlib
import subprocess
import sys
import tempfile
import textwrap
import threading
import unittest
from datetime import date, datetime
from pathlib import Path
from unittest import mock

from lazytry.directory_index import DirectoryIndex
from lazytry.errors import FilesystemError
from lazytry.runtime.app import IntentExecutor, worktree_branch_name
from lazytry.runtime.loop import RuntimeLoopTiming, run_main_loop
from lazytry.runtime.tasks import BackgroundTaskRunner
from lazytry.selection import (
    CreateWorktree,
    Error,
    ModeKind,
    SelectionController,
    TaskFailed,
    TaskKind,
    TaskSucceeded,
)

TODAY = date(2025, 6, 1)
PROJECT_ROOT = Path(__file__).resolve().parent.parent


class RecordingTerminal:
    def __init__(self) -> None:
        self.frames: list[list[str]] = []
        self.entered = 0

    @contextlib.contextmanager
    def raw_mode(self):
        self.entered += 1
        yield

    def write_frame(self, lines: list[str]) -> None:
        self.frames.append(lines)


class BackgroundTaskRunnerTests(unittest.TestCase):
    def test_posts_exactly_one_result_per_task(self) -> None:
        runner = BackgroundTaskRunner()
        self.assertTrue(runner.submit(TaskKind.SCAN, lambda: TaskSucceeded(TaskKind.SCAN)))
        runner.join(timeout=5)
        self.assertEqual(runner.drain_results(), [TaskSucceeded(TaskKind.SCAN)])
        self.assertEqual(runner.drain_results(), [])

    def test_refuses_a_second_task_of_the_same_kind(self) -> None:
        runner = BackgroundTaskRunner()
        release = threading.Event()

        def slow() -> TaskSucceeded:
            release.wait(5)
            return TaskSucceeded(TaskKind.CLONE)

        self.assertTrue(runner.submit(TaskKind.CLONE, slow))
        self.assertTrue(runner.is_running(TaskKind.CLONE))
        self.assertFalse(runner.submit(TaskKind.CLONE, slow))
        self.assertTrue(runner.submit(TaskKind.SCAN, lambda: TaskSucceeded(TaskKind.SCAN)))
        release.set()
        runner.join(timeout=5)
        self.assertFalse(runner.is_running(TaskKind.CLONE))
        kinds = sorted(result.kind.value for result in runner.drain_results())
        self.assertEqual(kinds, ["clone", "scan"])

    def test_exceptions_become_failures(self) -> None:
        runner = BackgroundTaskRunner()

        def broken() -> TaskSucceeded:
            raise FilesystemError("disk on fire")

        def crashing() -> TaskSucceeded:
            raise RuntimeError("unexpected")

        runner.submit(TaskKind.DELETE, broken)
        runner.submit(TaskKind.SCAN, crashing)
        runner.join(timeout=5)
        results = {result.kind: result for result in runner.drain_results()}
        self.assertEqual(results[TaskKind.DELETE], TaskFailed(TaskKind.DELETE, "disk on fire"))
        self.assertEqual(results[TaskKind.SCAN], TaskFailed(TaskKind.SCAN, "unexpected"))

    def test_mutating_task_finishes_after_the_session_ends(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            marker = Path(tmp) / "done"
            script = textwrap.dedent(
                f"""
                import time
                from pathlib import Path
                from lazytry.runtime.tasks import BackgroundTaskRunner
                from lazytry.selection import TaskKind, TaskSucceeded

                def work():
                    time.sleep(0.5)
                    Path({str(marker)!r}).write_text("ok")
                    return TaskSucceeded(TaskKind.DELETE)

                BackgroundTaskRunner().submit(TaskKind.DELETE, work)
                """
            )
            completed = subprocess.run(
                [sys.executable, "-c", script],
                cwd=PROJECT_ROOT,
                capture_output=True,
                text=True,
                timeout=30,
            )
            self.assertEqual(completed.returncode, 0, completed.stderr)
            self.assertTrue(marker.exists())

    def test_only_scans_run_on_daemon_threads(self) -> None:
        runner = BackgroundTaskRunner()
        release = threading.Event()
        seen: dict[TaskKind, bool] = {}

        def work_for(kind: TaskKind):
            def work():
                seen[kind] = threading.current_thread().daemon
                release.wait(5)
                return TaskSucceeded(kind)

            return work

        for kind in (TaskKind.SCAN, TaskKind.DELETE, TaskKind.CLONE):
            runner.submit(kind, work_for(kind))
        release.set()
        runner.join(timeout=5)
        self.assertEqual(seen, {TaskKind.SCAN: True, TaskKind.DELETE: False, TaskKind.CLONE: False})


class IntentExecutorTests(unittest.TestCase):
    def _setup(self, root: Path, query: str = "") -> tuple[SelectionController, IntentExecutor]:
        index = DirectoryIndex(root, today=lambda: TODAY)
        controller = SelectionController(index.scan(), query=query)
        return controller, IntentExecutor(index, controller, BackgroundTaskRunner(), clock=lambda: 1700000000.0)

    def test_create_runs_synchronously_and_finishes(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            controller, executor = self._setup(root, query="new idea")
            self.assertTrue(executor.execute(controller.handle_key("ENTER_CR")))
            self.assertEqual(controller.outcome.path, (root / "2025-06-01-new-idea").absolute())
            self.assertTrue((root / "2025-06-01-new-idea").is_dir())

    def test_invalid_create_reports_error(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            controller, executor = self._setup(Path(tmp), query="a/b")
            self.assertFalse(executor.execute(controller.handle_key("ENTER_CR")))
            self.assertIsInstance(controller.mode, Error)
            self.assertFalse(controller.finished)

    def test_delete_runs_in_background_and_updates_list(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            (root / "2025-01-01-doomed").mkdir()
            (root / "2025-01-02-keep").mkdir()
            controller, executor = self._setup(root, query="doomed")
            controller.handle_key("CTRL_D")
            for ch in "yes":
                controller.handle_key(ch)
            self.assertFalse(executor.execute(controller.handle_key("ENTER_CR")))
            executor.runner.join(timeout=5)
            self.assertTrue(executor.apply_results())

            self.assertFalse((root / "2025-01-01-doomed").exists())
            self.assertEqual([c.name for c in controller.candidates], ["2025-01-02-keep"])
            self.assertNotIn(TaskKind.DELETE, controller.in_flight)

    def test_reload_picks_up_new_directories(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            controller, executor = self._setup(root)
            (root / "2025-06-01-late").mkdir()
            executor.execute(controller.request_reload())
            executor.runner.join(timeout=5)
            executor.apply_results()
            self.assertEqual([c.name for c in controller.candidates], ["2025-06-01-late"])

    def test_worktree_failure_surfaces_as_error(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            controller, executor = self._setup(root)
            intent = CreateWorktree(root / "not-a-repo", "wt")
            controller.in_flight.add(TaskKind.WORKTREE)
            with mock.patch("lazytry.runtime.app.worktree_into_root", side_effect=FilesystemError("nope")) as add:
                executor.execute(intent)
                executor.runner.join(timeout=5)
                executor.apply_results()
            add.assert_called_once_with(executor.index, root / "not-a-repo", "wt", "worktree-wt-1700000000")
            self.assertEqual(controller.mode, Error(message="nope", origin=ModeKind.CREATING_WORKTREE, buffer=""))

    def test_branch_name_is_normalized_and_stamped(self) -> None:
        self.assertEqual(worktree_branch_name("My Feature", 1700000000.9), "worktree-my-feature-1700000000")


class MainLoopTests(unittest.TestCase):
    def _run(self, root: Path, keys: list[str], query: str = "") -> tuple[SelectionController, RecordingTerminal]:
        index = DirectoryIndex(root, today=lambda: TODAY)
        controller = SelectionController(index.scan(), query=query, clock=lambda: datetime(2025, 6, 1))
        executor = IntentExecutor(index, controller, BackgroundTaskRunner())
        terminal = RecordingTerminal()
        script = iter(keys)
        with mock.patch("lazytry.runtime.loop.read_key", side_effect=lambda fd, timeout_ms=None: next(script)):
            run_main_loop(controller, terminal, 0, executor, RuntimeLoopTiming(key_timeout_ms=1))
        return controller, terminal

    def test_typing_then_enter_selects_match(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            (root / "2025-01-01-alpha").mkdir()
            (root / "2025-01-01-beta").mkdir()
            controller, terminal = self._run(root, ["b", "e", "", "ENTER_CR"])
            self.assertEqual(controller.outcome.path, root / "2025-01-01-beta")
            self.assertEqual(terminal.entered, 1)
            self.assertGreaterEqual(len(terminal.frames), 3)

    def test_escape_on_empty_query_cancels(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            controller, _terminal = self._run(Path(tmp), ["ESC"])
            self.assertTrue(controller.outcome.cancelled)
            self.assertIsNone(controller.outcome.path)

    def test_crlf_enter_confirms_once(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            (root / "2025-01-01-demo").mkdir()
            controller, _terminal = self._run(root, ["CTRL_D", "n", "o", "ENTER_CR", "ENTER_LF", "CTRL_C"])
            # The LF half of CRLF must not select the entry behind the closed prompt.
            self.assertTrue(controller.outcome.cancelled)
            self.assertTrue((root / "2025-01-01-demo").exists())


if __name__ == "__main__":
    unittest.main()
