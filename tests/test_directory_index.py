"""Filesystem index tests: scanning, dated naming, creation, and deletion."""

from __future__ import annotations

import tempfile
import unittest
from datetime import date
from pathlib import Path
from unittest import mock

from lazytry.directory_index import DirectoryIndex, normalize_name
from lazytry.errors import FilesystemError, ValidationFailed, WorktreeUnregisterFailed

TODAY = date(2025, 6, 1)


def make_index(root: Path) -> DirectoryIndex:
    return DirectoryIndex(root, today=lambda: TODAY)


class NormalizeNameTests(unittest.TestCase):
    def test_lowercases_and_dashes_spaces(self) -> None:
        self.assertEqual(normalize_name("My Cool Idea"), "my-cool-idea")

    def test_empty_becomes_default(self) -> None:
        self.assertEqual(normalize_name("   "), "experiment")

    def test_rejects_path_separators(self) -> None:
        for bad in ("a/b", "a\\b", "..", "."):
            with self.assertRaises(ValidationFailed):
                normalize_name(bad)


class DirectoryIndexTests(unittest.TestCase):
    def test_scan_missing_root_is_empty(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            self.assertEqual(make_index(Path(tmp) / "missing").scan(), [])

    def test_scan_reports_directories_and_git_markers(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            (root / "2025-01-01-plain").mkdir()
            (root / "2025-01-02-repo" / ".git").mkdir(parents=True)
            (root / "2025-01-03-tree").mkdir()
            (root / "2025-01-03-tree" / ".git").write_text("gitdir: /elsewhere/.git/worktrees/tree\n")
            (root / "notes.txt").write_text("not a directory")

            by_name = {candidate.name: candidate for candidate in make_index(root).scan()}

        self.assertEqual(set(by_name), {"2025-01-01-plain", "2025-01-02-repo", "2025-01-03-tree"})
        self.assertFalse(by_name["2025-01-01-plain"].is_git_repo)
        self.assertTrue(by_name["2025-01-02-repo"].is_git_repo)
        self.assertTrue(by_name["2025-01-03-tree"].is_worktree)
        self.assertFalse(by_name["2025-01-03-tree"].is_git_repo)

    def test_dated_name_appends_collision_suffixes(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            index = make_index(root)
            self.assertEqual(index.dated_name("Idea"), "2025-06-01-idea")
            (root / "2025-06-01-idea").mkdir()
            self.assertEqual(index.dated_name("idea"), "2025-06-01-idea-1")
            (root / "2025-06-01-idea-1").mkdir()
            self.assertEqual(index.dated_name("idea"), "2025-06-01-idea-2")

    def test_create_makes_root_and_directory(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp) / "tries"
            index = make_index(root)
            first = index.create("new thing")
            second = index.create("new thing")
            self.assertTrue(first.is_dir())
            self.assertTrue(first.is_absolute())
            self.assertEqual(first.name, "2025-06-01-new-thing")
            self.assertEqual(second.name, "2025-06-01-new-thing-1")

    def test_allocate_does_not_create(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            path = make_index(root).allocate("")
            self.assertEqual(path, root / "2025-06-01-experiment")
            self.assertFalse(path.exists())

    def test_delete_removes_tree(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            target = root / "2025-01-01-doomed"
            (target / "nested").mkdir(parents=True)
            (target / "nested" / "file.txt").write_text("x")
            make_index(root).delete(target)
            self.assertFalse(target.exists())

    def test_delete_refuses_paths_outside_root(self) -> None:
        with tempfile.TemporaryDirectory() as tmp, tempfile.TemporaryDirectory() as other:
            outside = Path(other) / "keep"
            outside.mkdir()
            index = make_index(Path(tmp))
            with self.assertRaises(FilesystemError):
                index.delete(outside)
            with self.assertRaises(FilesystemError):
                index.delete(Path(tmp))
            self.assertTrue(outside.exists())

    def test_delete_missing_directory_fails(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            with self.assertRaises(FilesystemError):
                make_index(Path(tmp)).delete(Path(tmp) / "gone")

    def test_worktree_unregister_failure_is_logged_and_removal_continues(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            target = root / "2025-01-01-tree"
            target.mkdir()
            (target / ".git").write_text("gitdir: /nowhere/.git/worktrees/tree\n")
            with mock.patch(
                "lazytry.directory_index.git.remove_worktree",
                side_effect=WorktreeUnregisterFailed("boom"),
            ) as remove, self.assertLogs("lazytry.directory_index", level="WARNING") as logs:
                make_index(root).delete(target)
            remove.assert_called_once_with(target)
            self.assertFalse(target.exists())
            self.assertIn("boom", "\n".join(logs.output))


if __name__ == "__main__":
    unittest.main()
