"""Filesystem-backed index of date-stamped try directories."""

from __future__ import annotations

import logging
import os
import shutil
from collections.abc import Callable
from datetime import date, datetime
from pathlib import Path

from . import git
from .candidates import Candidate
from .errors import FilesystemError, ValidationFailed, WorktreeUnregisterFailed

logger = logging.getLogger(__name__)

DEFAULT_DIRECTORY_NAME = "experiment"
_MAX_COLLISION_SUFFIX = 10_000


def normalize_name(name: str) -> str:
    """Lower-case ``name`` and turn spaces into dashes; empty becomes a default."""
    cleaned = name.strip()
    if not cleaned:
        return DEFAULT_DIRECTORY_NAME
    if "/" in cleaned or "\\" in cleaned or cleaned in {".", ".."}:
        raise ValidationFailed(f"invalid directory name: {name!r}")
    return cleaned.replace(" ", "-").lower()


class DirectoryIndex:
    """Scan, allocate, create, and delete directories under one root."""

    def __init__(self, root: Path, today: Callable[[], date] | None = None) -> None:
        self.root = root
        self._today = date.today if today is None else today

    def ensure_root(self) -> Path:
        try:
            self.root.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise FilesystemError(f"cannot create try root {self.root}", exc) from exc
        return self.root

    def scan(self) -> list[Candidate]:
        """Snapshot every directory directly under the root.

        A missing root yields an empty list. Entries that vanish or cannot be
        stat'ed mid-scan are skipped.
        """
        if not self.root.is_dir():
            return []
        try:
            entries = list(os.scandir(self.root))
        except OSError as exc:
            raise FilesystemError(f"cannot read try root {self.root}", exc) from exc

        candidates: list[Candidate] = []
        for entry in entries:
            try:
                if not entry.is_dir():
                    continue
                mtime = entry.stat().st_mtime
            except OSError:
                continue
            path = Path(entry.path)
            marker = path / git.GIT_DIR_NAME
            candidates.append(
                Candidate(
                    name=entry.name,
                    path=path,
                    modified_at=datetime.fromtimestamp(mtime),
                    is_git_repo=marker.is_dir(),
                    is_worktree=marker.is_file(),
                )
            )
        logger.debug("scanned %d directories under %s", len(candidates), self.root)
        return candidates

    def dated_name(self, name: str) -> str:
        """Return ``YYYY-MM-DD-<name>``, suffixed ``-1``, ``-2``… on collision."""
        base = f"{self._today().isoformat()}-{normalize_name(name)}"
        if not (self.root / base).exists():
            return base
        for counter in range(1, _MAX_COLLISION_SUFFIX):
            candidate = f"{base}-{counter}"
            if not (self.root / candidate).exists():
                return candidate
        raise FilesystemError(f"too many directories named {base}")

    def allocate(self, name: str) -> Path:
        """Return a free dated path under the root without creating it."""
        self.ensure_root()
        return self.root / self.dated_name(name)

    def create(self, name: str) -> Path:
        """Create and return a new dated directory for ``name``."""
        self.ensure_root()
        for _ in range(_MAX_COLLISION_SUFFIX):
            path = self.root / self.dated_name(name)
            try:
                path.mkdir()
            except FileExistsError:
                continue
            except OSError as exc:
                raise FilesystemError(f"cannot create {path}", exc) from exc
            logger.info("created %s", path)
            return path.absolute()
        raise FilesystemError(f"could not allocate a directory for {name!r}")

    def contains(self, path: Path) -> bool:
        root = self.root.resolve()
        target = path.resolve()
        return target != root and root in target.parents

    def delete(self, path: Path) -> None:
        """Remove ``path``, unregistering it first when it is a git worktree.

        Only directories strictly inside the root may be deleted. A failed
        worktree unregister is logged and removal proceeds anyway.
        """
        if not self.contains(path):
            raise FilesystemError(f"can only delete directories within {self.root}")
        if not path.is_dir():
            raise FilesystemError(f"{path} does not exist")

        if git.is_worktree_checkout(path):
            try:
                git.remove_worktree(path)
            except WorktreeUnregisterFailed as exc:
                logger.warning("failed to unregister worktree %s: %s", path, exc)

        if not path.exists():
            logger.info("deleted %s", path)
            return
        try:
            shutil.rmtree(path)
        except OSError as exc:
            raise FilesystemError(f"cannot delete {path}", exc) from exc
        logger.info("deleted %s", path)
