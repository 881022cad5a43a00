"""Thin wrappers around the ``git`` binary.

Repository detection walks ancestor directories iteratively and stops at the
filesystem root. Any non-zero ``git`` exit raises ``GitCommandFailed``.
"""

from __future__ import annotations

import logging
import re
import subprocess
from pathlib import Path

from .errors import GitCommandFailed, NotAGitRepository, WorktreeUnregisterFailed

logger = logging.getLogger(__name__)

GIT_DIR_NAME = ".git"
GITDIR_PREFIX = "gitdir:"
_WORKTREES_MARKER = "/.git/worktrees/"
_URL_SUFFIX_RE = re.compile(r"\.git/?$")


def run_git(args: list[str], cwd: Path | None = None) -> str:
    """Run ``git`` with ``args`` and return combined output.

    Raises ``GitCommandFailed`` on a non-zero exit or a missing binary.
    """
    logger.debug("git %s (cwd=%s)", " ".join(args), cwd)
    try:
        proc = subprocess.run(
            ["git", *args],
            cwd=None if cwd is None else str(cwd),
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            stdin=subprocess.DEVNULL,
            text=True,
            encoding="utf-8",
            errors="replace",
            check=False,
        )
    except OSError as exc:
        raise GitCommandFailed(args, str(exc)) from exc
    if proc.returncode != 0:
        raise GitCommandFailed(args, proc.stdout or "")
    return proc.stdout or ""


def _ancestors(path: Path) -> list[Path]:
    start = path.absolute()
    return [start, *start.parents]


def _read_gitdir_pointer(git_file: Path) -> Path | None:
    try:
        content = git_file.read_text(encoding="utf-8").strip()
    except (OSError, UnicodeDecodeError):
        return None
    if not content.startswith(GITDIR_PREFIX):
        return None
    pointer = Path(content[len(GITDIR_PREFIX):].strip())
    if not pointer.is_absolute():
        pointer = git_file.parent / pointer
    return pointer


def is_repository(path: Path) -> bool:
    """Return whether ``path`` or any ancestor holds a ``.git`` entry."""
    return any((candidate / GIT_DIR_NAME).exists() for candidate in _ancestors(path))


def find_worktree_parent(path: Path) -> Path | None:
    """Return the main checkout for a linked worktree, or ``None``.

    Linked worktrees carry a ``.git`` file pointing at
    ``<main>/.git/worktrees/<name>``.
    """
    for candidate in _ancestors(path):
        marker = candidate / GIT_DIR_NAME
        if marker.is_dir():
            return None
        if not marker.is_file():
            continue
        pointer = _read_gitdir_pointer(marker)
        if pointer is None:
            return None
        pointer_text = pointer.as_posix()
        if _WORKTREES_MARKER not in pointer_text:
            return None
        main_repo = pointer_text.split(_WORKTREES_MARKER, 1)[0]
        return Path(main_repo) if main_repo else None
    return None


def is_worktree_checkout(path: Path) -> bool:
    """Return whether ``path`` itself is a worktree (``.git`` is a file)."""
    return (path / GIT_DIR_NAME).is_file()


def repo_name_from_url(url: str) -> str:
    """Derive a directory name from an https, ssh, or scp-style git URL."""
    trimmed = _URL_SUFFIX_RE.sub("", url.strip().rstrip("/"))
    if "://" not in trimmed and ":" in trimmed:
        # scp-like syntax: git@host:owner/repo
        trimmed = trimmed.split(":", 1)[1]
    name = trimmed.rsplit("/", 1)[-1]
    return name or "repo"


def looks_like_git_url(value: str) -> bool:
    """Heuristic used by the CLI to treat a bare argument as a clone URL."""
    return (
        value.startswith(("http://", "https://", "git@", "ssh://"))
        or value.endswith(".git")
    )


def clone(url: str, destination: Path) -> Path:
    """Clone ``url`` into ``destination`` and return it."""
    run_git(["clone", url, str(destination)])
    logger.info("cloned %s into %s", url, destination)
    return destination


def add_worktree(repo_path: Path, destination: Path, branch: str | None = None) -> Path:
    """Add a worktree of ``repo_path`` at ``destination``.

    A new branch is created when ``branch`` is given, otherwise the worktree
    starts detached at the current ``HEAD``.
    """
    if not is_repository(repo_path):
        raise NotAGitRepository(repo_path)
    args = ["worktree", "add"]
    if branch:
        args.extend(["-b", branch])
    else:
        args.append("--detach")
    args.append(str(destination))
    run_git(args, cwd=repo_path)
    logger.info("added worktree %s from %s", destination, repo_path)
    return destination


def remove_worktree(worktree_path: Path) -> None:
    """Unregister a linked worktree from its main repository.

    Tries a plain ``git worktree remove`` first and retries with ``-f``.
    Raises ``WorktreeUnregisterFailed`` when the parent cannot be found or
    both attempts fail.
    """
    main_repo = find_worktree_parent(worktree_path)
    if main_repo is None:
        raise WorktreeUnregisterFailed(f"could not determine main repository for {worktree_path}")

    try:
        run_git(["worktree", "remove", str(worktree_path)], cwd=main_repo)
        return
    except GitCommandFailed:
        logger.debug("plain worktree remove failed for %s, retrying with -f", worktree_path)
    try:
        run_git(["worktree", "remove", "-f", str(worktree_path)], cwd=main_repo)
    except GitCommandFailed as exc:
        raise WorktreeUnregisterFailed(str(exc)) from exc
