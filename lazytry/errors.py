"""Error taxonomy for collaborator failures.

Scoring and selection logic never raise; only filesystem and git
collaborators do. The CLI maps any ``LazyTryError`` to a non-zero exit.
"""

from __future__ import annotations


class LazyTryError(Exception):
    """Base class for all failures surfaced to the user."""


class NotAGitRepository(LazyTryError):
    """Path is neither a git repository nor inside one."""

    def __init__(self, path: object) -> None:
        super().__init__(f"{path} is not a git repository")
        self.path = path


class GitCommandFailed(LazyTryError):
    """A ``git`` invocation exited non-zero."""

    def __init__(self, args: list[str], output: str) -> None:
        summary = " ".join(args)
        detail = output.strip()
        message = f"git {summary} failed"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
        self.args_list = list(args)
        self.output = output


class FilesystemError(LazyTryError):
    """Permission, already-exists, or not-found failure on the try root."""

    def __init__(self, message: str, cause: OSError | None = None) -> None:
        if cause is not None:
            message = f"{message}: {cause.strerror or cause}"
        super().__init__(message)
        self.cause = cause


class ValidationFailed(LazyTryError):
    """User input rejected before any side effect happened."""


class WorktreeUnregisterFailed(LazyTryError):
    """``git worktree remove`` failed; reported but never fatal."""


__all__ = [
    "LazyTryError",
    "NotAGitRepository",
    "GitCommandFailed",
    "FilesystemError",
    "ValidationFailed",
    "WorktreeUnregisterFailed",
]
