"""Requests the controller hands to collaborators, and their replies."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from ..candidates import Candidate


class TaskKind(Enum):
    """Collaborator operations; at most one of each kind runs at a time."""

    SCAN = "scan"
    CREATE = "create"
    DELETE = "delete"
    CLONE = "clone"
    WORKTREE = "worktree"


@dataclass(frozen=True)
class SelectPath:
    path: Path


@dataclass(frozen=True)
class CreateDirectory:
    name: str
    task_kind = TaskKind.CREATE


@dataclass(frozen=True)
class DeleteDirectory:
    candidate: Candidate
    task_kind = TaskKind.DELETE


@dataclass(frozen=True)
class CloneRepository:
    url: str
    task_kind = TaskKind.CLONE


@dataclass(frozen=True)
class CreateWorktree:
    repo_path: Path
    name: str
    task_kind = TaskKind.WORKTREE


@dataclass(frozen=True)
class ReloadCandidates:
    task_kind = TaskKind.SCAN


@dataclass(frozen=True)
class Quit:
    pass


Intent = SelectPath | CreateDirectory | DeleteDirectory | CloneRepository | CreateWorktree | ReloadCandidates | Quit
TaskIntent = CreateDirectory | DeleteDirectory | CloneRepository | CreateWorktree | ReloadCandidates


@dataclass(frozen=True)
class TaskSucceeded:
    """Completion message for a collaborator task.

    ``path`` is the created/cloned/deleted directory; scans report
    ``candidates`` instead.
    """

    kind: TaskKind
    path: Path | None = None
    candidates: tuple[Candidate, ...] = ()


@dataclass(frozen=True)
class TaskFailed:
    kind: TaskKind
    message: str


TaskResult = TaskSucceeded | TaskFailed


@dataclass(frozen=True)
class SessionOutcome:
    """How the picker ended; ``path`` is the hand-off target, if any."""

    path: Path | None
    cancelled: bool = False


__all__ = [
    "TaskKind",
    "SelectPath",
    "CreateDirectory",
    "DeleteDirectory",
    "CloneRepository",
    "CreateWorktree",
    "ReloadCandidates",
    "Quit",
    "Intent",
    "TaskIntent",
    "TaskSucceeded",
    "TaskFailed",
    "TaskResult",
    "SessionOutcome",
]
