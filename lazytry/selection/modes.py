"""Picker modes as a tagged union.

Each variant carries only the data that mode needs, so a delete buffer
cannot exist outside ``ConfirmingDelete`` and a clone URL cannot leak into
the search query.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import ClassVar

from ..candidates import Candidate


class ModeKind(Enum):
    BROWSING = "browsing"
    CREATING = "creating"
    CONFIRMING_DELETE = "confirming_delete"
    CLONING = "cloning"
    CREATING_WORKTREE = "creating_worktree"
    HELP = "help"
    ERROR = "error"


@dataclass(frozen=True)
class Browsing:
    kind: ClassVar[ModeKind] = ModeKind.BROWSING


@dataclass(frozen=True)
class Creating:
    """Explicit create intent for the current query."""

    kind: ClassVar[ModeKind] = ModeKind.CREATING


@dataclass(frozen=True)
class ConfirmingDelete:
    """Waiting for ``yes`` or the exact directory name."""

    kind: ClassVar[ModeKind] = ModeKind.CONFIRMING_DELETE
    candidate: Candidate
    index: int
    generation: int
    buffer: str = ""


@dataclass(frozen=True)
class Cloning:
    kind: ClassVar[ModeKind] = ModeKind.CLONING
    buffer: str = ""


@dataclass(frozen=True)
class CreatingWorktree:
    kind: ClassVar[ModeKind] = ModeKind.CREATING_WORKTREE
    repo_path: Path
    buffer: str = ""


@dataclass(frozen=True)
class Help:
    """Overlay; any key restores ``previous`` untouched."""

    kind: ClassVar[ModeKind] = ModeKind.HELP
    previous: Mode


@dataclass(frozen=True)
class Error:
    """Overlay reporting a collaborator failure.

    ``buffer`` keeps whatever the user had typed in ``origin`` so it can be
    shown and offered again on retry.
    """

    kind: ClassVar[ModeKind] = ModeKind.ERROR
    message: str
    origin: ModeKind
    buffer: str = ""


Mode = Browsing | Creating | ConfirmingDelete | Cloning | CreatingWorktree | Help | Error


__all__ = [
    "ModeKind",
    "Browsing",
    "Creating",
    "ConfirmingDelete",
    "Cloning",
    "CreatingWorktree",
    "Help",
    "Error",
    "Mode",
]
