"""Domain datatypes for try directories and ranked picker rows."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path


@dataclass(frozen=True)
class Candidate:
    """One directory observed under the try root during a scan."""

    name: str
    path: Path
    modified_at: datetime
    is_git_repo: bool = False
    is_worktree: bool = False

    def __post_init__(self) -> None:
        if self.is_git_repo and self.is_worktree:
            raise ValueError("a candidate cannot be both a git repository and a worktree")


@dataclass(frozen=True)
class ScoredCandidate:
    """Candidate annotated with the scores computed for one query."""

    candidate: Candidate
    text_score: float
    time_score: float
    total_score: float

    @property
    def name(self) -> str:
        return self.candidate.name

    @property
    def path(self) -> Path:
        return self.candidate.path

    @property
    def modified_at(self) -> datetime:
        return self.candidate.modified_at


class EntryKind(Enum):
    """Discriminant for rows shown in the picker list."""

    CANDIDATE = "candidate"
    CREATE_NEW = "create_new"


@dataclass(frozen=True)
class RankedEntry:
    """Picker row: either a real scored candidate or the "create new" row.

    ``scored`` is set only for ``EntryKind.CANDIDATE``; ``query`` is set only
    for ``EntryKind.CREATE_NEW``.
    """

    kind: EntryKind
    scored: ScoredCandidate | None = None
    query: str = ""

    @classmethod
    def for_candidate(cls, scored: ScoredCandidate) -> RankedEntry:
        return cls(kind=EntryKind.CANDIDATE, scored=scored)

    @classmethod
    def create_new(cls, query: str) -> RankedEntry:
        return cls(kind=EntryKind.CREATE_NEW, query=query)

    @property
    def candidate(self) -> Candidate | None:
        if self.kind is EntryKind.CANDIDATE and self.scored is not None:
            return self.scored.candidate
        return None

    @property
    def is_deletable(self) -> bool:
        return self.kind is EntryKind.CANDIDATE

    @property
    def can_host_worktree(self) -> bool:
        candidate = self.candidate
        return candidate is not None and candidate.is_git_repo


__all__ = [
    "Candidate",
    "ScoredCandidate",
    "EntryKind",
    "RankedEntry",
]
