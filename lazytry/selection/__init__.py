"""Selection state machine: modes, intents, and the controller.

The controller is pure state; runtime code executes the intents it returns
and feeds completion messages back in.
"""

from __future__ import annotations

from .controller import DELETE_CONFIRM_WORD, SelectionController
from .intents import (
    CloneRepository,
    CreateDirectory,
    CreateWorktree,
    DeleteDirectory,
    Intent,
    Quit,
    ReloadCandidates,
    SelectPath,
    SessionOutcome,
    TaskFailed,
    TaskIntent,
    TaskKind,
    TaskResult,
    TaskSucceeded,
)
from .modes import (
    Browsing,
    Cloning,
    ConfirmingDelete,
    Creating,
    CreatingWorktree,
    Error,
    Help,
    Mode,
    ModeKind,
)

__all__ = [
    "DELETE_CONFIRM_WORD",
    "SelectionController",
    "CloneRepository",
    "CreateDirectory",
    "CreateWorktree",
    "DeleteDirectory",
    "Intent",
    "Quit",
    "ReloadCandidates",
    "SelectPath",
    "SessionOutcome",
    "TaskFailed",
    "TaskIntent",
    "TaskKind",
    "TaskResult",
    "TaskSucceeded",
    "Browsing",
    "Cloning",
    "ConfirmingDelete",
    "Creating",
    "CreatingWorktree",
    "Error",
    "Help",
    "Mode",
    "ModeKind",
]
