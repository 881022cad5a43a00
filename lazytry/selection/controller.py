"""Modal selection controller for the try picker.

The controller owns the query, the active mode, the ranked list, and the
selection. It performs no I/O: collaborator work is requested by returning an
intent, and the outcome comes back through :meth:`SelectionController.handle_task_result`
or :meth:`SelectionController.load_candidates`. Every public method is total
over its inputs and never raises.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import replace
from datetime import datetime
from pathlib import Path

from ..candidates import Candidate, EntryKind, RankedEntry
from ..input import KeyComboRegistry, is_printable
from ..scoring import Scorer, bare_name, is_exact_match
from .keys import build_mode_bindings
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
    TaskKind,
    TaskIntent,
    TaskResult,
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

DELETE_CONFIRM_WORD = "yes"
WORKTREE_SUFFIX = "-worktree"
PAGE_STEP = 10

_ORIGIN_FOR_TASK: dict[TaskKind, ModeKind] = {
    TaskKind.SCAN: ModeKind.BROWSING,
    TaskKind.CREATE: ModeKind.BROWSING,
    TaskKind.DELETE: ModeKind.CONFIRMING_DELETE,
    TaskKind.CLONE: ModeKind.CLONING,
    TaskKind.WORKTREE: ModeKind.CREATING_WORKTREE,
}


class SelectionController:
    """State machine driving one picker session."""

    def __init__(
        self,
        candidates: Iterable[Candidate] = (),
        query: str = "",
        scorer: Scorer | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.scorer = scorer if scorer is not None else Scorer()
        self._clock = clock if clock is not None else datetime.now
        self.candidates: tuple[Candidate, ...] = tuple(candidates)
        self.query = "".join(ch for ch in query if is_printable(ch))
        self.mode: Mode = Browsing()
        self.entries: list[RankedEntry] = []
        self.selected = 0
        self.generation = 0
        self.status_message = ""
        self.in_flight: set[TaskKind] = set()
        self.outcome: SessionOutcome | None = None
        self.fallback_path: Path | None = None
        # Text typed into a modal prompt whose task failed, offered again on retry.
        self._retry_buffers: dict[tuple[ModeKind, Path | None], str] = {}
        self._dispatched_buffers: dict[TaskKind, tuple[str, Path | None]] = {}
        self._reload_queued = False
        self.page_step = PAGE_STEP
        self._bindings = self._build_bindings()
        self.rerank()

    # -- ranking ---------------------------------------------------------

    def rerank(self) -> None:
        """Rebuild the ranked list for the current query and reset selection."""
        ranked = self.scorer.rank(self.candidates, self.query, self._clock())
        entries = [RankedEntry.for_candidate(scored) for scored in ranked]
        if self.query and not self.has_exact_match():
            entries.append(RankedEntry.create_new(self.query))
        self.entries = entries
        self.generation += 1
        self.selected = 0

    def has_exact_match(self) -> bool:
        return any(is_exact_match(candidate.name, self.query) for candidate in self.candidates)

    def load_candidates(self, candidates: Iterable[Candidate]) -> None:
        """Install a fresh scan generation."""
        self.candidates = tuple(candidates)
        self.rerank()

    @property
    def selected_entry(self) -> RankedEntry | None:
        if not self.entries:
            return None
        return self.entries[max(0, min(self.selected, len(self.entries) - 1))]

    @property
    def is_creating(self) -> bool:
        return isinstance(self.mode, Creating)

    @property
    def finished(self) -> bool:
        return self.outcome is not None

    def move_selection(self, delta: int) -> None:
        if not self.entries:
            self.selected = 0
            return
        self.selected = max(0, min(len(self.entries) - 1, self.selected + delta))

    def select_first(self) -> None:
        self.selected = 0

    def select_last(self) -> None:
        self.selected = max(0, len(self.entries) - 1)

    # -- query editing ---------------------------------------------------

    def set_query(self, query: str) -> None:
        self.query = query
        if isinstance(self.mode, Creating):
            self.mode = Browsing()
        self.rerank()

    def clear_query(self) -> None:
        self.set_query("")

    def append_char(self, ch: str) -> None:
        """Append to the active buffer: the query or the mode's own buffer."""
        if not is_printable(ch):
            return
        mode = self.mode
        if isinstance(mode, (Browsing, Creating)):
            self.set_query(self.query + ch)
        elif isinstance(mode, (ConfirmingDelete, Cloning, CreatingWorktree)):
            self.mode = replace(mode, buffer=mode.buffer + ch)

    def delete_char(self) -> None:
        mode = self.mode
        if isinstance(mode, (Browsing, Creating)):
            if self.query:
                self.set_query(self.query[:-1])
        elif isinstance(mode, (ConfirmingDelete, Cloning, CreatingWorktree)):
            if mode.buffer:
                self.mode = replace(mode, buffer=mode.buffer[:-1])

    def autocomplete(self) -> None:
        """Replace the query with the top candidate's full name."""
        if not self.query:
            return
        top = next((entry.candidate for entry in self.entries if entry.candidate is not None), None)
        if top is None:
            return
        self.set_query(top.name)

    # -- mode transitions ------------------------------------------------

    def show_help(self) -> None:
        if isinstance(self.mode, Help):
            return
        self.mode = Help(previous=self.mode)

    def request_create(self) -> None:
        if self.query and isinstance(self.mode, Browsing):
            self.mode = Creating()

    def request_delete(self) -> None:
        entry = self.selected_entry
        if entry is None or not entry.is_deletable or entry.candidate is None:
            return
        self.mode = ConfirmingDelete(
            candidate=entry.candidate,
            index=self.selected,
            generation=self.generation,
        )

    def request_worktree(self) -> None:
        entry = self.selected_entry
        if entry is None or not entry.can_host_worktree or entry.candidate is None:
            return
        repo = entry.candidate
        seeded = bare_name(repo.name) + WORKTREE_SUFFIX
        buffer = self._retry_buffers.pop((ModeKind.CREATING_WORKTREE, repo.path), seeded)
        self.mode = CreatingWorktree(repo_path=repo.path, buffer=buffer)

    def request_clone(self) -> None:
        buffer = self._retry_buffers.pop((ModeKind.CLONING, None), "")
        self.mode = Cloning(buffer=buffer)

    def dismiss_error(self) -> None:
        if isinstance(self.mode, Error):
            self.mode = Browsing()

    def confirm(self) -> Intent | None:
        mode = self.mode
        if isinstance(mode, (Browsing, Creating)):
            return self._confirm_browsing()
        if isinstance(mode, ConfirmingDelete):
            return self._confirm_delete(mode)
        if isinstance(mode, Cloning):
            return self._confirm_clone(mode)
        if isinstance(mode, CreatingWorktree):
            return self._confirm_worktree(mode)
        return None

    def cancel(self) -> Intent | None:
        """Esc: leave a modal prompt, else clear the query, else quit."""
        mode = self.mode
        if isinstance(mode, Browsing):
            if self.query:
                self.clear_query()
                return None
            return self.quit()
        if isinstance(mode, Help):
            self.mode = mode.previous
            return None
        self.mode = Browsing()
        return None

    def quit(self) -> Quit:
        """End the session, falling back to the last cloned/created path."""
        if self.outcome is None:
            self.outcome = SessionOutcome(path=self.fallback_path, cancelled=True)
        return Quit()

    def finish(self, path: Path) -> None:
        self.outcome = SessionOutcome(path=path)

    def _confirm_browsing(self) -> Intent | None:
        entry = self.selected_entry
        creating = isinstance(self.mode, Creating)
        if creating or (entry is not None and entry.kind is EntryKind.CREATE_NEW):
            if not self.query:
                return None
            return self._dispatch(CreateDirectory(self.query), "", None)
        if entry is None or entry.candidate is None:
            return None
        path = entry.candidate.path
        self.finish(path)
        return SelectPath(path)

    def _confirm_delete(self, mode: ConfirmingDelete) -> Intent | None:
        target = mode.candidate
        self.mode = Browsing()
        if mode.buffer != DELETE_CONFIRM_WORD and mode.buffer != target.name:
            return None
        if mode.generation != self.generation and all(c.path != target.path for c in self.candidates):
            return None
        return self._dispatch(DeleteDirectory(target), mode.buffer, None)

    def _confirm_clone(self, mode: Cloning) -> Intent | None:
        url = mode.buffer.strip()
        if not url:
            self.status_message = "enter a git URL to clone"
            return None
        return self._dispatch(CloneRepository(url), mode.buffer, None)

    def _confirm_worktree(self, mode: CreatingWorktree) -> Intent | None:
        name = mode.buffer.strip()
        if not name:
            self.status_message = "enter a worktree name"
            return None
        return self._dispatch(CreateWorktree(mode.repo_path, name), mode.buffer, mode.repo_path)

    def _dispatch(self, intent: TaskIntent, buffer: str, repo_path: Path | None) -> Intent | None:
        kind = intent.task_kind
        if kind in self.in_flight:
            self.status_message = f"{kind.value} already in progress"
            return None
        self.in_flight.add(kind)
        self._dispatched_buffers[kind] = (buffer, repo_path)
        if kind is TaskKind.CLONE:
            self.status_message = f"cloning {intent.url}..."
        elif kind is TaskKind.WORKTREE:
            self.status_message = f"creating worktree {intent.name}..."
        elif kind is TaskKind.DELETE:
            self.status_message = f"deleting {intent.candidate.name}..."
        return intent

    def request_reload(self) -> Intent | None:
        """Ask for a rescan; queued behind a scan that is already running."""
        if TaskKind.SCAN in self.in_flight:
            self._reload_queued = True
            return None
        self._reload_queued = False
        return self._dispatch(ReloadCandidates(), "", None)

    # -- collaborator replies --------------------------------------------

    def handle_task_result(self, result: TaskResult) -> Intent | None:
        """Apply a completion message; may ask for a follow-up reload."""
        self.in_flight.discard(result.kind)
        buffer, repo_path = self._dispatched_buffers.pop(result.kind, ("", None))

        if isinstance(result, TaskFailed):
            self._stash_open_buffer()
            origin = _ORIGIN_FOR_TASK[result.kind]
            if origin in (ModeKind.CLONING, ModeKind.CREATING_WORKTREE):
                self._retry_buffers[(origin, repo_path)] = buffer
            self.status_message = ""
            self.mode = Error(message=result.message, origin=origin, buffer=buffer)
            if result.kind is TaskKind.SCAN and self._reload_queued:
                return self.request_reload()
            return None

        if result.kind is TaskKind.SCAN:
            self.load_candidates(result.candidates)
            if self._reload_queued:
                return self.request_reload()
            return None
        if result.kind is TaskKind.CREATE:
            if result.path is not None:
                self.finish(result.path)
            return None
        if result.kind is TaskKind.DELETE:
            if result.path is not None:
                self.candidates = tuple(c for c in self.candidates if c.path != result.path)
                self.status_message = f"deleted {result.path.name}"
            self.rerank()
            return None

        # Clone and worktree creation both end by reloading the index.
        origin = _ORIGIN_FOR_TASK[result.kind]
        if self.mode.kind is origin:
            self.mode = Browsing()
        elif isinstance(self.mode, Help) and self.mode.previous.kind is origin:
            self.mode = Help(previous=Browsing())
        if result.path is not None:
            self.fallback_path = result.path
            self.status_message = f"created {result.path.name}"
        return self.request_reload()

    def _stash_open_buffer(self) -> None:
        """Keep a half-typed clone URL or worktree name across an error overlay."""
        mode = self.mode.previous if isinstance(self.mode, Help) else self.mode
        if isinstance(mode, Cloning):
            self._retry_buffers[(ModeKind.CLONING, None)] = mode.buffer
        elif isinstance(mode, CreatingWorktree):
            self._retry_buffers[(ModeKind.CREATING_WORKTREE, mode.repo_path)] = mode.buffer

    # -- key dispatch ----------------------------------------------------

    def handle_key(self, key: str) -> Intent | None:
        """Translate one key token into a state change and optional intent."""
        if not key:
            return None
        if isinstance(self.mode, Help):
            self.mode = self.mode.previous
            return None
        if key == "CTRL_C":
            return self.quit()
        if isinstance(self.mode, Error):
            self.dismiss_error()
            return None

        registry = self._bindings[self.mode.kind]
        if registry.is_bound(key):
            return registry.dispatch(key)
        if is_printable(key):
            self.append_char(key)
        return None

    def show_help_or_type(self) -> None:
        """``?`` opens help on an empty query and is a literal character otherwise."""
        if self.query:
            self.append_char("?")
        else:
            self.show_help()

    def _build_bindings(self) -> dict[ModeKind, KeyComboRegistry[Intent | None]]:
        return build_mode_bindings(self)
