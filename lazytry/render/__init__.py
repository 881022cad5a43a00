"""Rendering for the picker screen.

``render_frame`` is a pure projection of controller state onto styled screen
rows; it never mutates the controller and performs no terminal I/O.
"""

from __future__ import annotations

from datetime import datetime

from ..ansi import center_ansi_line, clip_ansi_line, pad_ansi_line
from ..candidates import Candidate, EntryKind, RankedEntry
from ..scoring import bare_name, relative_age
from ..selection import (
    DELETE_CONFIRM_WORD,
    Cloning,
    ConfirmingDelete,
    CreatingWorktree,
    Error,
    Help,
    SelectionController,
)
from .help import render_help_page

RESET = "\033[0m"
TITLE_SGR = "\033[1;97;48;2;124;58;237m"
DIM_SGR = "\033[2;38;5;250m"
ACCENT_SGR = "\033[1;38;5;214m"
DANGER_SGR = "\033[1;38;5;203m"
HEADER_SGR = "\033[1;4;38;2;124;58;237m"
SELECTED_SGR = "\033[48;5;237m"
CREATE_SGR = "\033[3;38;5;114m"
GIT_TAG_SGR = "\033[38;5;208m"
WORKTREE_TAG_SGR = "\033[38;5;114m"
STATUS_SGR = "\033[38;5;254;48;5;235m"

TITLE_TEXT = "lazytry - fresh directories for every idea"
SEARCH_PLACEHOLDER = "Type to search with fuzzy matching..."
SHORTCUTS: tuple[str, ...] = (
    "↑↓ Navigate",
    "⏎ Select",
    "^T New",
    "^W Worktree",
    "^G Clone",
    "^D Delete",
    "? Help",
    "^C Quit",
)

TAGS_COLUMN_WIDTH = 10
MODIFIED_COLUMN_WIDTH = 16
MIN_NAME_COLUMN_WIDTH = 12
SELECTION_MARKER = "› "


def name_column_width(width: int) -> int:
    return max(MIN_NAME_COLUMN_WIDTH, width - TAGS_COLUMN_WIDTH - MODIFIED_COLUMN_WIDTH - 4)


def candidate_tag(candidate: Candidate) -> str:
    if candidate.is_worktree:
        return "worktree"
    if candidate.is_git_repo:
        return "git"
    return ""


def _styled_name(name: str) -> str:
    bare = bare_name(name)
    prefix = name[: len(name) - len(bare)]
    if not prefix:
        return name
    return f"{DIM_SGR}{prefix}{RESET}{bare}"


def format_entry(entry: RankedEntry, selected: bool, width: int, now: datetime) -> str:
    """One list row: marker, name, tag, and relative age."""
    marker = SELECTION_MARKER if selected else "  "
    name_w = name_column_width(width)

    if entry.kind is EntryKind.CREATE_NEW:
        row = f"{marker}{CREATE_SGR}+ Create new: {entry.query}{RESET}"
    else:
        candidate = entry.candidate
        if candidate is None:
            return ""
        tag = candidate_tag(candidate)
        tag_sgr = WORKTREE_TAG_SGR if candidate.is_worktree else GIT_TAG_SGR
        name_cell = pad_ansi_line(_styled_name(candidate.name), name_w)
        tag_cell = f"{tag_sgr}{tag:<{TAGS_COLUMN_WIDTH}}{RESET}" if tag else " " * TAGS_COLUMN_WIDTH
        age_cell = f"{DIM_SGR}{relative_age(candidate.modified_at, now)}{RESET}"
        row = f"{marker}{name_cell} {tag_cell} {age_cell}"

    if selected:
        # Re-apply the highlight after every inner reset so the bar stays continuous.
        body = pad_ansi_line(row, width).replace(RESET, RESET + SELECTED_SGR)
        return f"{SELECTED_SGR}{body}{RESET}"
    return clip_ansi_line(row, width)


def table_header(width: int) -> str:
    name_w = name_column_width(width)
    header = f"  {'Name':<{name_w}} {'Tags':<{TAGS_COLUMN_WIDTH}} {'Modified':<{MODIFIED_COLUMN_WIDTH}}"
    return f"{HEADER_SGR}{clip_ansi_line(header, width)}{RESET}"


def search_line(controller: SelectionController) -> str:
    if controller.query:
        content = f"🔍 {controller.query}"
    else:
        content = f"🔍 {DIM_SGR}{SEARCH_PLACEHOLDER}{RESET}"
    if controller.is_creating:
        content += f" {DIM_SGR}(new){RESET}"
    return content


def mode_prompt_lines(controller: SelectionController) -> list[str]:
    """Prompt block for modal text entry; empty outside those modes."""
    mode = controller.mode
    hint = f"{DIM_SGR}Press Enter to confirm, Esc to cancel{RESET}"
    if isinstance(mode, ConfirmingDelete):
        return [
            f"{DANGER_SGR}Delete '{mode.candidate.name}'?{RESET}",
            f"{DIM_SGR}Type '{DELETE_CONFIRM_WORD}' or the directory name to confirm:{RESET} "
            f"{ACCENT_SGR}{mode.buffer}{RESET}",
            f"{DIM_SGR}Press Esc to cancel{RESET}",
        ]
    if isinstance(mode, Cloning):
        return [
            f"{ACCENT_SGR}Clone repository{RESET}",
            f"{DIM_SGR}Enter git URL:{RESET} {ACCENT_SGR}{mode.buffer}{RESET}",
            hint,
        ]
    if isinstance(mode, CreatingWorktree):
        return [
            f"{ACCENT_SGR}Create worktree of {mode.repo_path.name}{RESET}",
            f"{DIM_SGR}Enter worktree name:{RESET} {ACCENT_SGR}{mode.buffer}{RESET}",
            hint,
        ]
    return []


def empty_state_line(controller: SelectionController) -> str:
    if controller.query:
        return f"  {DIM_SGR}Press Enter to create '{controller.query}'{RESET}"
    return f"  {DIM_SGR}No directories yet. Start typing to create one!{RESET}"


def status_line(controller: SelectionController) -> str:
    if controller.status_message:
        text = f" {controller.status_message}"
    else:
        total = len(controller.entries)
        if total == 0:
            text = " Ready to create new directory"
        else:
            text = f" {controller.selected + 1}/{total}"
            if controller.query:
                text += f" matching '{controller.query}'"
    return f"{STATUS_SGR}{text}{RESET}"


def shortcut_bar() -> str:
    return f"{DIM_SGR} {' │ '.join(SHORTCUTS)}{RESET}"


def list_window(selected: int, total: int, rows: int) -> tuple[int, int]:
    """Return ``[start, end)`` of the visible slice keeping ``selected`` in view."""
    if rows <= 0 or total <= 0:
        return 0, 0
    start = 0 if selected < rows else selected - rows + 1
    start = max(0, min(start, max(0, total - rows)))
    return start, min(total, start + rows)


def error_lines(mode: Error) -> list[str]:
    lines = [f"{DANGER_SGR}Error: {mode.message}{RESET}"]
    if mode.buffer:
        lines.append(f"{DIM_SGR}You entered:{RESET} {ACCENT_SGR}{mode.buffer}{RESET}")
    lines.append(f"{DIM_SGR}Press any key to continue{RESET}")
    return lines


def render_frame(
    controller: SelectionController,
    width: int,
    height: int,
    now: datetime | None = None,
) -> list[str]:
    """Compose the full screen as exactly ``height`` styled rows."""
    width = max(1, width)
    height = max(1, height)
    now = datetime.now() if now is None else now

    if isinstance(controller.mode, Help):
        return render_help_page(width, height)

    top = [
        f"{TITLE_SGR}{center_ansi_line(TITLE_TEXT, width)}{RESET}",
        search_line(controller),
    ]
    bottom = [status_line(controller), shortcut_bar()]

    if isinstance(controller.mode, Error):
        body = [""] + error_lines(controller.mode)
    else:
        body = mode_prompt_lines(controller)
        if not controller.entries:
            body.append(empty_state_line(controller))
        else:
            body.append(table_header(width))
            rows = max(1, height - len(top) - len(bottom) - len(body))
            start, end = list_window(controller.selected, len(controller.entries), rows)
            for index in range(start, end):
                entry = controller.entries[index]
                body.append(format_entry(entry, index == controller.selected, width, now))

    room = max(0, height - len(top) - len(bottom))
    body = body[:room] + [""] * max(0, room - len(body))
    frame = [clip_ansi_line(line, width) if line else "" for line in top + body + bottom]
    # Tiny terminals keep the top of the screen.
    return frame[:height]


__all__ = [
    "format_entry",
    "list_window",
    "render_frame",
    "render_help_page",
    "table_header",
]
