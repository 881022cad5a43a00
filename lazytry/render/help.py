"""Help overlay content and full-screen help modal rendering.

Rendering helpers here are presentation-only and side-effect free.
"""

from __future__ import annotations

from ..ansi import clip_ansi_line, display_width

KEY_SGR = "\033[38;5;229m"
SECTION_SGR = "\033[1;38;5;81m"
FRAME_SGR = "\033[38;5;45m"
TITLE_SGR = "\033[1;38;5;45m"
RESET = "\033[0m"

HELP_TITLE = "lazytry keyboard shortcuts"

HELP_SECTIONS: tuple[tuple[str, tuple[tuple[str, str], ...]], ...] = (
    (
        "Navigation",
        (
            ("Up/Down", "move selection (also Ctrl+P/Ctrl+N, Ctrl+K)"),
            ("PgUp/PgDn", "move by a page"),
            ("Home/End", "jump to first/last entry"),
        ),
    ),
    (
        "Actions",
        (
            ("Enter", "select directory, or create the highlighted new one"),
            ("Ctrl+T", "create a new directory named after the query"),
            ("Tab", "complete the query to the top match"),
            ("Ctrl+D", "delete the selected directory"),
            ("Ctrl+W", "create a worktree of the selected git repository"),
            ("Ctrl+G", "clone a git repository"),
        ),
    ),
    (
        "Search",
        (
            ("Type", "filter directories"),
            ("Backspace", "delete a character"),
            ("Ctrl+U", "clear the query"),
            ("Esc", "clear the query, or quit when it is empty"),
        ),
    ),
    (
        "Other",
        (
            ("?", "show this help (empty query; Ctrl+? anywhere)"),
            ("Ctrl+C", "quit"),
        ),
    ),
)

HELP_TIPS: tuple[str, ...] = (
    "Directories are ranked by relevance while searching, by recency otherwise",
    "New directories get today's date prefix automatically",
    "Git repositories and worktrees are tagged in the list",
)


def help_lines() -> list[str]:
    """Styled body lines of the help overlay."""
    lines: list[str] = []
    for title, items in HELP_SECTIONS:
        lines.append(f"{SECTION_SGR}{title}{RESET}")
        for key, description in items:
            lines.append(f"  {KEY_SGR}{key:<12}{RESET} {description}")
        lines.append("")
    lines.append(f"{SECTION_SGR}Tips{RESET}")
    lines.extend(f"  {tip}" for tip in HELP_TIPS)
    lines.append("")
    lines.append("\033[2;38;5;250mPress any key to close\033[0m")
    return lines


def render_help_page(width: int, height: int) -> list[str]:
    """Render the help modal as ``height`` screen rows of ``width`` columns."""
    width = max(1, width)
    height = max(1, height)
    body = help_lines()

    modal_w = min(84, max(24, width - 4))
    modal_w = min(modal_w, width)
    inner_w = max(1, modal_w - 2)
    modal_h = min(height, len(body) + 3)
    inner_h = max(0, modal_h - 2)
    x = max(0, (width - modal_w) // 2)
    y = max(0, (height - modal_h) // 2)
    indent = " " * x

    rows: list[str] = [""] * height
    if modal_h < 3 or modal_w < 3:
        for i, line in enumerate(body[:height]):
            rows[i] = clip_ansi_line(line, width)
        return rows

    label = f" {HELP_TITLE} "
    if len(label) + 1 <= inner_w:
        top = f"─{TITLE_SGR}{label}{RESET}{FRAME_SGR}" + "─" * (inner_w - 1 - len(label))
    else:
        top = "─" * inner_w
    rows[y] = f"{indent}{FRAME_SGR}╭{top}╮{RESET}"
    for i in range(inner_h):
        text = body[i - 1] if 1 <= i <= len(body) else ""
        cell = clip_ansi_line(f" {text}", inner_w)
        pad = " " * max(0, inner_w - display_width(cell))
        rows[y + 1 + i] = f"{indent}{FRAME_SGR}│{RESET}{cell}{RESET}{pad}{FRAME_SGR}│{RESET}"
    rows[y + modal_h - 1] = f"{indent}{FRAME_SGR}╰{'─' * inner_w}╯{RESET}"
    return rows
