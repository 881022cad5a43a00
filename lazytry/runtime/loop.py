"""Main interactive event loop for the picker.

Alternates between draining background completions, rendering, and reading
one key. Feature logic lives in the controller and the intent executor.
"""

from __future__ import annotations

import shutil
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING

from ..input import read_key
from ..render import render_frame
from ..selection import SelectionController
from .terminal import TerminalController

if TYPE_CHECKING:
    from .app import IntentExecutor


@dataclass(frozen=True)
class RuntimeLoopTiming:
    """Timing constants controlling interactive loop behavior."""

    key_timeout_ms: int = 120
    # Redraw at least this often so relative ages and task status stay fresh.
    idle_redraw_seconds: float = 30.0


def run_main_loop(
    controller: SelectionController,
    terminal: TerminalController,
    stdin_fd: int,
    executor: IntentExecutor,
    timing: RuntimeLoopTiming | None = None,
    clock: Callable[[], datetime] = datetime.now,
) -> None:
    """Run the picker until the controller finishes or the user quits.

    Quitting stops reading input; background tasks still running are left to
    their daemon threads.
    """
    timing = timing or RuntimeLoopTiming()
    dirty = True
    skip_next_lf = False
    last_size: tuple[int, int] | None = None
    last_draw: datetime | None = None

    with terminal.raw_mode():
        while True:
            if executor.apply_results():
                dirty = True
            if controller.finished:
                break

            term = shutil.get_terminal_size((80, 24))
            size = (term.columns, term.lines)
            if size != last_size:
                last_size = size
                dirty = True
            now = clock()
            if last_draw is not None and (now - last_draw).total_seconds() >= timing.idle_redraw_seconds:
                dirty = True

            if dirty:
                terminal.write_frame(render_frame(controller, term.columns, term.lines, now))
                last_draw = now
                dirty = False

            try:
                key = read_key(stdin_fd, timeout_ms=timing.key_timeout_ms)
            except KeyboardInterrupt:
                key = "CTRL_C"
            if key == "":
                continue
            # Terminals that send CRLF for Enter must not confirm twice.
            if skip_next_lf and key == "ENTER_LF":
                skip_next_lf = False
                continue
            skip_next_lf = key == "ENTER_CR"

            dirty = True
            if executor.execute(controller.handle_key(key)):
                break


__all__ = ["RuntimeLoopTiming", "run_main_loop"]
