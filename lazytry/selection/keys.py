"""Per-mode key bindings for the selection controller.

Printable keys that are not bound here fall through to the active text
buffer; everything else unbound is ignored. ``Help`` and ``Error`` have no
table because any key dismisses them.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING

from ..input import KeyComboBinding, KeyComboRegistry
from .intents import Intent
from .modes import ModeKind

if TYPE_CHECKING:
    from .controller import SelectionController

ENTER_KEYS = ("ENTER_CR", "ENTER_LF")
UP_KEYS = ("UP", "CTRL_P", "CTRL_K")
DOWN_KEYS = ("DOWN", "CTRL_N")


def _quietly(action: Callable[[], object]) -> Callable[[], None]:
    """Adapt a state-only action into a handler that yields no intent."""

    def handler() -> None:
        action()
        return None

    return handler


def _text_entry_registry(controller: SelectionController) -> KeyComboRegistry[Intent | None]:
    return KeyComboRegistry().register_bindings(
        KeyComboBinding(ENTER_KEYS, controller.confirm),
        KeyComboBinding(("ESC",), controller.cancel),
        KeyComboBinding(("BACKSPACE",), _quietly(controller.delete_char)),
        KeyComboBinding(("CTRL_QUESTION",), _quietly(controller.show_help)),
    )


def build_mode_bindings(controller: SelectionController) -> dict[ModeKind, KeyComboRegistry[Intent | None]]:
    """Build the dispatch table for every mode that accepts keys."""
    browsing: KeyComboRegistry[Intent | None] = KeyComboRegistry().register_bindings(
        KeyComboBinding(ENTER_KEYS, controller.confirm),
        KeyComboBinding(("ESC",), controller.cancel),
        KeyComboBinding(("BACKSPACE",), _quietly(controller.delete_char)),
        KeyComboBinding(("TAB",), _quietly(controller.autocomplete)),
        KeyComboBinding(("CTRL_U",), _quietly(controller.clear_query)),
        KeyComboBinding(("CTRL_D",), _quietly(controller.request_delete)),
        KeyComboBinding(("CTRL_W",), _quietly(controller.request_worktree)),
        KeyComboBinding(("CTRL_G",), _quietly(controller.request_clone)),
        KeyComboBinding(("CTRL_T",), _quietly(controller.request_create)),
        KeyComboBinding(("CTRL_QUESTION",), _quietly(controller.show_help)),
        KeyComboBinding(("?",), _quietly(controller.show_help_or_type)),
        KeyComboBinding(UP_KEYS, _quietly(lambda: controller.move_selection(-1))),
        KeyComboBinding(DOWN_KEYS, _quietly(lambda: controller.move_selection(1))),
        KeyComboBinding(("PAGE_UP",), _quietly(lambda: controller.move_selection(-controller.page_step))),
        KeyComboBinding(("PAGE_DOWN",), _quietly(lambda: controller.move_selection(controller.page_step))),
        KeyComboBinding(("HOME",), _quietly(controller.select_first)),
        KeyComboBinding(("END",), _quietly(controller.select_last)),
    )

    creating: KeyComboRegistry[Intent | None] = KeyComboRegistry().register_bindings(
        KeyComboBinding(ENTER_KEYS, controller.confirm),
        KeyComboBinding(("ESC",), controller.cancel),
        KeyComboBinding(("BACKSPACE",), _quietly(controller.delete_char)),
        KeyComboBinding(("CTRL_QUESTION",), _quietly(controller.show_help)),
    )

    return {
        ModeKind.BROWSING: browsing,
        ModeKind.CREATING: creating,
        ModeKind.CONFIRMING_DELETE: _text_entry_registry(controller),
        ModeKind.CLONING: _text_entry_registry(controller),
        ModeKind.CREATING_WORKTREE: _text_entry_registry(controller),
    }
