"""Public runtime entry points.

Groups the interactive picker bootstrap (``run_picker``) and the lower-level
event loop and task runner used by tests and composition code.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .loop import RuntimeLoopTiming
    from .tasks import BackgroundTaskRunner


def run_picker(*args, **kwargs):
    """Lazily import the picker entrypoint to keep terminal setup off import."""
    from .app import run_picker as _run_picker

    return _run_picker(*args, **kwargs)


def run_main_loop(*args, **kwargs):
    """Lazily import loop runner to avoid package-import cycles."""
    from .loop import run_main_loop as _run_main_loop

    return _run_main_loop(*args, **kwargs)


def __getattr__(name: str):
    if name == "RuntimeLoopTiming":
        from . import loop as _loop

        return _loop.RuntimeLoopTiming
    if name == "BackgroundTaskRunner":
        from . import tasks as _tasks

        return _tasks.BackgroundTaskRunner
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "BackgroundTaskRunner",
    "RuntimeLoopTiming",
    "run_main_loop",
    "run_picker",
]
