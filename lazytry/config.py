"""Persistent JSON config and path resolution.

Resolves the try root, the recency half-life, and the shell hand-off file.
All config access is forgiving: malformed or missing config falls back safely.
"""

from __future__ import annotations

import json
import os
from pathlib import Path

from platformdirs import user_config_dir

from .scoring import DEFAULT_HALF_LIFE_DAYS

APP_NAME = "lazytry"
CONFIG_FILENAME = "config.json"
CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME

ROOT_ENV_VAR = "TRY_PATH"
HANDOFF_ENV_VAR = "LAZYTRY_HANDOFF_FILE"
HANDOFF_FILENAME = ".try_cd"


def load_config() -> dict[str, object]:
    """Load the persisted JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    try:
        data = json.loads(CONFIG_PATH.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return {}
    return data if isinstance(data, dict) else {}


def default_root() -> Path:
    """Default try root: ``~/src/tries``, or ``/tmp/tries`` without a home."""
    try:
        home = Path.home()
    except RuntimeError:
        return Path("/tmp") / "tries"
    return home / "src" / "tries"


def load_root_override() -> Path | None:
    """Return the ``root`` config value when it is a non-empty string."""
    value = load_config().get("root")
    if not isinstance(value, str) or not value.strip():
        return None
    return Path(value.strip()).expanduser()


def resolve_root(environ: dict[str, str] | None = None) -> Path:
    """Resolve the try root: env override, then config, then the default."""
    env = os.environ if environ is None else environ
    override = env.get(ROOT_ENV_VAR, "")
    if override:
        return Path(override).expanduser()
    configured = load_root_override()
    if configured is not None:
        return configured
    return default_root()


def load_half_life_days() -> float:
    """Load the recency half-life; only positive numbers are accepted."""
    value = load_config().get("half_life_days")
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return DEFAULT_HALF_LIFE_DAYS
    if value <= 0:
        return DEFAULT_HALF_LIFE_DAYS
    return float(value)


def resolve_handoff_path(environ: dict[str, str] | None = None) -> Path:
    """Per-user file the shell wrapper reads to learn where to ``cd``."""
    env = os.environ if environ is None else environ
    override = env.get(HANDOFF_ENV_VAR, "")
    if override:
        return Path(override).expanduser()
    return Path.home() / HANDOFF_FILENAME
