"""Shell hand-off file.

The picker reports its chosen directory as a return value; this module is
the only place that turns it into the file a cooperating shell wrapper reads
(and deletes) after a successful exit.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from .errors import FilesystemError

logger = logging.getLogger(__name__)


def write_handoff(target: Path, handoff_file: Path) -> Path:
    """Write ``target`` as a single absolute path, with no trailing newline."""
    absolute = target.absolute()
    tmp_path = handoff_file.with_name(f"{handoff_file.name}.{os.getpid()}.tmp")
    try:
        handoff_file.parent.mkdir(parents=True, exist_ok=True)
        tmp_path.write_text(str(absolute), encoding="utf-8")
        os.replace(tmp_path, handoff_file)
    except OSError as exc:
        tmp_path.unlink(missing_ok=True)
        raise FilesystemError(f"cannot write hand-off file {handoff_file}", exc) from exc
    logger.debug("wrote hand-off %s -> %s", handoff_file, absolute)
    return absolute


def read_handoff(handoff_file: Path) -> Path | None:
    """Return the path stored in ``handoff_file``, or ``None`` when absent."""
    try:
        content = handoff_file.read_text(encoding="utf-8").strip()
    except OSError:
        return None
    return Path(content) if content else None
