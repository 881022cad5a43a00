"""Shell wrapper scripts printed by ``lazytry init``.

Each wrapper runs the binary, and after a zero exit reads and deletes the
hand-off file, then changes into the directory it names.
"""

from __future__ import annotations

import shlex
import shutil
import sys
from pathlib import Path

_POSIX_TEMPLATE = """\
# lazytry shell integration for {shell_label}
export TRY_PATH={root}
export LAZYTRY_BINARY={binary}

try() {{
    "$LAZYTRY_BINARY" "$@"
    local exit_code=$?
    if [ $exit_code -eq 0 ] && [ -f {handoff} ]; then
        local dir
        dir=$(cat {handoff})
        rm -f {handoff}
        if [ -d "$dir" ]; then
            cd "$dir" || return $?
        fi
    fi
    return $exit_code
}}
"""

_FISH_TEMPLATE = """\
# lazytry shell integration for fish
set -gx TRY_PATH {root}
set -gx LAZYTRY_BINARY {binary}

function try
    $LAZYTRY_BINARY $argv
    set -l exit_code $status
    if test $exit_code -eq 0; and test -f {handoff}
        set -l dir (cat {handoff})
        rm -f {handoff}
        if test -d "$dir"
            cd "$dir"
        end
    end
    return $exit_code
end
"""


def binary_path() -> str:
    """Best guess at the command the wrapper should invoke."""
    found = shutil.which("lazytry")
    if found:
        return found
    argv0 = Path(sys.argv[0]) if sys.argv and sys.argv[0] else None
    if argv0 is not None and argv0.name and argv0.exists():
        return str(argv0.resolve())
    return "lazytry"


def generate_shell_script(shell_name: str, root: Path, handoff_file: Path, binary: str | None = None) -> str:
    """Render the wrapper for ``shell_name`` (bash, zsh, or fish)."""
    name = Path(shell_name).name if shell_name else "bash"
    values = {
        "root": shlex.quote(str(root)),
        "binary": shlex.quote(binary or binary_path()),
        "handoff": shlex.quote(str(handoff_file)),
    }
    if "fish" in name:
        return _FISH_TEMPLATE.format(**values)
    label = "zsh" if "zsh" in name else "bash"
    return _POSIX_TEMPLATE.format(shell_label=label, **values)
