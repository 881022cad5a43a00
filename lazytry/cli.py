"""Command-line front door for lazytry.

Parses the command, resolves the try root and hand-off file, and dispatches
either to a one-shot operation or to the interactive picker.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from collections.abc import Mapping
from pathlib import Path

from . import git
from .config import resolve_handoff_path, resolve_root
from .directory_index import DirectoryIndex
from .errors import LazyTryError, NotAGitRepository
from .handoff import write_handoff
from .logs import configure_logging
from .runtime import run_picker
from .runtime.app import clone_into_root, worktree_into_root
from .shell import generate_shell_script

logger = logging.getLogger(__name__)

COMMANDS_EPILOG = """\
commands:
  lazytry [query...]            open the picker, optionally pre-filtered
  lazytry new [name...]         create a new dated directory
  lazytry clone <url>           clone a git repository into a dated directory
  lazytry <git-url>             same as clone
  lazytry worktree <repo> [name...]
                                add a worktree of <repo> as a dated directory
  lazytry . [name...]           add a worktree of the current repository
  lazytry init [path]           print shell integration for $SHELL
  lazytry help                  show this message

environment:
  TRY_PATH                      try root (default: ~/src/tries)
  LAZYTRY_HANDOFF_FILE          file the shell wrapper reads (default: ~/.try_cd)
"""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lazytry",
        description="Fresh date-stamped directories for every experiment, with a fuzzy picker.",
        epilog=COMMANDS_EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("args", nargs="*", metavar="ARG", help="Command and its arguments, or a search query.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Write debug records to the log file.")
    return parser


def _finish(target: Path, environ: Mapping[str, str]) -> None:
    """Hand ``target`` to the shell wrapper and echo it."""
    absolute = write_handoff(target, resolve_handoff_path(dict(environ)))
    print(absolute)


def _default_worktree_name(repo_path: Path) -> str:
    return f"{repo_path.absolute().name}-worktree"


def cmd_new(index: DirectoryIndex, words: list[str]) -> Path:
    return index.create(" ".join(words))


def cmd_clone(index: DirectoryIndex, words: list[str]) -> Path:
    if not words:
        raise LazyTryError("git URL required")
    return clone_into_root(index, words[0])


def cmd_worktree(index: DirectoryIndex, repo_path: Path, words: list[str], fallback: bool = False) -> Path:
    """Add a detached worktree of ``repo_path``.

    With ``fallback`` a non-repository gets a plain new directory instead.
    """
    name = " ".join(words) or _default_worktree_name(repo_path)
    repo_path = repo_path.absolute()
    if not git.is_repository(repo_path):
        if fallback:
            logger.info("%s is not a git repository; creating a plain directory", repo_path)
            return index.create(name)
        raise NotAGitRepository(repo_path)
    return worktree_into_root(index, repo_path, name)


def cmd_init(words: list[str], environ: Mapping[str, str]) -> str:
    root = Path(words[0]).expanduser() if words else resolve_root(dict(environ))
    shell_name = os.path.basename(environ.get("SHELL", "") or "bash")
    return generate_shell_script(shell_name, root.absolute(), resolve_handoff_path(dict(environ)))


def run_command(args: list[str], environ: Mapping[str, str]) -> None:
    """Dispatch one parsed command line; raises ``LazyTryError`` on failure."""
    command = args[0] if args else ""
    rest = args[1:]

    if command == "help":
        sys.stdout.write(build_parser().format_help())
        return
    if command == "init":
        sys.stdout.write(cmd_init(rest, environ))
        return

    index = DirectoryIndex(resolve_root(dict(environ)))
    if command == "new":
        _finish(cmd_new(index, rest), environ)
    elif command == "clone":
        _finish(cmd_clone(index, rest), environ)
    elif command == "worktree":
        if not rest:
            raise LazyTryError("repository path required")
        _finish(cmd_worktree(index, Path(rest[0]).expanduser(), rest[1:]), environ)
    elif command == ".":
        _finish(cmd_worktree(index, Path.cwd(), rest, fallback=True), environ)
    elif command and git.looks_like_git_url(command) and not rest:
        _finish(cmd_clone(index, [command]), environ)
    else:
        outcome = run_picker(index.root, " ".join(args))
        if outcome.path is not None:
            _finish(outcome.path, environ)


def main(argv: list[str] | None = None) -> None:
    """Parse CLI arguments and run the requested command.

    Any ``LazyTryError`` ends the process with ``Error: <message>`` on stderr
    and exit status 1.
    """
    parser = build_parser()
    parsed = parser.parse_args(argv)
    log_file = configure_logging(verbose=parsed.verbose)
    logger.debug("lazytry %s (log: %s)", parsed.args, log_file)

    try:
        run_command(list(parsed.args), os.environ)
    except LazyTryError as exc:
        logger.error("%s", exc)
        raise SystemExit(f"Error: {exc}") from exc


if __name__ == "__main__":
    main()
