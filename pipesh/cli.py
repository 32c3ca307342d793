"""Command-line interface for pipesh."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import Any

from .history import HistoryStore
from .shell import Shell

logger = logging.getLogger(__name__)

PROMPT = "$ "


def _add_common_flags(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--path",
        default=None,
        help=f"Command search path ({os.pathsep}-separated); defaults to $PATH.",
    )
    parser.add_argument(
        "--history-file",
        default=os.environ.get("HISTFILE"),
        help="Load history from this file on start and append to it on exit (default: $HISTFILE).",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log pipeline internals to stderr.",
    )


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _build_shell(args: argparse.Namespace) -> Shell:
    search_path = None
    if args.path is not None:
        search_path = [entry for entry in args.path.split(os.pathsep) if entry]
    history = HistoryStore()
    if args.history_file:
        try:
            loaded = history.load_from(args.history_file)
        except FileNotFoundError:
            logger.debug("history file %s does not exist yet", args.history_file)
        except OSError as exc:
            logger.warning("cannot read history file %s: %s", args.history_file, exc)
        else:
            logger.debug("loaded %d history lines from %s", loaded, args.history_file)
        # Only lines issued in this session get appended on exit.
        history.mark_saved()
    return Shell(search_path=search_path, history=history)


def _save_history(shell: Shell, path: str | None) -> None:
    if not path:
        return
    try:
        shell.history.save_to(path, mode="append")
    except OSError as exc:
        logger.warning("cannot write history file %s: %s", path, exc)


def _install_readline(shell: Shell) -> Any | None:
    """Set up line editing on a terminal; returns the ``readline`` module or ``None``."""

    if not sys.stdin.isatty():
        return None
    import readline

    completer = shell.completer()
    readline.set_completer(completer.readline_completer(readline.get_line_buffer, readline.get_endidx))
    readline.set_completer_delims(" \t\n")
    readline.parse_and_bind("tab: complete")
    for line in shell.history:
        readline.add_history(line)
    return readline


def _run_exec(args: argparse.Namespace) -> int:
    shell = _build_shell(args)
    try:
        result = shell.exec(args.command)
    finally:
        _save_history(shell, args.history_file)
    return result.exit_code


def _run_shell(args: argparse.Namespace) -> int:
    shell = _build_shell(args)
    readline = _install_readline(shell)
    try:
        while True:
            try:
                line = input(PROMPT)
            except KeyboardInterrupt:
                sys.stdout.write("\n")
                continue
            except EOFError:
                return 0
            recorded = len(shell.history)
            shell.exec(line)
            if readline is not None:
                # input() already recorded the line itself; add what `history -r` loaded.
                for entry in shell.history.read_all()[recorded + 1 :]:
                    readline.add_history(entry)
    finally:
        _save_history(shell, args.history_file)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(prog="pipesh")
    subparsers = parser.add_subparsers(dest="command_name", required=True)

    exec_parser = subparsers.add_parser("exec", help="Run a single command line")
    _add_common_flags(exec_parser)
    exec_parser.add_argument("command", help="Command line to execute")
    exec_parser.set_defaults(func=_run_exec)

    shell_parser = subparsers.add_parser("shell", help="Start an interactive shell")
    _add_common_flags(shell_parser)
    shell_parser.set_defaults(func=_run_shell)

    args = parser.parse_args(argv)
    _configure_logging(args.verbose)
    exit_code = args.func(args)
    raise SystemExit(exit_code)


__all__ = ["main"]
