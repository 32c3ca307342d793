"""Meta builtins for shell introspection and control."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ...exceptions import BuiltinArgumentError
from ..common import ExecutionContext
from ..registry import COMMAND_REGISTRY
from ..resolver import Builtin, External

if TYPE_CHECKING:  # pragma: no cover - typing helper
    from ..core import Shell


def _parse_count(command: str, value: str) -> int:
    try:
        count = int(value)
    except ValueError:
        raise BuiltinArgumentError(
            f"{command}: {value}: numeric argument required", exit_code=2
        ) from None
    return count


@COMMAND_REGISTRY.command("exit")
def exit(shell: "Shell", ctx: ExecutionContext, args: list[str]) -> int:  # noqa: A001
    if len(args) > 1:
        raise BuiltinArgumentError("exit: too many arguments")
    status = _parse_count("exit", args[0]) if args else 0
    ctx.stdout.flush()
    raise SystemExit(status & 0xFF)


@COMMAND_REGISTRY.command("type")
def type(shell: "Shell", ctx: ExecutionContext, args: list[str]) -> int:  # noqa: A001
    if not args:
        raise BuiltinArgumentError("type: missing argument", exit_code=2)
    status = 0
    for name in args:
        resolution = shell.resolve(name)
        if isinstance(resolution, Builtin):
            ctx.write(f"{name} is a shell builtin\n")
        elif isinstance(resolution, External):
            ctx.write(f"{name} is {resolution.path}\n")
        else:
            ctx.write(f"{name}: not found\n")
            status = 1
    return status


_HISTORY_FILE_OPTIONS = {"-r", "-w", "-a"}


@COMMAND_REGISTRY.command("history")
def history(shell: "Shell", ctx: ExecutionContext, args: list[str]) -> int:
    if args and args[0] in _HISTORY_FILE_OPTIONS:
        option = args[0]
        if len(args) < 2:
            raise BuiltinArgumentError(f"history: {option}: option requires an argument", exit_code=2)
        path = args[1]
        try:
            if option == "-r":
                shell.history.load_from(path)
            elif option == "-w":
                shell.history.save_to(path, mode="overwrite")
            else:
                shell.history.save_to(path, mode="append")
        except OSError as exc:
            raise BuiltinArgumentError(f"history: {path}: {exc.strerror or exc}") from exc
        return 0

    if len(args) > 1:
        raise BuiltinArgumentError("history: too many arguments", exit_code=2)
    lines = shell.history.read_all()
    start = 0
    if args:
        count = _parse_count("history", args[0])
        if count < 0:
            raise BuiltinArgumentError(f"history: {args[0]}: invalid option", exit_code=2)
        start = max(0, len(lines) - count)
    for idx in range(start, len(lines)):
        ctx.write(f"    {idx + 1}  {lines[idx]}\n")
    return 0
