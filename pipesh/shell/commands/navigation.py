"""Working-directory builtins."""

from __future__ import annotations

import errno
import os
from typing import TYPE_CHECKING

from ...exceptions import BuiltinArgumentError
from ..common import ExecutionContext
from ..registry import COMMAND_REGISTRY

if TYPE_CHECKING:  # pragma: no cover - typing helper
    from ..core import Shell

_CD_MESSAGES = {
    errno.ENOENT: "No such file or directory",
    errno.ENOTDIR: "Not a directory",
    errno.EACCES: "Permission denied",
}


def expand_home(path: str) -> str:
    if path == "~" or path.startswith("~/"):
        return os.path.expanduser(path)
    return path


@COMMAND_REGISTRY.command("pwd")
def pwd(shell: "Shell", ctx: ExecutionContext, _: list[str]) -> int:
    ctx.write(f"{os.getcwd()}\n")
    return 0


@COMMAND_REGISTRY.command("cd")
def cd(shell: "Shell", ctx: ExecutionContext, args: list[str]) -> int:
    if len(args) > 1:
        raise BuiltinArgumentError("cd: too many arguments")
    target = args[0] if args else "~"
    path = expand_home(target)
    try:
        os.chdir(path)
    except OSError as exc:
        reason = _CD_MESSAGES.get(exc.errno, exc.strerror or str(exc))
        raise BuiltinArgumentError(f"cd: {target}: {reason}") from exc
    return 0
