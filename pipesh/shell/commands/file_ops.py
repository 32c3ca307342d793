"""File content builtins."""

from __future__ import annotations

import errno
from typing import TYPE_CHECKING

from ...exceptions import IOCopyFailure
from ...streams import StreamEndpoint, copy_stream
from ..common import ExecutionContext
from ..registry import COMMAND_REGISTRY

if TYPE_CHECKING:  # pragma: no cover - typing helper
    from ..core import Shell

_OPEN_MESSAGES = {
    errno.ENOENT: "No such file or directory",
    errno.EISDIR: "Is a directory",
    errno.EACCES: "Permission denied",
}


def _copy_into(ctx: ExecutionContext, source: StreamEndpoint, label: str) -> None:
    try:
        copy_stream(source, ctx.stdout)
    except BrokenPipeError:
        # The reader is gone; the executor treats that as a quiet stop.
        raise
    except OSError as exc:
        raise IOCopyFailure(f"cat: {label}: {exc.strerror or exc}") from exc


@COMMAND_REGISTRY.command("cat")
def cat(shell: "Shell", ctx: ExecutionContext, args: list[str]) -> int:
    status = 0
    for path in args or ["-"]:
        if path == "-":
            _copy_into(ctx, ctx.stdin, "-")
            continue
        try:
            handle = open(path, "rb")
        except OSError as exc:
            reason = _OPEN_MESSAGES.get(exc.errno, exc.strerror or str(exc))
            ctx.error(f"cat: {path}: {reason}")
            status = 1
            continue
        with StreamEndpoint(handle, owned=True, name=path) as source:
            _copy_into(ctx, source, path)
    return status
