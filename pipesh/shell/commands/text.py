"""Text output builtins."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..common import ExecutionContext
from ..registry import COMMAND_REGISTRY

if TYPE_CHECKING:  # pragma: no cover - typing helper
    from ..core import Shell


@COMMAND_REGISTRY.command("echo")
def echo(shell: "Shell", ctx: ExecutionContext, args: list[str]) -> int:
    ctx.write(" ".join(args) + "\n")
    return 0
