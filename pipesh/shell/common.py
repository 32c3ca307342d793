"""Shared shell types."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from ..exceptions import ShellError
from ..streams import StreamEndpoint

if TYPE_CHECKING:
    from .core import Shell

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class StageResult:
    name: str
    exit_code: int = 0
    error: ShellError | None = None
    broken_pipe: bool = False


@dataclass(slots=True)
class CommandResult:
    exit_code: int = 0
    error: ShellError | None = None
    stages: list[StageResult] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def from_stages(cls, stages: list[StageResult]) -> "CommandResult":
        for stage in stages:
            if stage.error is not None:
                return cls(exit_code=stage.error.exit_code, error=stage.error, stages=stages)
        return cls(stages=stages)


@dataclass(slots=True)
class ExecutionContext:
    """Streams one stage runs against.

    Endpoints the context owns (pipe ends moved into it) are closed by
    :meth:`release`; borrowed endpoints are only flushed.
    """

    stdin: StreamEndpoint
    stdout: StreamEndpoint
    stderr: StreamEndpoint

    def write(self, text: str | bytes) -> None:
        data = text.encode(errors="surrogateescape") if isinstance(text, str) else text
        self.stdout.write(data)

    def error(self, message: str) -> None:
        try:
            self.stderr.write(f"{message}\n".encode(errors="surrogateescape"))
        except OSError as exc:
            # A diagnostic that cannot be written must not end the shell.
            logger.warning("cannot write diagnostic to %s: %s", self.stderr.name, exc)

    def release(self) -> None:
        for endpoint in (self.stdin, self.stdout, self.stderr):
            endpoint.close()


ShellCommand = Callable[["Shell", ExecutionContext, list[str]], "int | None"]


__all__ = ["CommandResult", "ExecutionContext", "ShellCommand", "StageResult"]
