"""Core Shell implementation."""

from __future__ import annotations

import logging
import sys
from collections.abc import Sequence
from typing import IO, Any

from ..completion import CommandCompleter, Completion
from ..exceptions import PipeAllocationFailure, ShellSyntaxError
from ..history import HistoryStore
from ..redirection import Redirections
from ..shell_parser import parse_pipeline
from ..streams import StreamEndpoint
from .common import CommandResult
from .executor import PipelineExecutor
from .registry import COMMAND_REGISTRY, BuiltinSpec
from .resolver import CommandResolution, CommandResolver, search_path_from_env

logger = logging.getLogger(__name__)

PROGRAM_NAME = "pipesh"


class Shell:
    """Turns input lines into wired pipelines of builtins and host processes."""

    def __init__(
        self,
        *,
        search_path: Sequence[str] | None = None,
        history: HistoryStore | None = None,
        stdin: IO[Any] | None = None,
        stdout: IO[Any] | None = None,
        stderr: IO[Any] | None = None,
    ) -> None:
        self.history = history if history is not None else HistoryStore()
        self.stdin = StreamEndpoint.borrowed(sys.stdin if stdin is None else stdin, name="<stdin>")
        self.stdout = StreamEndpoint.borrowed(sys.stdout if stdout is None else stdout, name="<stdout>")
        self.stderr = StreamEndpoint.borrowed(sys.stderr if stderr is None else stderr, name="<stderr>")
        self.resolver = CommandResolver(
            self._load_builtins(),
            search_path_from_env() if search_path is None else search_path,
        )
        self.executor = PipelineExecutor(self)

    @staticmethod
    def _load_builtins() -> dict[str, BuiltinSpec]:
        # Import command modules for their side effects (registration)
        from . import commands  # noqa: F401

        return {spec.name: spec for spec in COMMAND_REGISTRY.iter_commands()}

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------
    def builtin_names(self) -> list[str]:
        return sorted(self.resolver.builtins)

    def available_commands(self) -> list[str]:
        return list(dict.fromkeys([*self.builtin_names(), *self.resolver.iter_executables()]))

    def resolve(self, name: str) -> CommandResolution:
        return self.resolver.resolve(name)

    def completer(self) -> CommandCompleter:
        return CommandCompleter(self.available_commands())

    def complete(self, buffer: str, pos: int | None = None) -> Completion:
        return self.completer().complete(buffer, pos)

    def diagnostic(self, message: str) -> None:
        try:
            self.stderr.write(f"{PROGRAM_NAME}: {message}\n".encode(errors="surrogateescape"))
        except OSError as exc:
            logger.warning("cannot write diagnostic: %s", exc)

    # ------------------------------------------------------------------
    # Dispatcher
    # ------------------------------------------------------------------
    def exec(self, line: str) -> CommandResult:
        if not line.strip():
            return CommandResult()
        self.history.append(line)
        try:
            pipeline = parse_pipeline(line)
        except ShellSyntaxError as exc:
            self.diagnostic(str(exc))
            return CommandResult(exit_code=exc.exit_code, error=exc)
        with Redirections(pipeline.redirections, diagnostics=self.stderr, prefix=PROGRAM_NAME) as redirections:
            if not pipeline.segments:
                return CommandResult()
            logger.debug("running %s", [segment.argv for segment in pipeline.segments])
            try:
                return self.executor.run(pipeline, redirections)
            except PipeAllocationFailure as exc:
                self.diagnostic(str(exc))
                return CommandResult(exit_code=exc.exit_code, error=exc)


__all__ = ["PROGRAM_NAME", "Shell"]
