"""Concurrent execution of command pipelines."""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..exceptions import (
    CommandNotFound,
    IOCopyFailure,
    NonZeroExit,
    PipeAllocationFailure,
    ProcessStartFailure,
    ShellError,
)
from ..redirection import Redirections
from ..shell_parser import CommandSegment, Pipeline
from ..streams import StreamEndpoint, open_pipe
from .common import CommandResult, ExecutionContext, StageResult
from .host import SIGPIPE_STATUS, run_host_process
from .resolver import Builtin, CommandResolution, External

if TYPE_CHECKING:
    from .core import Shell

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class Stage:
    index: int
    segment: CommandSegment
    resolution: CommandResolution

    @property
    def name(self) -> str:
        return self.segment.name


class PipelineExecutor:
    """Wires pipeline stages together and runs them.

    A single stage runs in the calling thread so builtins such as ``cd`` and
    ``exit`` act on the shell itself. Longer pipelines run one thread per
    stage, connected by anonymous pipes, and are joined before returning.

    Builtins that change process-wide state (``cd``, ``exit``) are not
    isolated when they run as a concurrent stage: a ``cd`` there changes the
    working directory of the shell and of sibling stages started after it.
    """

    def __init__(self, shell: "Shell") -> None:
        self.shell = shell

    def run(self, pipeline: Pipeline, redirections: Redirections) -> CommandResult:
        stages = [
            Stage(idx, segment, self.shell.resolver.resolve(segment.name))
            for idx, segment in enumerate(pipeline.segments)
        ]
        if not stages:
            return CommandResult()
        final_stdout = redirections.stdout or self.shell.stdout
        final_stderr = redirections.stderr or self.shell.stderr
        if len(stages) == 1:
            ctx = ExecutionContext(
                stdin=self.shell.stdin.borrow(),
                stdout=final_stdout.borrow(),
                stderr=final_stderr.borrow(),
            )
            return CommandResult.from_stages([self.run_stage(stages[0], ctx)])
        contexts = self._wire(len(stages), final_stdout, final_stderr)
        return CommandResult.from_stages(self._run_concurrently(stages, contexts))

    # ------------------------------------------------------------------
    # Wiring
    # ------------------------------------------------------------------
    def _wire(
        self,
        count: int,
        final_stdout: StreamEndpoint,
        final_stderr: StreamEndpoint,
    ) -> list[ExecutionContext]:
        pipes: list[tuple[StreamEndpoint, StreamEndpoint]] = []
        try:
            for _ in range(count - 1):
                pipes.append(open_pipe())
        except PipeAllocationFailure:
            for read_end, write_end in pipes:
                read_end.close()
                write_end.close()
            raise

        contexts: list[ExecutionContext] = []
        for idx in range(count):
            last = idx == count - 1
            stdin = pipes[idx - 1][0].take() if idx > 0 else self.shell.stdin.borrow()
            stdout = final_stdout.borrow() if last else pipes[idx][1].take()
            stderr = final_stderr.borrow() if last else self.shell.stderr.borrow()
            contexts.append(ExecutionContext(stdin=stdin, stdout=stdout, stderr=stderr))
        return contexts

    def _run_concurrently(
        self, stages: list[Stage], contexts: list[ExecutionContext]
    ) -> list[StageResult]:
        futures: list[Future[StageResult]] = []
        with ThreadPoolExecutor(max_workers=len(stages), thread_name_prefix="pipesh-stage") as pool:
            try:
                for stage, ctx in zip(stages, contexts):
                    futures.append(pool.submit(self.run_stage, stage, ctx))
            except RuntimeError:
                # Stages that never started still own their pipe ends.
                for ctx in contexts[len(futures) :]:
                    ctx.release()
                raise
            wait(futures)
        # Re-raises SystemExit from an ``exit`` stage once every stage is done.
        return [future.result() for future in futures]

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------
    def run_stage(self, stage: Stage, ctx: ExecutionContext) -> StageResult:
        logger.debug("stage %d: %s", stage.index, stage.segment.argv)
        try:
            resolution = stage.resolution
            if isinstance(resolution, Builtin):
                return self._run_builtin(stage, resolution, ctx)
            if isinstance(resolution, External):
                return self._run_external(stage, resolution, ctx)
            error = CommandNotFound(stage.name)
            ctx.error(str(error))
            return StageResult(stage.name, error.exit_code, error)
        finally:
            ctx.release()

    def _run_builtin(self, stage: Stage, builtin: Builtin, ctx: ExecutionContext) -> StageResult:
        try:
            status = builtin.handler(self.shell, ctx, stage.segment.args) or 0
            ctx.stdout.flush()
        except BrokenPipeError:
            logger.debug("stage %d (%s): reader closed the pipe", stage.index, stage.name)
            return StageResult(stage.name, SIGPIPE_STATUS, broken_pipe=True)
        except ShellError as exc:
            ctx.error(str(exc))
            return StageResult(stage.name, exc.exit_code, exc)
        except OSError as exc:
            error = IOCopyFailure(f"{stage.name}: {exc.strerror or exc}")
            ctx.error(str(error))
            return StageResult(stage.name, error.exit_code, error)
        return _with_status(stage, status)

    def _run_external(self, stage: Stage, command: External, ctx: ExecutionContext) -> StageResult:
        try:
            status, broken_pipe = run_host_process(command, stage.segment.args, ctx)
        except ProcessStartFailure as exc:
            ctx.error(str(exc))
            return StageResult(stage.name, exc.exit_code, exc)
        if broken_pipe:
            return StageResult(stage.name, status, broken_pipe=True)
        return _with_status(stage, status)


def _with_status(stage: Stage, status: int) -> StageResult:
    if status == 0:
        return StageResult(stage.name)
    return StageResult(stage.name, status, NonZeroExit(stage.name, status))


__all__ = ["PipelineExecutor", "Stage"]
