"""Running resolved external commands as host processes."""

from __future__ import annotations

import logging
import signal
import subprocess
import threading
from typing import IO

from ..exceptions import ProcessStartFailure
from ..streams import CHUNK_SIZE, StreamEndpoint
from .common import ExecutionContext
from .resolver import External

logger = logging.getLogger(__name__)

# Status reported when a process was stopped by a closed reader.
SIGPIPE_STATUS = 128 + signal.SIGPIPE


def _pump_in(source: StreamEndpoint, sink: IO[bytes]) -> None:
    try:
        while True:
            chunk = source.read(CHUNK_SIZE)
            if not chunk:
                break
            sink.write(chunk)
            sink.flush()
    except OSError as exc:
        # BrokenPipeError when the process stops reading its input
        logger.debug("stopped feeding from %s: %s", source.name, exc)
    finally:
        try:
            sink.close()
        except BrokenPipeError:
            logger.debug("process closed its input before %s was drained", source.name)


def _pump_out(source: IO[bytes], sink: StreamEndpoint) -> None:
    with source:
        try:
            while True:
                chunk = source.read1(CHUNK_SIZE)
                if not chunk:
                    return
                sink.write(chunk)
        except OSError as exc:
            logger.debug("stopped draining into %s: %s", sink.name, exc)


def run_host_process(command: External, args: list[str], ctx: ExecutionContext) -> tuple[int, bool]:
    """Run ``command`` against ``ctx`` and wait for it.

    Returns ``(status, broken_pipe)``. Endpoints with an OS descriptor are
    handed to the child directly; in-memory streams are pumped by threads.
    Owned endpoints (pipe ends) are closed in the parent as soon as the child
    holds its own copies so that end-of-stream reaches the neighbours.
    """

    stdin_fd = ctx.stdin.fileno()
    stdout_fd = ctx.stdout.fileno()
    stderr_fd = ctx.stderr.fileno()
    ctx.stdout.flush()
    ctx.stderr.flush()
    try:
        process = subprocess.Popen(
            [command.name, *args],
            executable=command.path,
            stdin=subprocess.PIPE if stdin_fd is None else stdin_fd,
            stdout=subprocess.PIPE if stdout_fd is None else stdout_fd,
            stderr=subprocess.PIPE if stderr_fd is None else stderr_fd,
        )
    except OSError as exc:
        raise ProcessStartFailure(command.name, exc) from exc
    logger.debug("started %s (pid %d)", command.path, process.pid)

    pumps: list[threading.Thread] = []
    if process.stdin is not None:
        pumps.append(threading.Thread(target=_pump_in, args=(ctx.stdin, process.stdin), daemon=True))
    if process.stdout is not None:
        pumps.append(threading.Thread(target=_pump_out, args=(process.stdout, ctx.stdout), daemon=True))
    if process.stderr is not None:
        pumps.append(threading.Thread(target=_pump_out, args=(process.stderr, ctx.stderr), daemon=True))
    for pump in pumps:
        pump.start()

    if process.stdin is None:
        ctx.stdin.close()
    if process.stdout is None:
        ctx.stdout.close()
    if process.stderr is None:
        ctx.stderr.close()

    status = process.wait()
    for pump in pumps:
        pump.join()
    logger.debug("%s exited with %d", command.name, status)
    if status == -signal.SIGPIPE:
        return SIGPIPE_STATUS, True
    if status < 0:
        return 128 - status, False
    return status, False


__all__ = ["SIGPIPE_STATUS", "run_host_process"]
