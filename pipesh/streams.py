"""Owned stream endpoints: pipe ends, redirected files and standard streams."""

from __future__ import annotations

import io
import logging
import os
from typing import IO, Any

from .exceptions import ClosedEndpointError, PipeAllocationFailure

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


def binary_stream(stream: Any) -> IO[bytes]:
    """Return the byte-level object behind ``stream`` (``sys.stdout`` -> ``sys.stdout.buffer``)."""

    if isinstance(stream, io.TextIOBase):
        buffer = getattr(stream, "buffer", None)
        if buffer is None:
            raise TypeError(f"{type(stream).__name__} has no byte buffer; pass a binary stream")
        return buffer
    return stream


class StreamEndpoint:
    """Handle to one end of a byte stream.

    An owning endpoint closes its file exactly once. A borrowed endpoint only
    flushes on close, so standard streams and files owned elsewhere survive
    stage teardown. Ownership moves with :meth:`take`.
    """

    __slots__ = ("_file", "_owned", "_closed", "name")

    def __init__(self, file: IO[bytes], *, owned: bool, name: str = "") -> None:
        self._file: IO[bytes] | None = file
        self._owned = owned
        self._closed = False
        self.name = name or getattr(file, "name", "") or repr(file)

    def __repr__(self) -> str:
        state = "closed" if self.closed else ("owned" if self._owned else "borrowed")
        return f"<StreamEndpoint {self.name!s} {state}>"

    # ------------------------------------------------------------------
    # Ownership
    # ------------------------------------------------------------------
    @classmethod
    def borrowed(cls, stream: Any, *, name: str = "") -> "StreamEndpoint":
        return cls(binary_stream(stream), owned=False, name=name)

    @property
    def owned(self) -> bool:
        return self._owned

    @property
    def closed(self) -> bool:
        return self._closed or self._file is None

    def borrow(self) -> "StreamEndpoint":
        return StreamEndpoint(self._require(), owned=False, name=self.name)

    def take(self) -> "StreamEndpoint":
        """Move this endpoint (and its ownership) into a new handle."""

        file = self._require()
        moved = StreamEndpoint(file, owned=self._owned, name=self.name)
        self._file = None
        self._owned = False
        return moved

    def _require(self) -> IO[bytes]:
        if self._file is None or self._closed:
            raise ClosedEndpointError(f"stream endpoint {self.name} is closed or was moved")
        return self._file

    # ------------------------------------------------------------------
    # I/O
    # ------------------------------------------------------------------
    def fileno(self) -> int | None:
        """OS descriptor for the endpoint, or ``None`` for in-memory streams."""

        try:
            return self._require().fileno()
        except (AttributeError, OSError, ValueError):
            # io.UnsupportedOperation derives from OSError and ValueError
            return None

    def read(self, size: int = CHUNK_SIZE) -> bytes:
        file = self._require()
        reader = getattr(file, "read1", file.read)
        return reader(size)

    def write(self, data: bytes) -> None:
        file = self._require()
        view = memoryview(data)
        # raw pipe writes may be partial
        while view:
            written = file.write(view)
            view = view[written:]
        file.flush()

    def flush(self) -> None:
        if self.closed:
            return
        flush = getattr(self._file, "flush", None)
        if flush is not None:
            flush()

    def close(self) -> None:
        if self.closed:
            return
        file = self._file
        self._closed = True
        if not self._owned:
            try:
                file.flush()
            except (OSError, ValueError):
                logger.debug("flush failed while releasing borrowed %s", self.name, exc_info=True)
            return
        try:
            file.close()
        except BrokenPipeError:
            # The reader is gone; nothing left to deliver.
            logger.debug("reader of %s went away before close", self.name)
        except OSError as exc:
            # Unflushed data is lost; the failed write was already reported.
            logger.debug("flush on close of %s failed: %s", self.name, exc)
        logger.debug("closed %s", self.name)

    def __enter__(self) -> "StreamEndpoint":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()


def open_pipe() -> tuple[StreamEndpoint, StreamEndpoint]:
    """Allocate an anonymous pipe as ``(read_end, write_end)``."""

    try:
        read_fd, write_fd = os.pipe()
    except OSError as exc:
        logger.warning("pipe allocation failed: %s", exc)
        raise PipeAllocationFailure(f"cannot create pipe: {exc.strerror or exc}") from exc
    reader = open(read_fd, "rb", buffering=0)
    writer = open(write_fd, "wb", buffering=0)
    logger.debug("allocated pipe r=%d w=%d", read_fd, write_fd)
    return (
        StreamEndpoint(reader, owned=True, name=f"pipe:{read_fd}"),
        StreamEndpoint(writer, owned=True, name=f"pipe:{write_fd}"),
    )


def open_file(path: str | os.PathLike[str], *, append: bool = False) -> StreamEndpoint:
    file = open(path, "ab" if append else "wb")
    return StreamEndpoint(file, owned=True, name=os.fspath(path))


def copy_stream(source: StreamEndpoint, target: StreamEndpoint) -> int:
    """Copy ``source`` into ``target`` until EOF; returns the byte count."""

    total = 0
    while True:
        chunk = source.read(CHUNK_SIZE)
        if not chunk:
            return total
        target.write(chunk)
        total += len(chunk)


__all__ = [
    "CHUNK_SIZE",
    "StreamEndpoint",
    "binary_stream",
    "copy_stream",
    "open_file",
    "open_pipe",
]
