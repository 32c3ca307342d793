"""Scoped opening of a pipeline's output redirections."""

from __future__ import annotations

import logging
from collections.abc import Mapping

from .exceptions import RedirectionOpenFailure
from .shell_parser import RedirectionSpec, Stream
from .streams import StreamEndpoint, open_file

logger = logging.getLogger(__name__)


class Redirections:
    """Files opened for one pipeline; closed when the pipeline is done.

    A target that cannot be opened is reported on ``diagnostics`` and the
    stream falls back to its inherited destination.
    """

    def __init__(
        self,
        specs: Mapping[Stream, RedirectionSpec] | None = None,
        *,
        diagnostics: StreamEndpoint | None = None,
        prefix: str = "pipesh",
    ) -> None:
        self._endpoints: dict[Stream, StreamEndpoint] = {}
        self.failures: list[RedirectionOpenFailure] = []
        for stream, spec in (specs or {}).items():
            try:
                self._endpoints[stream] = open_file(spec.path, append=spec.append)
            except OSError as exc:
                failure = RedirectionOpenFailure(spec.path, exc)
                self.failures.append(failure)
                logger.warning("cannot redirect %s to %s: %s", stream.value, spec.path, exc)
                if diagnostics is not None:
                    try:
                        diagnostics.write(f"{prefix}: {failure}\n".encode(errors="surrogateescape"))
                    except OSError:
                        logger.debug("cannot report redirection failure on %s", diagnostics.name)
                continue
            logger.debug("redirected %s to %s (%s)", stream.value, spec.path, spec.mode.value)

    @property
    def stdout(self) -> StreamEndpoint | None:
        return self._endpoints.get(Stream.STDOUT)

    @property
    def stderr(self) -> StreamEndpoint | None:
        return self._endpoints.get(Stream.STDERR)

    def close(self) -> None:
        if not self._endpoints:
            return
        _, endpoint = self._endpoints.popitem()
        try:
            endpoint.close()
        finally:
            self.close()

    def __enter__(self) -> "Redirections":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()


__all__ = ["Redirections"]
