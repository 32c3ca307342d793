"""Classification of command names into builtins and search-path executables."""

from __future__ import annotations

import logging
import os
import stat
from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass
from typing import Union

from .common import ShellCommand
from .registry import BuiltinSpec

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Builtin:
    name: str
    handler: ShellCommand


@dataclass(frozen=True, slots=True)
class External:
    name: str
    path: str


@dataclass(frozen=True, slots=True)
class NotFound:
    name: str


CommandResolution = Union[Builtin, External, NotFound]


def search_path_from_env(env: Mapping[str, str] | None = None) -> list[str]:
    env = os.environ if env is None else env
    raw = env.get("PATH", "")
    return [entry for entry in raw.split(os.pathsep) if entry]


def is_executable_file(path: str) -> bool:
    try:
        info = os.stat(path)
    except OSError:
        return False
    return stat.S_ISREG(info.st_mode) and os.access(path, os.X_OK)


class CommandResolver:
    """Resolves command names once per segment, before anything runs."""

    def __init__(
        self,
        builtins: Mapping[str, BuiltinSpec],
        search_path: Sequence[str],
    ) -> None:
        self.builtins = builtins
        self.search_path = list(search_path)

    def resolve(self, name: str) -> CommandResolution:
        spec = self.builtins.get(name)
        if spec is not None:
            resolution: CommandResolution = Builtin(name, spec.handler)
        else:
            path = self.find_executable(name)
            resolution = External(name, path) if path else NotFound(name)
        logger.debug("resolved %r -> %r", name, resolution)
        return resolution

    def find_executable(self, name: str) -> str | None:
        """First executable ``<dir>/<name>`` on the search path."""

        if not name:
            return None
        if os.sep in name:
            return name if is_executable_file(name) else None
        for directory in self.search_path:
            candidate = os.path.join(directory, name)
            if is_executable_file(candidate):
                return candidate
        return None

    def iter_executables(self) -> Iterator[str]:
        seen: set[str] = set()
        for directory in self.search_path:
            try:
                entries = sorted(os.listdir(directory))
            except OSError:
                continue
            for entry in entries:
                if entry in seen:
                    continue
                if is_executable_file(os.path.join(directory, entry)):
                    seen.add(entry)
                    yield entry


__all__ = [
    "Builtin",
    "CommandResolution",
    "CommandResolver",
    "External",
    "NotFound",
    "is_executable_file",
    "search_path_from_env",
]
