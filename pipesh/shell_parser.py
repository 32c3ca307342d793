"""Redirection and pipeline parsing on top of the tokenizer."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Sequence

from .exceptions import MissingRedirectionTarget
from .tokenizer import is_operator, tokenize

PIPE = "|"


class Stream(str, Enum):
    STDOUT = "stdout"
    STDERR = "stderr"


class RedirectMode(str, Enum):
    TRUNCATE = "truncate"
    APPEND = "append"


_REDIRECT_OPERATORS: dict[str, tuple[Stream, RedirectMode]] = {
    ">": (Stream.STDOUT, RedirectMode.TRUNCATE),
    "1>": (Stream.STDOUT, RedirectMode.TRUNCATE),
    ">>": (Stream.STDOUT, RedirectMode.APPEND),
    "1>>": (Stream.STDOUT, RedirectMode.APPEND),
    "2>": (Stream.STDERR, RedirectMode.TRUNCATE),
    "2>>": (Stream.STDERR, RedirectMode.APPEND),
}
REDIRECT_OPERATORS = frozenset(_REDIRECT_OPERATORS)


@dataclass(frozen=True, slots=True)
class RedirectionSpec:
    stream: Stream
    mode: RedirectMode
    path: str

    @property
    def append(self) -> bool:
        return self.mode is RedirectMode.APPEND


@dataclass(slots=True)
class CommandSegment:
    name: str
    args: list[str] = field(default_factory=list)

    @property
    def argv(self) -> list[str]:
        return [self.name, *self.args]


@dataclass
class Pipeline:
    segments: list[CommandSegment]
    redirections: dict[Stream, RedirectionSpec] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.segments)


def parse_redirections(
    tokens: Sequence[str],
) -> tuple[list[str], dict[Stream, RedirectionSpec]]:
    """Strip redirection operators and their targets from ``tokens``.

    The last operator for a given stream wins.
    """

    filtered: list[str] = []
    specs: dict[Stream, RedirectionSpec] = {}
    idx = 0
    while idx < len(tokens):
        token = tokens[idx]
        if is_operator(token, REDIRECT_OPERATORS):
            if idx + 1 >= len(tokens):
                raise MissingRedirectionTarget(token)
            stream, mode = _REDIRECT_OPERATORS[token]
            specs[stream] = RedirectionSpec(stream, mode, str(tokens[idx + 1]))
            idx += 2
            continue
        filtered.append(token)
        idx += 1
    return filtered, specs


def split_pipeline(tokens: Sequence[str]) -> list[CommandSegment]:
    """Split ``tokens`` on unquoted pipes; empty segments are dropped."""

    segments: list[CommandSegment] = []
    current: list[str] = []
    for token in tokens:
        if is_operator(token, (PIPE,)):
            _finalize_segment(segments, current)
            current = []
            continue
        current.append(token)
    _finalize_segment(segments, current)
    return segments


def _finalize_segment(segments: list[CommandSegment], tokens: list[str]) -> None:
    if not tokens:
        return
    name, *args = tokens
    segments.append(CommandSegment(name=name, args=args))


def parse_pipeline(command_line: str) -> Pipeline:
    tokens = tokenize(command_line)
    if not tokens:
        return Pipeline(segments=[])
    filtered, redirections = parse_redirections(tokens)
    return Pipeline(segments=split_pipeline(filtered), redirections=redirections)


__all__ = [
    "CommandSegment",
    "PIPE",
    "Pipeline",
    "REDIRECT_OPERATORS",
    "RedirectMode",
    "RedirectionSpec",
    "Stream",
    "parse_pipeline",
    "parse_redirections",
    "split_pipeline",
]
