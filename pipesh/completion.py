"""Command-name completion for the line editing front end."""

from __future__ import annotations

import os
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class Completion:
    candidates: list[str] = field(default_factory=list)
    prefix_length: int = 0

    @property
    def common_prefix(self) -> str:
        if not self.candidates:
            return ""
        return os.path.commonprefix(self.candidates)


class CommandCompleter:
    """Completes the token under the cursor against a list of command names."""

    def __init__(self, commands: Iterable[str], *, case_insensitive: bool = True) -> None:
        self.commands = list(dict.fromkeys(commands))
        self.case_insensitive = case_insensitive

    def _fold(self, text: str) -> str:
        return text.casefold() if self.case_insensitive else text

    def complete(self, buffer: str, pos: int | None = None) -> Completion:
        """Candidates for the token ending at ``pos`` (a character offset)."""

        if pos is None:
            pos = len(buffer)
        pos = max(0, min(pos, len(buffer)))
        start = pos
        while start > 0 and buffer[start - 1] not in (" ", "\t"):
            start -= 1
        prefix = buffer[start:pos]
        folded = self._fold(prefix)
        matches = [name for name in self.commands if self._fold(name).startswith(folded)]
        matches.sort(key=lambda name: (len(name), name))
        return Completion(candidates=matches, prefix_length=len(prefix))

    def readline_completer(
        self, get_buffer: Callable[[], str], get_cursor: Callable[[], int]
    ) -> Callable[[str, int], str | None]:
        """Adapt to the stdlib ``readline.set_completer`` protocol."""

        cache: list[str] = []

        def completer(_text: str, state: int) -> str | None:
            if state == 0:
                cache[:] = [f"{name} " for name in self.complete(get_buffer(), get_cursor()).candidates]
            return cache[state] if state < len(cache) else None

        return completer


__all__ = ["CommandCompleter", "Completion"]
