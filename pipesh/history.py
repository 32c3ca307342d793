"""In-memory command history with file load/save."""

from __future__ import annotations

import os
from collections.abc import Iterator
from typing import Literal

SaveMode = Literal["overwrite", "append"]


class HistoryStore:
    """Ordered record of issued lines.

    ``save_to(..., mode="append")`` only writes the lines added since the last
    save, so repeated appends to the same file do not duplicate entries.
    """

    def __init__(self, lines: list[str] | None = None) -> None:
        self._lines: list[str] = list(lines or [])
        self._saved = 0

    def __len__(self) -> int:
        return len(self._lines)

    def __iter__(self) -> Iterator[str]:
        return iter(tuple(self._lines))

    def append(self, line: str) -> None:
        self._lines.append(line)

    def read_all(self) -> list[str]:
        return list(self._lines)

    def load_from(self, path: str | os.PathLike[str]) -> int:
        """Append every non-blank line of ``path``; returns how many were loaded."""

        with open(path, encoding="utf-8", errors="surrogateescape") as handle:
            loaded = [line.rstrip("\r\n") for line in handle]
        loaded = [line for line in loaded if line.strip()]
        self._lines.extend(loaded)
        return len(loaded)

    def mark_saved(self) -> None:
        """Treat every current line as already persisted."""

        self._saved = len(self._lines)

    def save_to(self, path: str | os.PathLike[str], mode: SaveMode = "overwrite") -> int:
        if mode == "overwrite":
            pending = self._lines
            file_mode = "w"
        elif mode == "append":
            pending = self._lines[self._saved :]
            file_mode = "a"
        else:
            raise ValueError(f"Unknown history save mode: {mode}")
        with open(path, file_mode, encoding="utf-8", errors="surrogateescape") as handle:
            for line in pending:
                handle.write(f"{line}\n")
        self._saved = len(self._lines)
        return len(pending)


__all__ = ["HistoryStore", "SaveMode"]
