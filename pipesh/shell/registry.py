"""Registry for builtin commands."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Iterable

from .common import ShellCommand


@dataclass(slots=True)
class BuiltinSpec:
    name: str
    handler: ShellCommand


class CommandRegistry:
    """Simple container that stores builtin handlers."""

    def __init__(self) -> None:
        self._commands: dict[str, BuiltinSpec] = {}

    def register(self, name: str, handler: ShellCommand) -> ShellCommand:
        if name in self._commands:
            raise ValueError(f"Builtin '{name}' is already registered")
        self._commands[name] = BuiltinSpec(name, handler)
        return handler

    def command(self, name: str) -> Callable[[ShellCommand], ShellCommand]:
        """Decorator variant for registering builtins."""

        def decorator(func: ShellCommand) -> ShellCommand:
            return self.register(name, func)

        return decorator

    def iter_commands(self) -> Iterable[BuiltinSpec]:
        return tuple(self._commands.values())


COMMAND_REGISTRY = CommandRegistry()


__all__ = ["COMMAND_REGISTRY", "BuiltinSpec", "CommandRegistry"]
