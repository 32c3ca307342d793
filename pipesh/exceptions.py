"""Exception hierarchy for pipesh."""

from __future__ import annotations


class ShellError(Exception):
    """Base error; ``exit_code`` is the status reported for the failing stage."""

    exit_code = 1


class ShellSyntaxError(ShellError):
    exit_code = 2


class UnterminatedQuote(ShellSyntaxError):
    def __init__(self, quote: str) -> None:
        super().__init__(f"unexpected EOF while looking for matching `{quote}'")
        self.quote = quote


class MissingRedirectionTarget(ShellSyntaxError):
    def __init__(self, operator: str) -> None:
        super().__init__("syntax error near unexpected token `newline'")
        self.operator = operator


class RedirectionOpenFailure(ShellError):
    def __init__(self, path: str, cause: OSError) -> None:
        super().__init__(f"{path}: {cause.strerror or cause}")
        self.path = path
        self.cause = cause


class CommandNotFound(ShellError):
    exit_code = 127

    def __init__(self, name: str) -> None:
        super().__init__(f"{name}: command not found")
        self.name = name


class BuiltinArgumentError(ShellError):
    def __init__(self, message: str, *, exit_code: int = 1) -> None:
        super().__init__(message)
        self.exit_code = exit_code


class ProcessStartFailure(ShellError):
    exit_code = 126

    def __init__(self, name: str, cause: OSError) -> None:
        super().__init__(f"{name}: {cause.strerror or cause}")
        self.name = name
        self.cause = cause


class PipeAllocationFailure(ShellError):
    pass


class IOCopyFailure(ShellError):
    pass


class NonZeroExit(ShellError):
    """A stage finished with a non-zero status; it already reported its own diagnostics."""

    def __init__(self, name: str, exit_code: int) -> None:
        super().__init__(f"{name}: exited with status {exit_code}")
        self.name = name
        self.exit_code = exit_code


class ClosedEndpointError(ShellError):
    pass


__all__ = [
    "ShellError",
    "ShellSyntaxError",
    "UnterminatedQuote",
    "MissingRedirectionTarget",
    "RedirectionOpenFailure",
    "CommandNotFound",
    "BuiltinArgumentError",
    "ProcessStartFailure",
    "PipeAllocationFailure",
    "IOCopyFailure",
    "NonZeroExit",
    "ClosedEndpointError",
]
