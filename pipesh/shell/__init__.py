"""Shell execution package."""

from .common import CommandResult, ExecutionContext, StageResult
from .core import Shell

__all__ = ["Shell", "CommandResult", "ExecutionContext", "StageResult"]
