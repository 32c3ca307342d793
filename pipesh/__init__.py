"""pipesh package: quoting, redirection and concurrent pipelines for a command shell."""

from .completion import CommandCompleter, Completion
from .history import HistoryStore
from .shell import CommandResult, ExecutionContext, Shell, StageResult
from .shell_parser import CommandSegment, Pipeline, RedirectionSpec, parse_pipeline
from .streams import StreamEndpoint
from .tokenizer import Token, tokenize

__all__ = [
    "Shell",
    "CommandResult",
    "StageResult",
    "ExecutionContext",
    "HistoryStore",
    "CommandCompleter",
    "Completion",
    "CommandSegment",
    "Pipeline",
    "RedirectionSpec",
    "parse_pipeline",
    "StreamEndpoint",
    "Token",
    "tokenize",
]
