"""mish package: a small shell that turns command lines into process topologies."""

from .coordinator import Coordinator, ProcessHandle, StageOutcome
from .exceptions import ExecError, MishError, ParseError, PipeError, RedirectionError, SpawnError
from .logging import configure_logging, get_logger
from .shell import LineResult, Shell
from .shell_parser import Redirection, Stage, Token, TokenKind, parse_line, tokenize

__all__ = [
    "Shell",
    "LineResult",
    "StageOutcome",
    "Coordinator",
    "ProcessHandle",
    "Stage",
    "Redirection",
    "Token",
    "TokenKind",
    "parse_line",
    "tokenize",
    "configure_logging",
    "get_logger",
    "MishError",
    "ParseError",
    "PipeError",
    "SpawnError",
    "RedirectionError",
    "ExecError",
]
