"""Custom exceptions for mish."""

from __future__ import annotations


class MishError(Exception):
    """Base class for errors reported at the line boundary."""

    exit_code = 1


class ParseError(MishError, ValueError):
    """The line is structurally invalid; nothing was spawned."""

    exit_code = 2


class PipeError(MishError):
    """An anonymous pipe could not be created."""


class SpawnError(MishError):
    """A child process could not be created."""


class RedirectionError(MishError):
    """A redirection target could not be opened."""


class ExecError(MishError):
    """The program image could not be replaced inside a child."""

    exit_code = 127


__all__ = [
    "MishError",
    "ParseError",
    "PipeError",
    "SpawnError",
    "RedirectionError",
    "ExecError",
]
