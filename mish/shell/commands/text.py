"""Text output builtins."""

from __future__ import annotations

from typing import TYPE_CHECKING, TextIO

from ..registry import BUILTINS

if TYPE_CHECKING:  # pragma: no cover - typing helper
    from ..core import Shell

CLEAR_SEQUENCE = "\033[H\033[2J"


@BUILTINS.builtin("echo", description="Print arguments")
def echo(shell: "Shell", args: list[str], stdout: TextIO) -> int:
    stdout.write(" ".join(args) + "\n")
    return 0


@BUILTINS.builtin("clear", description="Clear the terminal")
def clear(shell: "Shell", args: list[str], stdout: TextIO) -> int:
    stdout.write(CLEAR_SEQUENCE)
    return 0
