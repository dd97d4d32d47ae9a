"""Navigation-oriented builtins."""

from __future__ import annotations

import os
from typing import TYPE_CHECKING, TextIO

from ...coordinator import report
from ..registry import BUILTINS

if TYPE_CHECKING:  # pragma: no cover - typing helper
    from ..core import Shell


@BUILTINS.builtin("cd", description="Change directory")
def cd(shell: "Shell", args: list[str], stdout: TextIO) -> int:
    if len(args) > 1:
        report("cd: Too many arguments")
        return 1
    target = args[0] if args else os.environ.get("HOME", "/")
    try:
        os.chdir(target)
    except OSError as exc:
        report(f"cd: {target}: {exc.strerror or exc}")
        return 1
    return 0


@BUILTINS.builtin("pwd", description="Print working directory")
def pwd(shell: "Shell", args: list[str], stdout: TextIO) -> int:
    stdout.write(os.getcwd() + "\n")
    return 0
