"""Environment variable builtins."""

from __future__ import annotations

import os
from typing import TYPE_CHECKING, TextIO

from ...coordinator import report
from ..registry import BUILTINS

if TYPE_CHECKING:  # pragma: no cover - typing helper
    from ..core import Shell


def _set_variable(assignment: str) -> bool:
    name, sep, value = assignment.partition("=")
    if not sep or not name:
        report("Incorrect format. Use VAR=value")
        return False
    try:
        os.environ[name] = value
    except ValueError as exc:
        report(f"export: {exc}")
        return False
    return True


@BUILTINS.builtin("export", description="Set environment variables (NAME=value)")
def export(shell: "Shell", args: list[str], stdout: TextIO) -> int:
    if not args:
        report("Incorrect format. Use VAR=value")
        return 1
    ok = [_set_variable(arg) for arg in args]
    return 0 if all(ok) else 1


def assign(shell: "Shell", args: list[str], stdout: TextIO) -> int:
    """``NAME=value`` typed as a command. Words after the assignment are ignored."""
    return 0 if _set_variable(args[0]) else 1
