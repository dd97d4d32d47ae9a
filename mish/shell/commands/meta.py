"""Meta builtins for shell introspection."""

from __future__ import annotations

from typing import TYPE_CHECKING, TextIO

from ..registry import BUILTINS

if TYPE_CHECKING:  # pragma: no cover - typing helper
    from ..core import Shell


@BUILTINS.builtin("help", description="Show builtin commands")
def help(shell: "Shell", args: list[str], stdout: TextIO) -> int:  # noqa: A001
    lines = ["Builtin commands:"]
    for builtin in BUILTINS.sorted_builtins():
        if builtin.description:
            lines.append(f"  {builtin.name} - {builtin.description}")
        else:
            lines.append(f"  {builtin.name}")
    lines.append("  exit - Leave the shell")
    lines.append("Anything else is looked up on PATH.")
    stdout.write("\n".join(lines) + "\n")
    return 0
