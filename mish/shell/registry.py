"""Registry for builtin commands."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from .common import BuiltinCommand


@dataclass(frozen=True, slots=True)
class Builtin:
    name: str
    handler: BuiltinCommand
    description: str = ""


class BuiltinRegistry:
    """Name-keyed table of builtins; a later registration replaces an earlier one."""

    def __init__(self) -> None:
        self._builtins: dict[str, Builtin] = {}

    def builtin(
        self,
        name: str,
        *,
        description: str = "",
    ) -> Callable[[BuiltinCommand], BuiltinCommand]:
        def decorator(func: BuiltinCommand) -> BuiltinCommand:
            self._builtins[name] = Builtin(name, func, description)
            return func

        return decorator

    def get(self, name: str) -> Builtin | None:
        return self._builtins.get(name)

    def sorted_builtins(self) -> list[Builtin]:
        return [self._builtins[name] for name in sorted(self._builtins)]


BUILTINS = BuiltinRegistry()


__all__ = ["BUILTINS", "Builtin", "BuiltinRegistry"]
