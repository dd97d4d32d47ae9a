"""Shared shell types."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, TextIO

from ..coordinator import StageOutcome
from ..exceptions import MishError

if TYPE_CHECKING:
    from .core import Shell


@dataclass(slots=True)
class LineResult:
    outcomes: list[StageOutcome] = field(default_factory=list)
    error: MishError | None = None

    @property
    def last_status(self) -> int:
        """Status of the last waited stage; parse errors map to their exit code."""
        if self.error is not None:
            return self.error.exit_code
        for outcome in reversed(self.outcomes):
            if outcome.error is not None:
                return outcome.error.exit_code
            if outcome.status is not None:
                return outcome.status
        return 0


BuiltinCommand = Callable[["Shell", list[str], TextIO], int]


__all__ = ["LineResult", "BuiltinCommand"]
