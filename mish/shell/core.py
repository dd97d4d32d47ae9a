"""Core Shell implementation."""

from __future__ import annotations

import os
import re
import sys
from typing import TextIO

import structlog

from ..coordinator import Coordinator, StageOutcome, report
from ..exceptions import MishError, RedirectionError
from ..logging import configure_logging, get_logger
from ..redirection import open_redirections
from ..shell_parser import Stage, parse_line
from ..spawner import BoundBuiltin
# Import builtin modules for their registration side effects
from . import commands  # noqa: F401
from .commands.environment import assign
from .common import LineResult
from .registry import BUILTINS

logger = get_logger(__name__)

ASSIGNMENT_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*=")


class Shell:
    """Executes command lines as process topologies."""

    def __init__(
        self,
        *,
        env: dict[str, str] | None = None,
        file_mode: int = 0o644,
        stdout: TextIO | None = None,
    ) -> None:
        if not structlog.is_configured():
            configure_logging()
        if env:
            os.environ.update(env)
        self._stdout = stdout
        self.coordinator = Coordinator(resolve_builtin=self.resolve_builtin, file_mode=file_mode)

    @property
    def stdout(self) -> TextIO:
        return self._stdout if self._stdout is not None else sys.stdout

    # ------------------------------------------------------------------
    # Builtin lookup
    # ------------------------------------------------------------------
    def resolve_builtin(self, name: str) -> BoundBuiltin | None:
        builtin = BUILTINS.get(name)
        if builtin is not None:
            handler = builtin.handler

            def bound(args: list[str], stdout: TextIO) -> int:
                return handler(self, args, stdout)

            return bound
        if ASSIGNMENT_RE.match(name):

            def bound_assign(args: list[str], stdout: TextIO) -> int:
                return assign(self, [name, *args], stdout)

            return bound_assign
        return None

    # ------------------------------------------------------------------
    # Dispatcher
    # ------------------------------------------------------------------
    def execute_line(self, line: str) -> LineResult:
        """Run one input line to completion of its waited stages."""
        self.reap_detached()
        try:
            stages = parse_line(line)
        except MishError as exc:
            report(exc)
            return LineResult(error=exc)
        if not stages:
            return LineResult()
        if len(stages) == 1 and not stages[0].runs_parallel:
            builtin = self.resolve_builtin(stages[0].name)
            if builtin is not None:
                return LineResult(outcomes=[self._run_in_process(stages[0], builtin)])
        return LineResult(outcomes=self.coordinator.run(stages))

    def _run_in_process(self, stage: Stage, builtin: BoundBuiltin) -> StageOutcome:
        outcome = StageOutcome(argv=list(stage.argv), pid=os.getpid())
        try:
            plan = open_redirections(stage.redirections, mode=self.coordinator.file_mode)
        except RedirectionError as exc:
            report(exc)
            outcome.pid = None
            outcome.error = exc
            return outcome
        with plan:
            if plan.stdout_fd is None:
                outcome.status = builtin(stage.argv[1:], self.stdout)
                self.stdout.flush()
            else:
                with open(plan.stdout_fd, "w", closefd=False) as target:
                    outcome.status = builtin(stage.argv[1:], target)
        logger.debug("builtin_ran", argv=stage.argv, status=outcome.status)
        return outcome

    def reap_detached(self) -> list[int]:
        """Collect finished detached stages; returns their pids."""
        return [handle.pid for handle, _ in self.coordinator.reap_detached()]


__all__ = ["Shell", "ASSIGNMENT_RE"]
