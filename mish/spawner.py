"""Fork one child per stage, wire its descriptors and replace its image."""

from __future__ import annotations

import os
import sys
from collections.abc import Callable
from typing import TextIO

from .exceptions import ExecError, SpawnError
from .logging import get_logger
from .redirection import RedirectionPlan
from .topology import StageWiring

logger = get_logger(__name__)

STDIN_FILENO = 0
STDOUT_FILENO = 1
STDERR_FILENO = 2

EXIT_FAILURE = 1
EXIT_NOT_EXECUTABLE = 126
EXIT_NOT_FOUND = ExecError.exit_code

# A builtin already bound to its shell: (args, stdout) -> status.
BoundBuiltin = Callable[[list[str], TextIO], int]


def child_report(message: str) -> None:
    """Write straight to fd 2, bypassing the stream objects inherited from the parent."""
    os.write(STDERR_FILENO, f"mish: {message}\n".encode(errors="replace"))


def _install(wiring: StageWiring, plan: RedirectionPlan) -> None:
    if wiring.stdin_fd is not None:
        os.dup2(wiring.stdin_fd, STDIN_FILENO)
    if wiring.stdout_fd is not None:
        os.dup2(wiring.stdout_fd, STDOUT_FILENO)
    # Applied after the pipe ends so explicit redirection wins.
    if plan.stdin_fd is not None:
        os.dup2(plan.stdin_fd, STDIN_FILENO)
    if plan.stdout_fd is not None:
        os.dup2(plan.stdout_fd, STDOUT_FILENO)


def _close_unused(descriptors: list[int], plan: RedirectionPlan) -> None:
    for fd in descriptors:
        if fd > STDERR_FILENO:
            os.close(fd)
    plan.close()


def _run_builtin(builtin: BoundBuiltin, argv: list[str]) -> int:
    with open(STDOUT_FILENO, "w", closefd=False) as stdout:
        status = builtin(argv[1:], stdout)
        stdout.flush()
    return status


def _exec(argv: list[str]) -> int:
    try:
        os.execvp(argv[0], argv)
    except FileNotFoundError:
        error = ExecError(f"{argv[0]}: command not found")
        child_report(str(error))
        return error.exit_code
    except OSError as exc:
        child_report(f"{argv[0]}: {exc.strerror or exc}")
        return EXIT_NOT_EXECUTABLE


def _child_main(
    argv: list[str],
    wiring: StageWiring,
    descriptors: list[int],
    plan: RedirectionPlan,
    builtin: BoundBuiltin | None,
) -> int:
    _install(wiring, plan)
    _close_unused(descriptors, plan)
    if builtin is not None:
        return _run_builtin(builtin, argv)
    return _exec(argv)


def spawn(
    argv: list[str],
    wiring: StageWiring,
    descriptors: list[int],
    plan: RedirectionPlan,
    *,
    builtin: BoundBuiltin | None = None,
) -> int:
    """Fork a child for ``argv`` and return its pid.

    ``descriptors`` lists every pipe descriptor of the pipeline; the child
    closes all of them after installing its own ends. The forked branch never
    returns: it always leaves through ``os._exit``.
    """
    sys.stdout.flush()
    sys.stderr.flush()
    try:
        pid = os.fork()
    except OSError as exc:
        raise SpawnError(f"fork: {exc.strerror or exc}") from exc

    if pid == 0:
        status = EXIT_FAILURE
        try:
            status = _child_main(argv, wiring, descriptors, plan, builtin)
        except Exception as exc:  # reported from the child, never re-raised into parent code
            child_report(f"{argv[0]}: {exc}")
        finally:
            os._exit(status)

    logger.debug("stage_spawned", pid=pid, argv=argv, builtin=builtin is not None)
    return pid


__all__ = [
    "BoundBuiltin",
    "EXIT_FAILURE",
    "EXIT_NOT_EXECUTABLE",
    "EXIT_NOT_FOUND",
    "child_report",
    "spawn",
]
