"""Launch a line's stages and reap the ones the caller must wait for."""

from __future__ import annotations

import os
import sys
from collections.abc import Callable
from dataclasses import dataclass, field

from .exceptions import MishError, PipeError, RedirectionError, SpawnError
from .logging import get_logger
from .redirection import open_redirections
from .shell_parser import Stage
from .spawner import BoundBuiltin, spawn
from .topology import Topology, build_topology, split_pipelines

logger = get_logger(__name__)

BuiltinResolver = Callable[[str], BoundBuiltin | None]


@dataclass
class ProcessHandle:
    pid: int
    pipeline_id: int
    must_wait: bool
    argv: list[str] = field(default_factory=list)


@dataclass
class StageOutcome:
    """What happened to one stage of a line.

    ``status`` is the decoded exit status of a waited stage, ``None`` when the
    stage was detached or never started (see ``error``).
    """

    argv: list[str]
    pid: int | None = None
    status: int | None = None
    detached: bool = False
    error: MishError | None = None


def report(error: MishError | str) -> None:
    sys.stderr.write(f"mish: {error}\n")
    sys.stderr.flush()


class Coordinator:
    """Drives one line from stages to reaped processes."""

    def __init__(
        self,
        *,
        resolve_builtin: BuiltinResolver | None = None,
        file_mode: int = 0o644,
    ) -> None:
        self.resolve_builtin = resolve_builtin or (lambda name: None)
        self.file_mode = file_mode
        self.detached: list[ProcessHandle] = []

    # ------------------------------------------------------------------
    # Launching
    # ------------------------------------------------------------------
    def run(self, stages: list[Stage]) -> list[StageOutcome]:
        outcomes = [StageOutcome(argv=list(stage.argv)) for stage in stages]
        handles: dict[int, ProcessHandle] = {}
        index = 0
        try:
            for pipeline_id, pipeline in enumerate(split_pipelines(stages)):
                topology = build_topology(pipeline_id, pipeline)
                try:
                    for position, stage in enumerate(pipeline):
                        handle = self._launch(topology, position, stage, outcomes[index + position])
                        if handle is not None:
                            handles[index + position] = handle
                finally:
                    topology.close()
                index += len(pipeline)
        except (PipeError, SpawnError) as exc:
            report(exc)
            logger.debug("line_aborted", reason=str(exc), launched=len(handles))
            for outcome in outcomes:
                if outcome.pid is None and outcome.error is None:
                    outcome.error = exc

        for position, handle in handles.items():
            if handle.must_wait:
                outcomes[position].status = self.reap(handle)
            else:
                self.detach(handle)
                outcomes[position].detached = True
        return outcomes

    def _launch(
        self,
        topology: Topology,
        position: int,
        stage: Stage,
        outcome: StageOutcome,
    ) -> ProcessHandle | None:
        try:
            plan = open_redirections(stage.redirections, mode=self.file_mode)
        except RedirectionError as exc:
            report(exc)
            outcome.error = exc
            return None
        with plan:
            pid = spawn(
                stage.argv,
                topology.wirings[position],
                topology.descriptors,
                plan,
                builtin=self.resolve_builtin(stage.name),
            )
        outcome.pid = pid
        return ProcessHandle(
            pid=pid,
            pipeline_id=topology.pipeline_id,
            must_wait=not stage.runs_parallel,
            argv=list(stage.argv),
        )

    # ------------------------------------------------------------------
    # Reaping
    # ------------------------------------------------------------------
    def reap(self, handle: ProcessHandle) -> int:
        """Block until ``handle`` exits and return its decoded status."""
        _, wait_status = os.waitpid(handle.pid, 0)
        status = os.waitstatus_to_exitcode(wait_status)
        logger.debug("stage_reaped", pid=handle.pid, status=status, pipeline=handle.pipeline_id)
        return status

    def detach(self, handle: ProcessHandle) -> None:
        logger.debug("stage_detached", pid=handle.pid, argv=handle.argv)
        self.detached.append(handle)

    def reap_detached(self) -> list[tuple[ProcessHandle, int]]:
        """Collect detached children that already exited, without blocking."""
        finished: list[tuple[ProcessHandle, int]] = []
        running: list[ProcessHandle] = []
        for handle in self.detached:
            try:
                pid, wait_status = os.waitpid(handle.pid, os.WNOHANG)
            except ChildProcessError:
                logger.debug("detached_already_reaped", pid=handle.pid)
                continue
            if pid == 0:
                running.append(handle)
                continue
            status = os.waitstatus_to_exitcode(wait_status)
            logger.debug("stage_reaped", pid=pid, status=status, detached=True)
            finished.append((handle, status))
        self.detached = running
        return finished


__all__ = ["BuiltinResolver", "Coordinator", "ProcessHandle", "StageOutcome", "report"]
