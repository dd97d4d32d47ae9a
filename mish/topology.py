"""Pipe allocation and per-stage descriptor wiring."""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from .exceptions import PipeError
from .logging import get_logger
from .shell_parser import Stage

logger = get_logger(__name__)


@dataclass(frozen=True)
class StageWiring:
    """Pipe ends for one stage; ``None`` inherits the invoking process's stream."""

    stdin_fd: int | None = None
    stdout_fd: int | None = None


@dataclass
class Topology:
    pipeline_id: int
    stages: list[Stage]
    pipes: list[tuple[int, int]] = field(default_factory=list)
    wirings: list[StageWiring] = field(default_factory=list)

    @property
    def descriptors(self) -> list[int]:
        return [fd for pair in self.pipes for fd in pair]

    def close(self) -> None:
        """Close every pipe descriptor still held by this process."""
        for fd in self.descriptors:
            os.close(fd)
        self.pipes = []


def split_pipelines(stages: list[Stage]) -> list[list[Stage]]:
    """Break the stage sequence into maximal runs chained by pipes."""
    pipelines: list[list[Stage]] = []
    for stage in stages:
        if stage.piped_from_predecessor and pipelines:
            pipelines[-1].append(stage)
        else:
            pipelines.append([stage])
    return pipelines


def wire(size: int, pipes: list[tuple[int, int]]) -> list[StageWiring]:
    wirings = []
    for position in range(size):
        stdin_fd = pipes[position - 1][0] if position > 0 else None
        stdout_fd = pipes[position][1] if position < size - 1 else None
        wirings.append(StageWiring(stdin_fd, stdout_fd))
    return wirings


def build_topology(pipeline_id: int, stages: list[Stage]) -> Topology:
    """Allocate all N-1 pipes of a pipeline before anything is forked."""
    topology = Topology(pipeline_id, stages)
    for _ in range(len(stages) - 1):
        try:
            topology.pipes.append(os.pipe())
        except OSError as exc:
            topology.close()
            raise PipeError(f"pipe: {exc.strerror or exc}") from exc
    topology.wirings = wire(len(stages), topology.pipes)
    if topology.pipes:
        logger.debug("pipes_allocated", pipeline=pipeline_id, count=len(topology.pipes))
    return topology


__all__ = ["StageWiring", "Topology", "split_pipelines", "wire", "build_topology"]
