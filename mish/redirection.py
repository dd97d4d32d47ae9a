"""Open redirection targets for a stage."""

from __future__ import annotations

import os
from dataclasses import dataclass

from .exceptions import RedirectionError
from .logging import get_logger
from .shell_parser import Redirection, TokenKind

logger = get_logger(__name__)

_FLAGS = {
    TokenKind.REDIRECT_OUT: os.O_WRONLY | os.O_CREAT | os.O_TRUNC,
    TokenKind.REDIRECT_APPEND: os.O_WRONLY | os.O_CREAT | os.O_APPEND,
    TokenKind.REDIRECT_IN: os.O_RDONLY,
}


@dataclass
class RedirectionPlan:
    """Descriptors to install over stdin/stdout; ``None`` leaves the slot alone."""

    stdin_fd: int | None = None
    stdout_fd: int | None = None

    def close(self) -> None:
        for fd in (self.stdin_fd, self.stdout_fd):
            if fd is not None:
                os.close(fd)
        self.stdin_fd = None
        self.stdout_fd = None

    def __enter__(self) -> RedirectionPlan:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def open_redirections(redirections: list[Redirection], *, mode: int = 0o644) -> RedirectionPlan:
    """Open every target in encounter order.

    A later redirection of the same direction supersedes an earlier one; the
    earlier target is still created/truncated, as a shell would do. On failure
    every descriptor opened so far is released and RedirectionError is raised.
    """
    plan = RedirectionPlan()
    for redirection in redirections:
        try:
            fd = os.open(redirection.filename, _FLAGS[redirection.kind], mode)
        except OSError as exc:
            plan.close()
            raise RedirectionError(
                f"{redirection.filename}: {exc.strerror or exc}"
            ) from exc
        if redirection.kind is TokenKind.REDIRECT_IN:
            previous, plan.stdin_fd = plan.stdin_fd, fd
        else:
            previous, plan.stdout_fd = plan.stdout_fd, fd
        if previous is not None:
            os.close(previous)
        logger.debug("redirection_opened", target=redirection.filename, op=redirection.kind.value)
    return plan


__all__ = ["RedirectionPlan", "open_redirections"]
