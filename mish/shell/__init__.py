"""Shell package: builtins and the line entry point."""

from .common import LineResult
from .core import Shell

__all__ = ["Shell", "LineResult"]
