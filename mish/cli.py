"""Command-line interface for mish."""

from __future__ import annotations

import argparse
import os
import sys

from .logging import configure_logging
from .shell import Shell


def _add_common_flags(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Diagnostic log level (logs go to stderr).",
    )
    parser.add_argument(
        "--json-logs",
        action="store_true",
        help="Emit diagnostic logs as JSON.",
    )


def _build_shell(args: argparse.Namespace) -> Shell:
    configure_logging(json_output=args.json_logs, level=args.log_level)
    return Shell()


def _run_exec(args: argparse.Namespace) -> int:
    shell = _build_shell(args)
    return shell.execute_line(args.line).last_status


def _run_script(args: argparse.Namespace) -> int:
    shell = _build_shell(args)
    try:
        with open(args.script) as handle:
            lines = handle.read().splitlines()
    except OSError as exc:
        sys.stderr.write(f"Failed to open file: {exc.strerror or exc}\n")
        return 1
    status = 0
    for line in lines:
        if line.strip():
            status = shell.execute_line(line).last_status
    return status


def _run_shell(args: argparse.Namespace) -> int:
    shell = _build_shell(args)
    status = 0
    try:
        while True:
            line = input(f"mish:{os.getcwd()}$ ")
            if line.strip():
                status = shell.execute_line(line).last_status
    except EOFError:
        sys.stdout.write("\n")
        return status
    except KeyboardInterrupt:
        sys.stdout.write("\n")
        return 130


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(prog="mish")
    parser.set_defaults(func=_run_shell, log_level="WARNING", json_logs=False)
    subparsers = parser.add_subparsers(dest="command_name")

    exec_parser = subparsers.add_parser("exec", help="Run a single command line")
    _add_common_flags(exec_parser)
    exec_parser.add_argument("line", help="Command line to execute")
    exec_parser.set_defaults(func=_run_exec)

    run_parser = subparsers.add_parser("run", help="Run a script one line at a time")
    _add_common_flags(run_parser)
    run_parser.add_argument("script", help="Path to a file of command lines")
    run_parser.set_defaults(func=_run_script)

    shell_parser = subparsers.add_parser("shell", help="Start an interactive shell")
    _add_common_flags(shell_parser)
    shell_parser.set_defaults(func=_run_shell)

    args = parser.parse_args(argv)
    exit_code = args.func(args)
    raise SystemExit(exit_code)


__all__ = ["main"]
