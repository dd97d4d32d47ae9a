import io
import os

import pytest

from mish import Shell
from mish.exceptions import ParseError, RedirectionError


def setup_shell() -> tuple[Shell, io.StringIO]:
    out = io.StringIO()
    return Shell(stdout=out), out


def test_empty_line_is_noop():
    shell, out = setup_shell()
    result = shell.execute_line("   ")
    assert result.outcomes == []
    assert result.last_status == 0
    assert out.getvalue() == ""


def test_echo_runs_in_process():
    shell, out = setup_shell()
    result = shell.execute_line("echo hello   world")
    assert out.getvalue() == "hello world\n"
    (outcome,) = result.outcomes
    assert outcome.pid == os.getpid()
    assert result.last_status == 0


def test_in_process_builtin_honors_redirection(tmp_path):
    shell, out = setup_shell()
    target = tmp_path / "greeting.txt"
    shell.execute_line(f"echo one > {target}")
    shell.execute_line(f"echo two >> {target}")
    assert target.read_text() == "one\ntwo\n"
    assert out.getvalue() == ""


def test_builtin_in_pipeline_is_forked(tmp_path):
    shell, out = setup_shell()
    target = tmp_path / "out.txt"
    result = shell.execute_line(f"echo hello | tr a-z A-Z > {target}")
    assert target.read_text() == "HELLO\n"
    assert all(o.pid != os.getpid() for o in result.outcomes)
    assert out.getvalue() == ""


def test_cd_changes_working_directory(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    shell, _ = setup_shell()
    (tmp_path / "sub").mkdir()
    assert shell.execute_line("cd sub").last_status == 0
    assert os.getcwd() == str(tmp_path / "sub")


def test_cd_defaults_to_home(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    (tmp_path / "home").mkdir()
    shell, _ = setup_shell()
    shell.execute_line("cd")
    assert os.getcwd() == str(tmp_path / "home")


def test_cd_errors(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    shell, _ = setup_shell()
    assert shell.execute_line("cd a b").last_status == 1
    assert shell.execute_line("cd does-not-exist").last_status == 1
    err = capsys.readouterr().err
    assert "Too many arguments" in err
    assert "does-not-exist" in err
    assert os.getcwd() == str(tmp_path)


def test_cd_inside_pipeline_does_not_affect_shell(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    shell, _ = setup_shell()
    shell.execute_line("cd / | cat")
    assert os.getcwd() == str(tmp_path)


def test_pwd_prints_cwd(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    shell, out = setup_shell()
    shell.execute_line("pwd")
    assert out.getvalue() == f"{tmp_path}\n"


def test_export_and_assignment(monkeypatch, tmp_path):
    monkeypatch.delenv("MISH_TEST_A", raising=False)
    monkeypatch.delenv("MISH_TEST_B", raising=False)
    shell, _ = setup_shell()
    assert shell.execute_line("export MISH_TEST_A=alpha").last_status == 0
    assert shell.execute_line("MISH_TEST_B=beta").last_status == 0
    assert os.environ["MISH_TEST_A"] == "alpha"
    assert os.environ["MISH_TEST_B"] == "beta"
    target = tmp_path / "env.txt"
    shell.execute_line(f"printenv MISH_TEST_A > {target}")
    assert target.read_text() == "alpha\n"


def test_export_rejects_malformed(capsys):
    shell, _ = setup_shell()
    assert shell.execute_line("export NOEQUALS").last_status == 1
    assert "Use VAR=value" in capsys.readouterr().err


def test_help_lists_builtins():
    shell, out = setup_shell()
    shell.execute_line("help")
    text = out.getvalue()
    for name in ("cd", "echo", "export", "clear", "pwd"):
        assert f"  {name}" in text


def test_clear_writes_escape_sequence():
    shell, out = setup_shell()
    shell.execute_line("clear")
    assert out.getvalue() == "\033[H\033[2J"


def test_parse_error_spawns_nothing(monkeypatch, capsys):
    def forbidden_fork() -> int:
        raise AssertionError("fork must not be called")

    monkeypatch.setattr(os, "fork", forbidden_fork)
    shell, _ = setup_shell()
    for line in ("cmd1 |", "| cmd1", "cmd1 >"):
        result = shell.execute_line(line)
        assert isinstance(result.error, ParseError)
        assert result.last_status == 2
    assert capsys.readouterr().err.count("mish:") == 3


def test_exit_terminates_and_exit_with_args_is_reported(capsys):
    shell, _ = setup_shell()
    result = shell.execute_line("exit now")
    assert isinstance(result.error, ParseError)
    assert "too many arguments" in capsys.readouterr().err
    with pytest.raises(SystemExit) as exc:
        shell.execute_line("exit")
    assert exc.value.code == 0


def test_unknown_command_returns_normally():
    shell, _ = setup_shell()
    result = shell.execute_line("nonexistent_program_xyz")
    assert result.last_status == 127


def test_builtin_redirection_failure(tmp_path):
    shell, out = setup_shell()
    result = shell.execute_line(f"echo hi < {tmp_path}/missing")
    (outcome,) = result.outcomes
    assert isinstance(outcome.error, RedirectionError)
    assert result.last_status == 1
    assert out.getvalue() == ""


def test_detached_stages_are_reaped_on_next_line():
    shell, _ = setup_shell()
    (outcome,) = shell.execute_line("true &").outcomes
    assert outcome.detached
    os.waitid(os.P_PID, outcome.pid, os.WEXITED | os.WNOWAIT)
    shell.execute_line("")
    assert shell.coordinator.detached == []


def test_assignment_ignores_trailing_words(monkeypatch, capsys):
    monkeypatch.delenv("MISH_TEST_C", raising=False)
    shell, _ = setup_shell()
    assert shell.execute_line("MISH_TEST_C=gamma extra words").last_status == 0
    assert os.environ["MISH_TEST_C"] == "gamma"
    assert "Incorrect format" not in capsys.readouterr().err


def test_builtins_resolve_from_registry():
    shell, _ = setup_shell()
    assert shell.resolve_builtin("echo") is not None
    assert shell.resolve_builtin("FOO=bar") is not None
    assert shell.resolve_builtin("ls") is None
