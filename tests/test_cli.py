import builtins

import pytest

from mish.cli import main


def test_cli_exec_runs_line(tmp_path):
    target = tmp_path / "out.txt"
    with pytest.raises(SystemExit) as exc:
        main(["exec", f"printf hi | tr a-z A-Z > {target}"])
    assert exc.value.code == 0
    assert target.read_text() == "HI"


def test_cli_exec_propagates_status():
    with pytest.raises(SystemExit) as exc:
        main(["exec", "false"])
    assert exc.value.code == 1


def test_cli_exec_parse_error(capsys):
    with pytest.raises(SystemExit) as exc:
        main(["exec", "| wc"])
    assert exc.value.code == 2
    assert "Missing command before pipe" in capsys.readouterr().err


def test_cli_run_script(tmp_path):
    target = tmp_path / "out.txt"
    script = tmp_path / "script.mish"
    script.write_text(f"printf one > {target}\n\n   \nprintf two >> {target}\n")
    with pytest.raises(SystemExit) as exc:
        main(["run", str(script)])
    assert exc.value.code == 0
    assert target.read_text() == "onetwo"


def test_cli_run_missing_script(tmp_path, capsys):
    with pytest.raises(SystemExit) as exc:
        main(["run", str(tmp_path / "nope.mish")])
    assert exc.value.code == 1
    assert "Failed to open file" in capsys.readouterr().err


def test_cli_shell_repl(monkeypatch, capsys):
    inputs = iter(["echo hello", "", "exit"])

    def fake_input(_: str) -> str:
        return next(inputs)

    monkeypatch.setattr(builtins, "input", fake_input)
    with pytest.raises(SystemExit) as exc:
        main(["shell"])
    assert exc.value.code == 0
    assert "hello" in capsys.readouterr().out


def test_cli_shell_is_default_and_stops_on_eof(monkeypatch, capsys):
    def fake_input(_: str) -> str:
        raise EOFError

    monkeypatch.setattr(builtins, "input", fake_input)
    with pytest.raises(SystemExit) as exc:
        main([])
    assert exc.value.code == 0


def test_cli_debug_logging_goes_to_stderr(tmp_path, capsys):
    target = tmp_path / "out.txt"
    with pytest.raises(SystemExit):
        main(["exec", "--log-level", "DEBUG", "--json-logs", f"printf x > {target}"])
    captured = capsys.readouterr()
    assert "stage_spawned" in captured.err
    assert "stage_spawned" not in captured.out
