import builtins
import sys
from types import SimpleNamespace

import pytest

from pipesh.cli import main


def test_cli_exec_outputs(capsys):
    with pytest.raises(SystemExit) as exc:
        main(["exec", "echo hi"])
    assert exc.value.code == 0
    captured = capsys.readouterr()
    assert "hi" in captured.out


def test_cli_exec_propagates_status(capsys, tmp_path):
    with pytest.raises(SystemExit) as exc:
        main(["exec", "--path", str(tmp_path), "nonexistent-xyz"])
    assert exc.value.code == 127
    assert "nonexistent-xyz: command not found" in capsys.readouterr().err


def test_cli_shell_repl(monkeypatch, capsys):
    inputs = iter(["echo hello", "exit 5"])

    def fake_input(_: str) -> str:
        return next(inputs)

    monkeypatch.setattr(builtins, "input", fake_input)
    with pytest.raises(SystemExit) as exc:
        main(["shell"])
    assert exc.value.code == 5
    captured = capsys.readouterr()
    assert "hello" in captured.out


def test_cli_shell_ends_on_eof(monkeypatch, capsys):
    def fake_input(_: str) -> str:
        raise EOFError

    monkeypatch.setattr(builtins, "input", fake_input)
    with pytest.raises(SystemExit) as exc:
        main(["shell"])
    assert exc.value.code == 0


def test_cli_history_file_round_trip(monkeypatch, capsys, tmp_path):
    histfile = tmp_path / "history"
    histfile.write_text("echo previous\n")
    monkeypatch.setenv("HISTFILE", str(histfile))
    inputs = iter(["history", "exit"])
    monkeypatch.setattr(builtins, "input", lambda _: next(inputs))
    with pytest.raises(SystemExit):
        main(["shell"])
    captured = capsys.readouterr()
    assert "    1  echo previous" in captured.out
    assert "    2  history" in captured.out
    assert histfile.read_text() == "echo previous\nhistory\nexit\n"


def _feed(monkeypatch, *entries):
    """Answer prompts with ``entries``; exception classes are raised, then EOF."""

    items = iter(entries)

    def fake_input(_: str) -> str:
        item = next(items, EOFError)
        if isinstance(item, str):
            return item
        raise item

    monkeypatch.setattr(builtins, "input", fake_input)


def test_cli_shell_eof_exits_zero_after_failed_command(monkeypatch, capsys, tmp_path):
    monkeypatch.delenv("HISTFILE", raising=False)
    _feed(monkeypatch, "nonexistent-xyz")
    with pytest.raises(SystemExit) as exc:
        main(["shell", "--path", str(tmp_path)])
    assert exc.value.code == 0
    assert "nonexistent-xyz: command not found" in capsys.readouterr().err


def test_cli_shell_ctrl_c_reprompts(monkeypatch, capsys):
    monkeypatch.delenv("HISTFILE", raising=False)
    _feed(monkeypatch, KeyboardInterrupt, "echo still-alive")
    with pytest.raises(SystemExit) as exc:
        main(["shell"])
    assert exc.value.code == 0
    assert "still-alive" in capsys.readouterr().out


def test_cli_shell_seeds_readline_history(monkeypatch, tmp_path):
    histfile = tmp_path / "history"
    histfile.write_text("echo previous\n")
    extra = tmp_path / "extra"
    extra.write_text("echo loaded\n")
    monkeypatch.setenv("HISTFILE", str(histfile))
    recalled: list[str] = []
    fake_readline = SimpleNamespace(
        set_completer=lambda completer: None,
        set_completer_delims=lambda delims: None,
        parse_and_bind=lambda binding: None,
        get_line_buffer=lambda: "",
        get_endidx=lambda: 0,
        add_history=recalled.append,
    )
    monkeypatch.setitem(sys.modules, "readline", fake_readline)
    monkeypatch.setattr(sys, "stdin", SimpleNamespace(isatty=lambda: True, flush=lambda: None))
    _feed(monkeypatch, f"history -r {extra}")
    with pytest.raises(SystemExit):
        main(["shell", "--path", str(tmp_path)])
    assert recalled == ["echo previous", "echo loaded"]
