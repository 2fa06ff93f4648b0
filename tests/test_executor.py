import io
import os
import sys

import pytest

from minishell.environment import Environment
from minishell.errors import ShellExit
from minishell.executor import (
    Command,
    Executor,
    HeredocPrompt,
    Redirection,
    build_pipeline,
    find_executable,
    read_heredoc,
)
from minishell.lexer import Token

UPPER = "import sys; sys.stdout.write(sys.stdin.read().upper())"


def _reader(lines):
    supply = iter(lines)
    prompts = []

    def read_line(prompt):
        prompts.append(prompt)
        return next(supply, None)

    return read_line, prompts


def _executor(env=None, lines=()):
    out, err = io.StringIO(), io.StringIO()
    read_line, prompts = _reader(lines)
    env = env if env is not None else Environment({"PATH": os.environ.get("PATH", "")})
    return Executor(env, read_line, out, err), out, err, prompts


def test_prompt_zero_has_no_digits():
    prompt = HeredocPrompt()
    assert prompt.text() == "heredoc () > "


def test_prompt_advance_and_reset():
    prompt = HeredocPrompt()
    prompt.advance()
    prompt.advance()
    assert prompt.text() == "heredoc (2) > "
    prompt.reset()
    assert prompt.count == 0


def test_build_pipeline_groups_commands():
    items = ["echo", "a", Token.OUT_WRITE, "f", Token.PIPE, "cat"]
    pipeline = build_pipeline(items)
    assert pipeline == [
        Command(["echo", "a"], [Redirection(Token.OUT_WRITE, "f")]),
        Command(["cat"], []),
    ]


def test_build_pipeline_missing_target():
    with pytest.raises(ValueError):
        build_pipeline(["cat", Token.INPUT])


def test_read_heredoc_collects_lines():
    read_line, prompts = _reader(["one", "two", "END", "after"])
    prompt = HeredocPrompt()
    assert read_heredoc("END", read_line, prompt) == "one\ntwo\n"
    assert prompts == ["heredoc (1) > "] * 3


def test_read_heredoc_eof_returns_none():
    read_line, _ = _reader(["one"])
    assert read_heredoc("END", read_line, HeredocPrompt()) is None


def test_find_executable_in_path(tmp_path):
    tool = tmp_path / "tool"
    tool.write_text("")
    assert find_executable("tool", f"::{tmp_path}") == f"{tmp_path}/tool"
    assert find_executable("missing", str(tmp_path)) is None


def test_find_executable_explicit_path():
    assert find_executable("./prog", "") == "./prog"
    assert find_executable("/bin/prog", None) == "/bin/prog"


def test_run_builtin_to_output():
    executor, out, _, _ = _executor()
    assert executor.run(["echo", "hi", "there"]) == 0
    assert out.getvalue() == "hi there\n"


def test_output_redirection_write_and_append(tmp_path):
    target = str(tmp_path / "f.txt")
    executor, out, _, _ = _executor()
    executor.run(["echo", "first", Token.OUT_WRITE, target])
    executor.run(["echo", "second", Token.OUT_APPEND, target])
    with open(target) as handle:
        assert handle.read() == "first\nsecond\n"
    assert out.getvalue() == ""


def test_missing_input_file_fails(tmp_path):
    executor, _, err, _ = _executor()
    missing = str(tmp_path / "nope")
    assert executor.run(["cat", Token.INPUT, missing]) == 1
    assert "open" in err.getvalue()
    assert os.strerror(2) in err.getvalue()


def test_pipeline_from_builtin_to_program():
    executor, out, _, _ = _executor()
    status = executor.run(["echo", "abc", Token.PIPE, sys.executable, "-c", UPPER])
    assert status == 0
    assert out.getvalue() == "ABC\n"


def test_heredoc_feeds_program():
    executor, out, _, prompts = _executor(lines=["x", "y", "EOF"])
    executor.run([sys.executable, "-c", UPPER, Token.HEREDOC, "EOF"])
    assert out.getvalue() == "X\nY\n"
    assert prompts[0] == "heredoc (1) > "


def test_input_file_feeds_program(tmp_path):
    source = tmp_path / "in.txt"
    source.write_text("data\n")
    executor, out, _, _ = _executor()
    executor.run([sys.executable, "-c", UPPER, Token.INPUT, str(source)])
    assert out.getvalue() == "DATA\n"


def test_export_in_last_stage_persists():
    env = Environment({"PATH": os.environ.get("PATH", "")})
    executor, _, _, _ = _executor(env)
    executor.run(["export", "NAME=value"])
    assert env.get("NAME") == "value"


def test_export_in_earlier_stage_is_lost():
    env = Environment({"PATH": os.environ.get("PATH", "")})
    executor, out, _, _ = _executor(env)
    executor.run(["export", "NAME=value", Token.PIPE, "env"])
    assert "NAME" not in env
    assert "NAME=value" not in out.getvalue()


def test_unknown_command():
    executor, _, err, _ = _executor(Environment({"PATH": "/nonexistent"}))
    assert executor.run(["no_such_program"]) == 1
    assert "command not found" in err.getvalue()
    assert "no_such_program" in err.getvalue()


def test_exit_in_last_stage_raises():
    executor, _, _, _ = _executor()
    with pytest.raises(ShellExit) as info:
        executor.run(["exit", "7"])
    assert info.value.status == 7


def test_exit_in_earlier_stage_does_not_leave():
    executor, out, _, _ = _executor()
    assert executor.run(["exit", "7", Token.PIPE, "echo", "still"]) == 0
    assert out.getvalue() == "still\n"


def test_program_exit_status():
    executor, _, _, _ = _executor()
    assert executor.run([sys.executable, "-c", "raise SystemExit(3)"]) == 3


def test_program_killed_by_signal():
    executor, _, err, _ = _executor()
    code = "import os, signal; os.kill(os.getpid(), signal.SIGTERM)"
    status = executor.run([sys.executable, "-c", code])
    assert status == 128 + 15
    assert "terminated" in err.getvalue()