"""Interactive loop of the shell: prompt, reading input and running lines."""

from __future__ import annotations

import contextlib
import os
import signal
import sys
import threading
from collections.abc import Callable, Iterator
from typing import Any, TextIO, Union

from .environment import Environment
from .errors import (
    READLINE_BLUE,
    READLINE_GREEN,
    READLINE_RESET,
    READLINE_WHITE,
    READLINE_YELLOW,
    ShellExit,
)
from .executor import Executor
from .parser import run_line

try:
    import readline as _readline
except ImportError:  # pragma: no cover - platform without readline
    _readline = None

PROMPT_ARROW = "\001\u279c\002"

_Handler = Union[Callable[[int, Any], Any], int, None]


def build_prompt(env: Environment, cwd: str | None = None) -> str:
    """Build the ``user:cwd ➜`` prompt, shortening the home directory to ``~``.

    ``cwd`` defaults to the shell's PWD variable.
    """
    user = env.get_or_empty("USER")
    if cwd is None:
        cwd = env.get_or_empty("PWD")
    home = env.get("HOME")
    if home and cwd.startswith(home):
        cwd = "~" + cwd[len(home):]
    return (
        f"{READLINE_GREEN}{user}{READLINE_WHITE}:{READLINE_BLUE}{cwd} "
        f"{READLINE_YELLOW}{PROMPT_ARROW}{READLINE_RESET} "
    )


@contextlib.contextmanager
def _sigint_handler(handler: _Handler, enabled: bool) -> Iterator[None]:
    """Install ``handler`` for SIGINT for the duration of the block."""
    active = enabled and threading.current_thread() is threading.main_thread()
    previous: _Handler = None
    if active:
        previous = signal.signal(signal.SIGINT, handler)
    try:
        yield
    finally:
        if active:
            signal.signal(signal.SIGINT, previous)


class Shell:
    """Reads lines from standard input and runs them until end of input."""

    def __init__(
        self,
        env: Environment | None = None,
        stdin: TextIO | None = None,
        out: TextIO | None = None,
        err: TextIO | None = None,
    ) -> None:
        self.env = Environment.from_os() if env is None else env
        self.stdin = sys.stdin if stdin is None else stdin
        self.out = out
        self.err = err
        self.status = 0
        self.executor = Executor(self.env, self._read_heredoc_line, out, err)
        self._completion_bound = False

    @property
    def interactive(self) -> bool:
        """Whether input comes from a terminal."""
        try:
            return bool(self.stdin.isatty())
        except (AttributeError, ValueError, OSError):
            return False

    def _stdout(self) -> TextIO:
        return sys.stdout if self.out is None else self.out

    def _prompt_input(self, prompt: str) -> str:
        if self.stdin is sys.stdin:
            return input(prompt)
        out = self._stdout()
        out.write(prompt)
        out.flush()
        line = self.stdin.readline()
        if not line:
            raise EOFError
        return line[:-1] if line.endswith("\n") else line

    def _read_heredoc_line(self, prompt: str) -> str | None:
        if not self.interactive:
            line = self.stdin.readline()
            if not line:
                return None
            return line[:-1] if line.endswith("\n") else line
        try:
            with _sigint_handler(signal.default_int_handler, True):
                return self._prompt_input(prompt)
        except EOFError:
            return None
        except KeyboardInterrupt:
            self._stdout().write("\n")
            self._stdout().flush()
            return None

    def read_command(self) -> str | None:
        """Return the next line without its newline, or None at end of input.

        Without a terminal, a last line that has no newline is not run.
        """
        if not self.interactive:
            line = self.stdin.readline()
            if not line.endswith("\n"):
                return None
            return line[:-1]
        while True:
            try:
                line = self._prompt_input(build_prompt(self.env))
            except EOFError:
                return None
            except KeyboardInterrupt:
                self._stdout().write("\n")
                self._stdout().flush()
                continue
            if line and _readline is not None:
                _readline.add_history(line)
            return line

    def _bind_completion(self) -> None:
        if self._completion_bound or not self.interactive or _readline is None:
            return
        _readline.parse_and_bind("tab: complete")
        self._completion_bound = True

    def run(self) -> int:
        """Run lines until end of input or ``exit``; return the exit status."""
        while True:
            line = self.read_command()
            if line is None:
                if self.interactive:
                    self._stdout().write("exit\n")
                    self._stdout().flush()
                return self.status
            self._bind_completion()
            try:
                with _sigint_handler(signal.SIG_IGN, self.interactive):
                    self.status = run_line(line, self.executor, self.status)
            except ShellExit as exc:
                return exc.status


def main(argv: list[str] | None = None) -> int:
    """Start the shell on the process's standard streams."""
    for name in ("SIGQUIT", "SIGTSTP"):
        signum = getattr(signal, name, None)
        if signum is not None:
            signal.signal(signum, signal.SIG_IGN)
    return Shell().run()


if __name__ == "__main__":
    sys.exit(main())