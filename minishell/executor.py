"""Running command lines: redirections, heredocs, pipelines and programs."""

from __future__ import annotations

import contextlib
import dataclasses
import errno
import io
import os
import signal
import subprocess
import sys
from collections.abc import Callable, Iterable, Iterator, Sequence
from typing import BinaryIO, TextIO, Union

from .builtins import is_builtin, run_builtin
from .environment import Environment
from .errors import ErrorCode, ShellExit, print_error, print_signal
from .lexer import REDIRECTS, Token, is_token

ReadLine = Callable[[str], Union[str, None]]
_Source = Union[bytes, BinaryIO, None]

_FILE_MODE = 0o644
_ENCODING = "utf-8"


@dataclasses.dataclass(frozen=True)
class Redirection:
    """One redirection of a command: its operator and the word after it."""

    kind: Token
    target: str


@dataclasses.dataclass
class Command:
    """One stage of a pipeline."""

    argv: list[str] = dataclasses.field(default_factory=list)
    redirections: list[Redirection] = dataclasses.field(default_factory=list)


class HeredocPrompt:
    """The numbered prompt shown while a heredoc is read."""

    def __init__(self) -> None:
        self.count = 0

    def reset(self) -> None:
        """Start numbering again for a new command line."""
        self.count = 0

    def advance(self) -> None:
        """Move on to the next heredoc of the command line."""
        self.count += 1

    def text(self) -> str:
        """Return the prompt; a zero count shows no digits."""
        digits = str(self.count) if self.count else ""
        return f"heredoc ({digits}) > "


def build_pipeline(items: Iterable[str | Token]) -> list[Command]:
    """Group words and tokens into the commands of a pipeline."""
    commands = [Command()]
    stream = iter(items)
    for item in stream:
        if not is_token(item):
            commands[-1].argv.append(item)
        elif item is Token.PIPE:
            commands.append(Command())
        elif item in REDIRECTS:
            target = next(stream, None)
            if target is None or is_token(target):
                raise ValueError(f"redirection {item.name} has no target")
            commands[-1].redirections.append(Redirection(item, target))
    return commands


def read_heredoc(
    end: str, read_line: ReadLine, prompt: HeredocPrompt
) -> str | None:
    """Read lines up to the line equal to ``end``.

    Returns the lines joined, each ending in a newline, or None if input
    ran out before the end line.
    """
    prompt.advance()
    lines: list[str] = []
    while True:
        line = read_line(prompt.text())
        if line is None:
            return None
        if line == end:
            return "".join(lines)
        lines.append(line + "\n")


def find_executable(name: str, path: str | None) -> str | None:
    """Locate ``name`` in the colon-separated ``path``.

    Names starting with ``.`` or ``/`` are used as given.
    """
    if name.startswith((".", "/")):
        return name
    for directory in (path or "").split(":"):
        if not directory:
            continue
        candidate = directory + "/" + name
        if os.path.exists(candidate):
            return candidate
    return None


def _default_read_line(prompt: str) -> str | None:
    try:
        return input(prompt)
    except EOFError:
        return None


def _fileno(stream: TextIO) -> int | None:
    try:
        return stream.fileno()
    except (AttributeError, OSError, ValueError, io.UnsupportedOperation):
        return None


def _child_setup() -> None:
    signal.signal(signal.SIGINT, signal.SIG_DFL)


@contextlib.contextmanager
def _preserved_cwd() -> Iterator[None]:
    try:
        saved = os.getcwd()
    except OSError:
        saved = None
    try:
        yield
    finally:
        if saved is not None:
            with contextlib.suppress(OSError):
                os.chdir(saved)


class Executor:
    """Runs checked command lines against an environment."""

    def __init__(
        self,
        env: Environment,
        read_line: ReadLine | None = None,
        out: TextIO | None = None,
        err: TextIO | None = None,
    ) -> None:
        self.env = env
        self.read_line = _default_read_line if read_line is None else read_line
        self.out = out
        self.err = err
        self.prompt = HeredocPrompt()

    def _stdout(self) -> TextIO:
        return sys.stdout if self.out is None else self.out

    def _stderr(self) -> TextIO:
        return sys.stderr if self.err is None else self.err

    def run(self, items: Sequence[str | Token]) -> int:
        """Run a line of words and tokens; return the last stage's status."""
        self.prompt.reset()
        pipeline = build_pipeline(items)
        feed: bytes | None = None
        status = 0
        for index, command in enumerate(pipeline):
            last = index == len(pipeline) - 1
            with contextlib.ExitStack() as stack:
                opened = self._redirect(command, stack)
                if opened is None:
                    return 1
                source, sink = opened
                if source is None:
                    source = feed
                status, feed = self._stage(command, source, sink, last)
        return status

    def _redirect(
        self, command: Command, stack: contextlib.ExitStack
    ) -> tuple[_Source, BinaryIO | None] | None:
        source: _Source = None
        sink: BinaryIO | None = None
        for redirection in command.redirections:
            kind, target = redirection.kind, redirection.target
            try:
                if kind is Token.HEREDOC:
                    text = read_heredoc(target, self.read_line, self.prompt)
                    source = (text or "").encode(_ENCODING)
                elif kind is Token.INPUT:
                    source = stack.enter_context(open(target, "rb"))
                else:
                    flags = os.O_CREAT | os.O_RDWR
                    flags |= os.O_TRUNC if kind is Token.OUT_WRITE else os.O_APPEND
                    fd = os.open(target, flags, _FILE_MODE)
                    sink = stack.enter_context(os.fdopen(fd, "wb"))
            except OSError as exc:
                code = exc.errno if exc.errno is not None else errno.EIO
                print_error("open", code, target, self._stderr())
                return None
        return source, sink

    def _stage(
        self,
        command: Command,
        source: _Source,
        sink: BinaryIO | None,
        last: bool,
    ) -> tuple[int, bytes | None]:
        if not command.argv:
            return 0, (None if last else b"")
        if is_builtin(command.argv[0]):
            if last:
                return self._run_builtin(command.argv, sink, last)
            with _preserved_cwd():
                return self._run_builtin(command.argv, sink, last)
        return self._run_program(command.argv, source, sink, last)

    def _run_builtin(
        self, argv: list[str], sink: BinaryIO | None, last: bool
    ) -> tuple[int, bytes | None]:
        env = self.env if last else Environment(self.env.to_dict())
        buffer: io.StringIO | None = None
        wrapper: io.TextIOWrapper | None = None
        if sink is not None:
            wrapper = io.TextIOWrapper(sink, encoding=_ENCODING, write_through=True)
            stream: TextIO = wrapper
        elif last:
            stream = self._stdout()
        else:
            buffer = io.StringIO()
            stream = buffer
        try:
            status = run_builtin(argv, env, stream, self._stderr())
        except ShellExit as exc:
            if last:
                raise
            status = exc.status
        finally:
            if wrapper is not None:
                wrapper.flush()
                wrapper.detach()
        if last:
            return status, None
        data = buffer.getvalue().encode(_ENCODING) if buffer is not None else b""
        return status, data

    def _run_program(
        self,
        argv: list[str],
        source: _Source,
        sink: BinaryIO | None,
        last: bool,
    ) -> tuple[int, bytes | None]:
        out, err = self._stdout(), self._stderr()
        empty_feed = None if last else b""
        path = find_executable(argv[0], self.env.get_or_empty("PATH"))
        if path is None:
            print_error("minishell", ErrorCode.COMMAND_NOT_FOUND, argv[0], err)
            return 1, empty_feed

        input_data: bytes | None = None
        if isinstance(source, bytes):
            stdin = subprocess.PIPE
            input_data = source
        else:
            stdin = source
        if sink is not None:
            stdout = sink
        elif not last:
            stdout = subprocess.PIPE
        else:
            out_fd = _fileno(out)
            stdout = subprocess.PIPE if out_fd is None else out_fd
        err_fd = _fileno(err)
        stderr = subprocess.PIPE if err_fd is None else err_fd

        out.flush()
        err.flush()
        extra = {"preexec_fn": _child_setup} if os.name == "posix" else {}
        try:
            with subprocess.Popen(
                argv,
                executable=path,
                stdin=stdin,
                stdout=stdout,
                stderr=stderr,
                env=self.env.to_dict(),
                **extra,
            ) as proc:
                out_data, err_data = proc.communicate(input_data)
        except OSError as exc:
            code = exc.errno if exc.errno is not None else errno.ENOENT
            print_error("minishell", code, path, err)
            return 1, empty_feed

        if err_data:
            err.write(err_data.decode(_ENCODING, errors="replace"))
            err.flush()
        feed: bytes | None = None
        if last:
            if out_data:
                out.write(out_data.decode(_ENCODING, errors="replace"))
                out.flush()
        else:
            feed = out_data or b""
        status = proc.returncode
        if status < 0:
            signum = -status
            print_signal(proc.pid, signum, argv[0], err)
            status = 128 + signum
        return status, feed