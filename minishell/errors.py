"""Error and signal reporting for the shell."""

from __future__ import annotations

import enum
import os
import signal
import sys
from typing import TextIO

TERM_BLACK = "\033[1;90m"
TERM_RED = "\033[1;91m"
TERM_GREEN = "\033[1;92m"
TERM_YELLOW = "\033[1;93m"
TERM_BLUE = "\033[1;94m"
TERM_PURPLE = "\033[1;95m"
TERM_CYAN = "\033[1;96m"
TERM_WHITE = "\033[1;97m"
TERM_RESET = "\033[0m"


def _readline_wrap(code: str) -> str:
    """Wrap an escape sequence in readline's invisible-text markers."""
    return "\001" + code + "\002"


READLINE_BLACK = _readline_wrap(TERM_BLACK)
READLINE_RED = _readline_wrap(TERM_RED)
READLINE_GREEN = _readline_wrap(TERM_GREEN)
READLINE_YELLOW = _readline_wrap(TERM_YELLOW)
READLINE_BLUE = _readline_wrap(TERM_BLUE)
READLINE_PURPLE = _readline_wrap(TERM_PURPLE)
READLINE_CYAN = _readline_wrap(TERM_CYAN)
READLINE_WHITE = _readline_wrap(TERM_WHITE)
READLINE_RESET = _readline_wrap(TERM_RESET)

OK = TERM_GREEN
WARNING = TERM_YELLOW
ERROR = TERM_RED
RESET = TERM_RESET


class ErrorCode(enum.IntEnum):
    """Shell-specific error codes; positive values are errno numbers."""

    COMMAND_NOT_FOUND = -2
    TOO_MANY_ARGUMENTS = -3
    NOT_VALID_IDENTIFIER = -4
    NOT_ENOUGH_ARGUMENTS = -5
    NUMERIC_ARGUMENT_REQUIRED = -6
    UNEXPECTED_TOKEN = -7
    SYNTAX_ERROR = -8
    OLDPWD_NOT_SET = -9


_MESSAGES = {
    ErrorCode.COMMAND_NOT_FOUND: "command not found",
    ErrorCode.TOO_MANY_ARGUMENTS: "too many arguments",
    ErrorCode.NOT_VALID_IDENTIFIER: "not a valid identifier",
    ErrorCode.NOT_ENOUGH_ARGUMENTS: "not enough arguments",
    ErrorCode.NUMERIC_ARGUMENT_REQUIRED: "numeric argument required",
    ErrorCode.UNEXPECTED_TOKEN: "syntax error, unexpected token",
    ErrorCode.SYNTAX_ERROR: "syntax error",
    ErrorCode.OLDPWD_NOT_SET: "OLDPWD not set",
}


class ShellExit(Exception):
    """Raised to terminate the shell with the given exit status."""

    def __init__(self, status: int = 0) -> None:
        super().__init__(status)
        self.status = status


def strerror(code: int) -> str:
    """Return the message for a shell error code or an errno number."""
    try:
        return _MESSAGES[ErrorCode(code)]
    except ValueError:
        return os.strerror(code)


def format_error(parent: str, code: int, arg: str | None = None) -> str:
    """Build the coloured error line for ``parent`` and ``code``."""
    parts = [ERROR, parent, TERM_WHITE, ": ", strerror(code)]
    if arg is not None:
        parts += [": ", WARNING, arg]
    parts.append(RESET + "\n")
    return "".join(parts)


def print_error(
    parent: str,
    code: int,
    arg: str | None = None,
    stream: TextIO | None = None,
) -> None:
    """Write the coloured error line to ``stream`` (standard error by default)."""
    target = sys.stderr if stream is None else stream
    target.write(format_error(parent, code, arg))
    target.flush()


def _signal_table() -> dict[int, str]:
    names = [
        ("SIGINT", "interrupted"),
        ("SIGILL", "illegal hardware instruction (core dumped)"),
        ("SIGABRT", "abort (core dumped)"),
        ("SIGFPE", "floating point exception (core dumped)"),
        ("SIGSEGV", "segmentation fault (core dumped)"),
        ("SIGTERM", "terminated"),
        ("SIGHUP", "hangup"),
        ("SIGQUIT", "quit (core dumped)"),
        ("SIGTRAP", "trace trap (core dumped)"),
        ("SIGKILL", "killed"),
        ("SIGBUS", "bus error (core dumped)"),
        ("SIGSYS", "invalid system call (core dumped)"),
        ("SIGPIPE", "broken pipe"),
        ("SIGALRM", "alarm"),
        ("SIGTSTP", "suspended"),
    ]
    table: dict[int, str] = {}
    for name, message in names:
        number = getattr(signal, name, None)
        if number is not None and int(number) not in table:
            table[int(number)] = message
    return table


_SIGNAL_MESSAGES = _signal_table()


def signal_message(signum: int) -> str | None:
    """Return the report text for a signal, or None if it is not reported."""
    return _SIGNAL_MESSAGES.get(int(signum))


def format_signal(pid: int, signum: int, parent: str) -> str | None:
    """Build the report line for a child killed by a signal, or None."""
    message = signal_message(signum)
    if message is None:
        return None
    return (
        f"{TERM_BLUE}[2]\t{ERROR}{pid}{TERM_WHITE}: {message}"
        f"\t{WARNING}{parent}{RESET}\n"
    )


def print_signal(
    pid: int, signum: int, parent: str, stream: TextIO | None = None
) -> bool:
    """Write the signal report if there is one; return whether it was written."""
    line = format_signal(pid, signum, parent)
    if line is None:
        return False
    target = sys.stderr if stream is None else stream
    target.write(line)
    target.flush()
    return True