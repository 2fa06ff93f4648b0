"""Commands the shell runs itself instead of starting a program."""

from __future__ import annotations

import errno
import os
import sys
from collections.abc import Callable, Sequence
from typing import TextIO

from .environment import Environment, InvalidIdentifier, split_assignment
from .errors import ErrorCode, ShellExit, print_error

_SPACES = " \t\n\v\f\r"
_DIGITS = "0123456789"

Builtin = Callable[
    [Sequence[str], Environment, "TextIO | None", "TextIO | None"], int
]


def _streams(
    out: TextIO | None, err: TextIO | None
) -> tuple[TextIO, TextIO]:
    return (
        sys.stdout if out is None else out,
        sys.stderr if err is None else err,
    )


def _wrap(value: int, bits: int) -> int:
    mask = (1 << bits) - 1
    value &= mask
    if value >> (bits - 1):
        value -= 1 << bits
    return value


def parse_int(text: str) -> int:
    """Parse a decimal integer the way ``exit`` reads its status.

    Leading whitespace and one sign are allowed; everything after must be
    digits. An empty number counts as zero. The result wraps to a 32-bit
    signed integer. Raises ValueError on any other character.
    """
    body = text.lstrip(_SPACES)
    sign = -1 if body.startswith("-") else 1
    if body[:1] in ("+", "-"):
        body = body[1:]
    value = 0
    for char in body:
        if char not in _DIGITS:
            raise ValueError(f"not a number: {text!r}")
        value = _wrap(value * 10 + int(char), 64)
    return _wrap(value * sign, 32)


def _echo_options(args: Sequence[str]) -> tuple[int, bool]:
    """Return the index of the first word to print and whether -n was seen."""
    no_newline = False
    for index, arg in enumerate(args):
        if arg == "-":
            return index + 1, no_newline
        if not arg.startswith("-"):
            return index, no_newline
        flags = arg[1:]
        if any(char != "n" for char in flags):
            return index, no_newline
        no_newline = True
    return len(args), no_newline


def echo(
    argv: Sequence[str],
    env: Environment,
    out: TextIO | None = None,
    err: TextIO | None = None,
) -> int:
    """Print the arguments separated by spaces; ``-n`` drops the newline."""
    out, _ = _streams(out, err)
    args = list(argv[1:])
    start, no_newline = _echo_options(args)
    out.write(" ".join(args[start:]))
    if not no_newline:
        out.write("\n")
    out.flush()
    return 0


def cd(
    argv: Sequence[str],
    env: Environment,
    out: TextIO | None = None,
    err: TextIO | None = None,
) -> int:
    """Change the working directory and update PWD and OLDPWD."""
    out, err = _streams(out, err)
    args = list(argv[1:])
    if len(args) > 1:
        print_error("cd", ErrorCode.TOO_MANY_ARGUMENTS, None, err)
        return 1
    arg = args[0] if args else None
    target = arg
    announce = False
    if target == "-":
        target = env.get("OLDPWD")
        if target is None:
            print_error("minishell", ErrorCode.OLDPWD_NOT_SET, None, err)
            return 1
        announce = True
    if target is None:
        target = "~"
    if target.startswith("~"):
        home = env.get("HOME")
        target = "" if home is None else home + target[1:]
    if not target:
        return 0
    failure: OSError | None = None
    try:
        os.chdir(target)
    except OSError as exc:
        failure = exc
    try:
        cwd = os.getcwd()
    except OSError:
        cwd = "."
    env.set("OLDPWD", env.get_or_empty("PWD"))
    env.set("PWD", cwd)
    if failure is not None:
        code = failure.errno if failure.errno is not None else errno.ENOENT
        print_error("cd", code, arg, err)
        return 1
    if announce:
        pwd(["pwd"], env, out, err)
    return 0


def pwd(
    argv: Sequence[str],
    env: Environment,
    out: TextIO | None = None,
    err: TextIO | None = None,
) -> int:
    """Print the current working directory."""
    out, err = _streams(out, err)
    if len(argv) > 1:
        print_error("pwd", ErrorCode.TOO_MANY_ARGUMENTS, None, err)
        return 1
    try:
        cwd = os.getcwd()
    except OSError as exc:
        code = exc.errno if exc.errno is not None else errno.ENOENT
        print_error("pwd", code, None, err)
        return 1
    out.write(cwd + "\n")
    out.flush()
    return 0


def _print_env(env: Environment, out: TextIO) -> None:
    out.writelines(env.format_lines())
    out.flush()


def export(
    argv: Sequence[str],
    env: Environment,
    out: TextIO | None = None,
    err: TextIO | None = None,
) -> int:
    """Set variables given as ``NAME=value``; with no arguments list them."""
    out, err = _streams(out, err)
    args = list(argv[1:])
    if not args:
        _print_env(env, out)
        return 0
    for arg in args:
        try:
            key, value = split_assignment(arg)
        except InvalidIdentifier:
            print_error("export", ErrorCode.NOT_VALID_IDENTIFIER, arg, err)
            return 1
        if value is None:
            value = env.get_or_empty(key)
        env.set(key, value)
    return 0


def unset(
    argv: Sequence[str],
    env: Environment,
    out: TextIO | None = None,
    err: TextIO | None = None,
) -> int:
    """Remove the named variables; names that are not set are ignored."""
    _, err = _streams(out, err)
    for arg in argv[1:]:
        try:
            key, _ = split_assignment(arg)
        except InvalidIdentifier:
            print_error("unset", ErrorCode.NOT_VALID_IDENTIFIER, arg, err)
            return 1
        env.remove(key)
    return 0


def env_command(
    argv: Sequence[str],
    env: Environment,
    out: TextIO | None = None,
    err: TextIO | None = None,
) -> int:
    """Print every variable as ``NAME=value`` in sorted order."""
    out, err = _streams(out, err)
    if len(argv) > 1:
        print_error("env", ErrorCode.TOO_MANY_ARGUMENTS, None, err)
        return 1
    _print_env(env, out)
    return 0


def exit_command(
    argv: Sequence[str],
    env: Environment,
    out: TextIO | None = None,
    err: TextIO | None = None,
) -> int:
    """Leave the shell by raising :class:`ShellExit` with the status."""
    _, err = _streams(out, err)
    args = list(argv[1:])
    if not args:
        raise ShellExit(0)
    if len(args) > 1:
        print_error("exit", ErrorCode.TOO_MANY_ARGUMENTS, None, err)
        raise ShellExit(2)
    try:
        status = parse_int(args[0])
    except ValueError:
        print_error("exit", ErrorCode.NUMERIC_ARGUMENT_REQUIRED, args[0], err)
        raise ShellExit(2) from None
    raise ShellExit(status & 0xFF)


_BUILTINS: dict[str, Builtin] = {
    "echo": echo,
    "cd": cd,
    "pwd": pwd,
    "export": export,
    "unset": unset,
    "env": env_command,
    "exit": exit_command,
}


def is_builtin(name: str) -> bool:
    """Return whether ``name`` is run by the shell itself."""
    return name in _BUILTINS


def run_builtin(
    argv: Sequence[str],
    env: Environment,
    out: TextIO | None = None,
    err: TextIO | None = None,
) -> int:
    """Run the builtin named by ``argv[0]`` and return its status."""
    if not argv or not is_builtin(argv[0]):
        name = argv[0] if argv else ""
        raise LookupError(f"not a builtin: {name!r}")
    return _BUILTINS[argv[0]](argv, env, out, err)