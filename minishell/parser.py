"""Checking and running one line of input."""

from __future__ import annotations

import sys
from collections.abc import Sequence

from .errors import ErrorCode, print_error
from .executor import Executor
from .expand import remove_quotes_all
from .lexer import Token, UnclosedQuoteError, is_token, split_words

_TOKEN_NAMES = {
    Token.OUT_APPEND: ">>",
    Token.OUT_WRITE: ">",
    Token.INPUT: "<",
    Token.HEREDOC: "<<",
    Token.PIPE: "pipe",
}


class ShellSyntaxError(ValueError):
    """Raised when a command line is not well formed."""

    def __init__(self, code: ErrorCode, arg: str) -> None:
        super().__init__(f"{arg}")
        self.code = code
        self.arg = arg


def token_name(token: object) -> str:
    """Return how a token is named in syntax errors."""
    if is_token(token):
        return _TOKEN_NAMES.get(token, "end of line")
    return "end of line"


def syntax_check(items: Sequence[str | Token]) -> None:
    """Raise :class:`ShellSyntaxError` if the line is not well formed."""
    if not items:
        return
    if items[0] is Token.PIPE:
        raise ShellSyntaxError(ErrorCode.SYNTAX_ERROR, "empty pipe")
    if is_token(items[0]):
        raise ShellSyntaxError(ErrorCode.SYNTAX_ERROR, "token without command")
    words_seen = 0
    for index, item in enumerate(items):
        if not is_token(item):
            words_seen += 1
            continue
        following = items[index + 1] if index + 1 < len(items) else None
        if item is Token.PIPE:
            if following is None:
                raise ShellSyntaxError(ErrorCode.SYNTAX_ERROR, "unclosed pipe")
            if not words_seen:
                raise ShellSyntaxError(ErrorCode.SYNTAX_ERROR, "empty pipe")
            words_seen += 1
        if items[index - 1] is Token.PIPE:
            raise ShellSyntaxError(ErrorCode.SYNTAX_ERROR, "token without command")
        if following is None or is_token(following):
            raise ShellSyntaxError(ErrorCode.UNEXPECTED_TOKEN, token_name(following))


def run_line(line: str, executor: Executor, status: int = 0) -> int:
    """Split, expand, check and run one line; return its exit status.

    ``status`` is the previous status, substituted for ``$?``.
    """
    err = sys.stderr if executor.err is None else executor.err
    try:
        items = split_words(line)
        if not items:
            return 0
        items = remove_quotes_all(items, executor.env, status)
    except UnclosedQuoteError:
        print_error("minishell", ErrorCode.SYNTAX_ERROR, "unclosed quote", err)
        return 0
    if not is_token(items[0]) and items[0] == "":
        print_error("minishell", ErrorCode.COMMAND_NOT_FOUND, "''", err)
        return 127
    try:
        syntax_check(items)
    except ShellSyntaxError as exc:
        print_error("minishell", exc.code, exc.arg, err)
        return 2
    return executor.run(items)