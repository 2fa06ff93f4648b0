"""Variable substitution and quote removal for words of a command line."""

from __future__ import annotations

import re
from collections.abc import Iterable

from .environment import Environment
from .lexer import QUOTES, WHITESPACE, Token, UnclosedQuoteError, is_token

_NAME = re.compile(r"[A-Za-z0-9]+")


def _substitute(
    text: str, pos: int, env: Environment, status: int
) -> tuple[str, int] | None:
    """Replace the ``$`` reference at ``pos``; return new text and resume point.

    Returns None when the ``$`` does not start a reference.
    """
    if text.startswith("?", pos + 1):
        value = str(status)
        return text[:pos] + value + text[pos + 2:], pos + len(value)
    match = _NAME.match(text, pos + 1)
    if match is None:
        return None
    value = env.get_or_empty(match.group())
    return text[:pos] + value + text[match.end():], pos + len(value)


def expand_dollars(text: str, env: Environment, status: int = 0) -> str:
    """Replace ``$NAME`` and ``$?`` references in ``text``.

    Names are runs of ASCII letters and digits; unset names become empty.
    Substituted values are not scanned again.
    """
    pos = 0
    while (found := text.find("$", pos)) != -1:
        result = _substitute(text, found, env, status)
        if result is None:
            pos = found + 1
        else:
            text, pos = result
    return text


def remove_quotes(word: str, env: Environment, status: int = 0) -> str:
    """Expand variables and strip quotes from one word.

    Single-quoted text is kept literally; double-quoted text has its
    variables expanded. An unquoted ``$`` followed by a character that cannot
    start a name (other than whitespace) is dropped.
    """
    pos = 0
    while pos < len(word):
        char = word[pos]
        if char in QUOTES:
            close = word.find(char, pos + 1)
            if close == -1:
                raise UnclosedQuoteError(word)
            inner = word[pos + 1:close]
            if char == '"' and "$" in inner:
                inner = expand_dollars(inner, env, status)
            word = word[:pos] + inner + word[close + 1:]
            pos += len(inner)
        elif char == "$":
            result = _substitute(word, pos, env, status)
            if result is not None:
                word, pos = result
                continue
            following = word[pos + 1:pos + 2]
            if following and following not in WHITESPACE:
                word = word[:pos] + word[pos + 1:]
            else:
                pos += 1
        else:
            pos += 1
    return word


def remove_quotes_all(
    items: Iterable[str | Token], env: Environment, status: int = 0
) -> list[str | Token]:
    """Apply :func:`remove_quotes` to every word, leaving tokens untouched."""
    return [
        item if is_token(item) else remove_quotes(item, env, status)
        for item in items
    ]