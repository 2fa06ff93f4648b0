"""Splitting a command line into words and operator tokens."""

from __future__ import annotations

import enum

WHITESPACE = " \t\n\v\f\r"
QUOTES = "'\""
_OPERATOR_CHARS = "><|"


class Token(enum.IntEnum):
    """Operator tokens that appear between the words of a command line."""

    OUT_APPEND = 0b00000001
    OUT_WRITE = 0b00000010
    HEREDOC = 0b00000100
    INPUT = 0b00001000
    PIPE = 0b00010000
    UNO_QUOTE = 0b00100000
    DBL_QUOTE = 0b01000000


REDIRECTS = frozenset(
    {Token.OUT_APPEND, Token.OUT_WRITE, Token.HEREDOC, Token.INPUT}
)

_OPERATORS = (
    (">>", Token.OUT_APPEND),
    (">", Token.OUT_WRITE),
    ("<<", Token.HEREDOC),
    ("<", Token.INPUT),
    ("|", Token.PIPE),
)


class UnclosedQuoteError(ValueError):
    """Raised when a quote in the input has no closing partner."""


def is_token(item: object) -> bool:
    """Return whether ``item`` is an operator token rather than a word."""
    return isinstance(item, Token)


def _read_operator(text: str, pos: int) -> tuple[Token, int]:
    for symbol, token in _OPERATORS:
        if text.startswith(symbol, pos):
            return token, len(symbol)
    raise ValueError(f"no operator at position {pos}")


def split_words(text: str) -> list[str | Token]:
    """Split ``text`` into words and tokens.

    Words are separated by whitespace and by the operators ``>``, ``>>``,
    ``<``, ``<<`` and ``|``. Quoted parts stay inside their word with the
    quotes kept. An unclosed quote raises :class:`UnclosedQuoteError`.
    """
    items: list[str | Token] = []
    pos = 0
    length = len(text)
    while pos < length:
        while pos < length and text[pos] in WHITESPACE:
            pos += 1
        if pos >= length:
            break
        if text[pos] in _OPERATOR_CHARS:
            token, width = _read_operator(text, pos)
            items.append(token)
            pos += width
            continue
        start = pos
        while (
            pos < length
            and text[pos] not in _OPERATOR_CHARS
            and text[pos] not in WHITESPACE
        ):
            if text[pos] in QUOTES:
                close = text.find(text[pos], pos + 1)
                if close == -1:
                    raise UnclosedQuoteError(text)
                pos = close
            pos += 1
        items.append(text[start:pos])
    return items