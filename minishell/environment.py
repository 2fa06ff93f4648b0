"""The shell's own sorted store of environment variables."""

from __future__ import annotations

import os
from collections.abc import Iterable, Iterator, Mapping


class InvalidIdentifier(ValueError):
    """Raised when a name is not a valid variable identifier."""


def _is_alpha(char: str) -> bool:
    return char.isascii() and char.isalpha()


def _is_alnum(char: str) -> bool:
    return char.isascii() and char.isalnum()


def split_assignment(text: str) -> tuple[str, str | None]:
    """Split ``NAME=value`` into name and value; value is None without ``=``.

    The name must start with a letter or underscore and hold only letters,
    digits and underscores.
    """
    if not text or not (_is_alpha(text[0]) or text[0] == "_"):
        raise InvalidIdentifier(text)
    key, sep, value = text.partition("=")
    if not all(_is_alnum(c) or c == "_" for c in key):
        raise InvalidIdentifier(text)
    return key, (value if sep else None)


class Environment:
    """Variables kept in byte-wise key order, as the shell prints them."""

    def __init__(
        self,
        items: Mapping[str, str] | Iterable[tuple[str, str]] | None = None,
    ) -> None:
        self._vars: dict[str, str] = {}
        if items is None:
            return
        pairs = items.items() if isinstance(items, Mapping) else items
        for key, value in pairs:
            self.set(key, value)

    @classmethod
    def from_os(cls, environ: Mapping[str, str] | None = None) -> "Environment":
        """Build from the process environment, skipping invalid names."""
        source = os.environ if environ is None else environ
        env = cls()
        for key, value in source.items():
            try:
                name, _ = split_assignment(key)
            except InvalidIdentifier:
                continue
            if name != key:
                continue
            env.set(key, value)
        return env

    def get(self, name: str) -> str | None:
        """Return the value of ``name`` or None if unset."""
        return self._vars.get(name)

    def get_or_empty(self, name: str) -> str:
        """Return the value of ``name`` or an empty string if unset."""
        return self._vars.get(name, "")

    def set(self, key: str, value: str | None) -> None:
        """Insert or replace a variable; a missing value is stored as empty."""
        self._vars[key] = "" if value is None else value

    def remove(self, key: str) -> None:
        """Remove a variable; absent names are ignored."""
        self._vars.pop(key, None)

    def __len__(self) -> int:
        return len(self._vars)

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._vars, key=lambda k: k.encode()))

    def __contains__(self, name: object) -> bool:
        return name in self._vars

    def to_envp(self) -> list[str]:
        """Return ``KEY=value`` strings in sorted order."""
        return [f"{key}={self._vars[key]}" for key in self]

    def to_dict(self) -> dict[str, str]:
        """Return a sorted copy of the variables as a dict."""
        return {key: self._vars[key] for key in self}

    def format_lines(self) -> list[str]:
        """Return the lines printed by ``env``, each ending in a newline."""
        return [line + "\n" for line in self.to_envp()]