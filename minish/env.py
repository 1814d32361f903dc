"""The shell's environment: an ordered set of variables, some without values."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator


@dataclass
class EnvVar:
    """One environment variable; ``value`` is None for a bare exported name."""

    key: str
    value: str | None = None

    def line(self) -> str:
        """The ``KEY=value`` form, or the bare key when there is no value."""
        if self.value is None:
            return self.key
        return f"{self.key}={self.value}"


def split_line(line: str) -> tuple[str, str | None]:
    """Split ``KEY=value`` at the first ``=``; without one, the value is None."""
    key, sep, value = line.partition("=")
    if not sep:
        return line, None
    return key, value


class Environment:
    """Variables kept in the order they were first defined."""

    def __init__(self, variables: Iterable[EnvVar] = ()) -> None:
        self._vars: dict[str, EnvVar] = {}
        for var in variables:
            self._vars.setdefault(var.key, var)

    @classmethod
    def from_lines(cls, lines: Iterable[str]) -> "Environment":
        """Build an environment from ``KEY=value`` strings."""
        return cls(EnvVar(*split_line(line)) for line in lines)

    def get(self, key: str) -> str | None:
        """The value of ``key``, or None if unset or valueless."""
        var = self._vars.get(key)
        return var.value if var is not None else None

    def set(self, key: str, value: str | None) -> None:
        """Update ``key`` or append it.

        A None value leaves an existing variable's value untouched.
        """
        var = self._vars.get(key)
        if var is None:
            self._vars[key] = EnvVar(key, value)
        elif value is not None:
            var.value = value

    def set_from_assignment(self, arg: str) -> None:
        """Apply a ``KEY=value`` argument; arguments without ``=`` are ignored."""
        key, value = split_line(arg)
        if value is None:
            return
        self.set(key, value)

    def unset(self, key: str) -> bool:
        """Remove ``key``; return whether it was present."""
        return self._vars.pop(key, None) is not None

    def key_for_value(self, value: str) -> str | None:
        """The last key whose value is a prefix of ``value``."""
        found = None
        for var in self._vars.values():
            if var.value is not None and value.startswith(var.value):
                found = var.key
        return found

    def lines(self) -> list[str]:
        """Every variable in its ``KEY=value`` form, in order."""
        return [var.line() for var in self._vars.values()]

    def __iter__(self) -> Iterator[EnvVar]:
        return iter(list(self._vars.values()))

    def __len__(self) -> int:
        return len(self._vars)

    def __contains__(self, key: object) -> bool:
        return key in self._vars