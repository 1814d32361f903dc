"""Commands with file redirections, and applying them to the process's stdio."""

from __future__ import annotations

import enum
import os
import sys
from dataclasses import dataclass, field

_FILE_MODE = 0o644


class RedirType(enum.Enum):
    """The kind of a redirection."""

    IN = "<"
    OUT = ">"
    APPEND = ">>"


@dataclass
class Redirection:
    """A redirection of one standard stream to or from a named file."""

    type: RedirType
    name: str | None


@dataclass
class Command:
    """One simple command: its arguments (name first) and its redirections."""

    args: list[str]
    redirections: list[Redirection] = field(default_factory=list)

    @property
    def name(self) -> str | None:
        """The command name, or None for an empty command."""
        return self.args[0] if self.args else None


class RedirectionError(Exception):
    """A redirection target could not be opened."""

    def __init__(self, name: str, reason: str) -> None:
        super().__init__(f"{name}: {reason}")
        self.name = name
        self.reason = reason


def _flags_for(kind: RedirType) -> int:
    if kind is RedirType.IN:
        return os.O_RDONLY
    if kind is RedirType.OUT:
        return os.O_CREAT | os.O_WRONLY | os.O_TRUNC
    return os.O_CREAT | os.O_WRONLY | os.O_APPEND


def apply_redirections(command: Command) -> None:
    """Open each redirection target in order and attach it to fd 0 or fd 1.

    Raises RedirectionError at the first target that cannot be opened.
    """
    for redir in command.redirections:
        if not redir.name:
            continue
        try:
            fd = os.open(redir.name, _flags_for(redir.type), _FILE_MODE)
        except OSError as exc:
            raise RedirectionError(redir.name, exc.strerror or str(exc)) from exc
        target = 0 if redir.type is RedirType.IN else 1
        if target == 1:
            sys.stdout.flush()
        try:
            if fd != target:
                os.dup2(fd, target)
        finally:
            if fd > 2:
                os.close(fd)


class SavedStdio:
    """Keep copies of stdin and stdout and put them back afterwards."""

    def __init__(self) -> None:
        self._stdin: int | None = None
        self._stdout: int | None = None

    def __enter__(self) -> "SavedStdio":
        sys.stdout.flush()
        self._stdin = os.dup(0)
        try:
            self._stdout = os.dup(1)
        except OSError:
            os.close(self._stdin)
            self._stdin = None
            raise
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self.restore()
        return False

    def restore(self) -> None:
        """Reattach the saved descriptors to fd 0 and fd 1."""
        sys.stdout.flush()
        if self._stdin is not None:
            os.dup2(self._stdin, 0)
            os.close(self._stdin)
            self._stdin = None
        if self._stdout is not None:
            os.dup2(self._stdout, 1)
            os.close(self._stdout)
            self._stdout = None