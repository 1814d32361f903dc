"""Built-in commands: echo, cd, pwd, env and exit."""

from __future__ import annotations

import os
import sys
from typing import IO, TextIO

from minish.env import Environment
from minish.redirections import Command, RedirectionError, RedirType
from minish.textutil import atoi, is_numeric


class ShellExit(Exception):
    """Raised by the exit builtin to leave the shell with ``status``."""

    def __init__(self, status: int) -> None:
        super().__init__(status)
        self.status = status


def _open_output(command: Command) -> IO[str] | None:
    """Open every redirection target in order; return the last output file."""
    stream: IO[str] | None = None
    for redir in command.redirections:
        if not redir.name:
            continue
        try:
            if redir.type is RedirType.IN:
                with open(redir.name, "rb"):
                    pass
                continue
            mode = "w" if redir.type is RedirType.OUT else "a"
            new_stream = open(redir.name, mode, encoding="utf-8")
        except OSError as exc:
            if stream is not None:
                stream.close()
            raise RedirectionError(redir.name, exc.strerror or str(exc)) from exc
        if stream is not None:
            stream.close()
        stream = new_stream
    return stream


def _is_n_flag(arg: str) -> bool:
    return arg.startswith("-n") and set(arg[1:]) == {"n"}


def echo(command: Command, out: TextIO) -> int:
    """Print the arguments separated by spaces; a leading -n drops the newline."""
    args = command.args[1:]
    newline = True
    if args and _is_n_flag(args[0]):
        newline = False
        args = args[1:]
    try:
        target = _open_output(command)
    except RedirectionError as exc:
        sys.stderr.write(f"{exc}\n")
        return 1
    stream = target if target is not None else out
    try:
        stream.write(" ".join(args))
        if newline:
            stream.write("\n")
    finally:
        if target is not None:
            target.close()
    return 0


def _getcwd() -> str | None:
    try:
        return os.getcwd()
    except OSError:
        return None


def _missing_dir_status(path: str) -> int:
    if not os.path.exists(path):
        return 127
    if not os.access(path, os.X_OK):
        return 126
    return 0


def cd(command: Command, env: Environment, err: TextIO) -> int:
    """Change directory to the single argument and update PWD and OLDPWD."""
    if len(command.args) < 2:
        err.write("must be a relative or absolute path\n")
        return 1
    path = command.args[1]
    old_path = _getcwd()
    status = 0
    try:
        os.chdir(path)
    except OSError as exc:
        err.write(f"cd: {exc.strerror or exc}\n")
        status = _missing_dir_status(path)
    env.set("PWD", _getcwd())
    env.set("OLDPWD", old_path)
    return status


def pwd(out: TextIO, err: TextIO) -> int:
    """Print the current working directory."""
    cwd = _getcwd()
    if cwd is None:
        err.write("Cannot get the current directory ... !\n")
        status = 1
    else:
        out.write(cwd)
        status = 0
    out.write("\n")
    return status


def display_env(env: Environment, out: TextIO) -> int:
    """Print each variable that has a value as ``KEY="value"``."""
    if len(env) == 0:
        return 1
    for var in env:
        if var.value is not None:
            out.write(f'{var.key}="{var.value}"\n')
    return 0


def exit_builtin(command: Command, out: TextIO, err: TextIO) -> int:
    """Leave the shell by raising ShellExit.

    With too many arguments nothing is left and 1 is returned.
    """
    out.write("exit\n")
    if len(command.args) < 2:
        raise ShellExit(0)
    arg = command.args[1]
    if not is_numeric(arg):
        err.write(f"minishell: exit: {arg}:numeric argument required\n")
        raise ShellExit(2)
    if len(command.args) > 2:
        err.write("minishell: exit: too many arguments\n")
        return 1
    raise ShellExit(atoi(arg) % 256)