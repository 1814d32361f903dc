"""Running commands: PATH lookup, external programs, pipelines and builtins."""

from __future__ import annotations

import contextlib
import os
import subprocess
import sys
from typing import Iterable, Iterator, TextIO

from minish.builtins import cd, display_env, echo, exit_builtin, pwd
from minish.env import Environment
from minish.exports import export, unset
from minish.redirections import Command, RedirectionError, RedirType
from minish.textutil import split

_FILE_MODE = 0o644
_BUILTIN_NAMES = frozenset({"echo", "cd", "pwd", "env", "exit", "export", "unset"})
_NOT_FOUND_STATUS = 127
_FAILURE_STATUS = 1
_SIGNAL_BASE = 128


def path_dirs(env: Environment) -> list[str]:
    """The non-empty directories listed in PATH, in order."""
    path = env.get("PATH")
    if path is None:
        return []
    return split(path, ":")


def _is_executable(path: str) -> bool:
    return os.access(path, os.F_OK | os.X_OK)


def find_executable(name: str, env: Environment) -> str | None:
    """Locate a command.

    A name containing ``/`` is used as is if it is executable; otherwise
    each PATH directory is tried in order.
    """
    if not name:
        return None
    if "/" in name:
        return name if _is_executable(name) else None
    for directory in path_dirs(env):
        candidate = f"{directory}/{name}"
        if _is_executable(candidate):
            return candidate
    return None


def status_from_returncode(returncode: int) -> int:
    """Turn a process return code into a shell status (128 + signal if killed)."""
    if returncode < 0:
        return _SIGNAL_BASE - returncode
    return returncode


def _process_env(env: Environment) -> dict[str, str]:
    return {var.key: var.value for var in env if var.value is not None}


def _open_flags(kind: RedirType) -> int:
    if kind is RedirType.IN:
        return os.O_RDONLY
    if kind is RedirType.OUT:
        return os.O_CREAT | os.O_WRONLY | os.O_TRUNC
    return os.O_CREAT | os.O_WRONLY | os.O_APPEND


@contextlib.contextmanager
def _redirected(command: Command) -> Iterator[tuple[int | None, int | None]]:
    """Open the command's redirections in order; yield the input and output fds."""
    fds: dict[int, int | None] = {0: None, 1: None}
    try:
        for redir in command.redirections:
            if not redir.name:
                continue
            target = 0 if redir.type is RedirType.IN else 1
            try:
                fd = os.open(redir.name, _open_flags(redir.type), _FILE_MODE)
            except OSError as exc:
                raise RedirectionError(redir.name, exc.strerror or str(exc)) from exc
            previous = fds[target]
            if previous is not None:
                os.close(previous)
            fds[target] = fd
        yield fds[0], fds[1]
    finally:
        for fd in fds.values():
            if fd is not None:
                os.close(fd)


def _report_not_found(name: str) -> None:
    sys.stderr.write(f"minishell: {name} command not found\n")


def execute_external(command: Command, env: Environment) -> int:
    """Run one external command with its redirections and return its status."""
    if not command.args:
        return 0
    try:
        with _redirected(command) as (stdin, stdout):
            path = find_executable(command.args[0], env)
            if path is None:
                _report_not_found(command.args[0])
                return _NOT_FOUND_STATUS
            sys.stdout.flush()
            try:
                completed = subprocess.run(
                    command.args,
                    executable=path,
                    env=_process_env(env),
                    stdin=stdin,
                    stdout=stdout,
                )
            except OSError as exc:
                sys.stderr.write(f"minishell: {exc.strerror or exc}\n")
                return _FAILURE_STATUS
            return status_from_returncode(completed.returncode)
    except RedirectionError as exc:
        sys.stderr.write(f"{exc}\n")
        return _FAILURE_STATUS


def _start_stage(command: Command, env: Environment, stdin, is_last: bool):
    """Start one pipeline stage; return the process (or None) and a status."""
    if not command.args:
        return None, 0
    try:
        with _redirected(command) as (redir_in, redir_out):
            path = find_executable(command.args[0], env)
            if path is None:
                _report_not_found(command.args[0])
                return None, _NOT_FOUND_STATUS
            if redir_out is not None:
                stdout = redir_out
            else:
                stdout = None if is_last else subprocess.PIPE
            try:
                proc = subprocess.Popen(
                    command.args,
                    executable=path,
                    env=_process_env(env),
                    stdin=redir_in if redir_in is not None else stdin,
                    stdout=stdout,
                )
            except OSError as exc:
                sys.stderr.write(f"minishell: {exc.strerror or exc}\n")
                return None, _FAILURE_STATUS
            return proc, 0
    except RedirectionError as exc:
        sys.stderr.write(f"{exc}\n")
        return None, _FAILURE_STATUS


def run_pipeline(commands: Iterable[Command], env: Environment) -> int:
    """Run commands connected by pipes; the status is that of the last one.

    A command's own redirections take the place of the pipe on that side.
    """
    stages = list(commands)
    if not stages:
        return 0
    if len(stages) == 1:
        return execute_external(stages[0], env)
    sys.stdout.flush()
    processes: list[subprocess.Popen | None] = []
    last_status = 0
    upstream = None
    try:
        for index, command in enumerate(stages):
            is_last = index == len(stages) - 1
            if index == 0:
                stdin = None
            else:
                stdin = upstream if upstream is not None else subprocess.DEVNULL
            proc, status = _start_stage(command, env, stdin, is_last)
            if upstream is not None:
                upstream.close()
                upstream = None
            if proc is not None and not is_last:
                upstream = proc.stdout
            processes.append(proc)
            last_status = status
    finally:
        if upstream is not None:
            upstream.close()
    for proc in processes:
        if proc is not None:
            proc.wait()
    last = processes[-1]
    if last is not None:
        last_status = status_from_returncode(last.returncode)
    return last_status


def is_builtin(name: str | None) -> bool:
    """Tell whether ``name`` is one of the shell's builtin commands."""
    return name in _BUILTIN_NAMES


def _run_env(command: Command, env: Environment, out: TextIO, err: TextIO) -> int:
    try:
        with _redirected(command) as (_, fd_out):
            if fd_out is None:
                return display_env(env, out)
            with os.fdopen(os.dup(fd_out), "w", encoding="utf-8") as stream:
                return display_env(env, stream)
    except RedirectionError as exc:
        err.write(f"{exc}\n")
        return _FAILURE_STATUS


def run_builtin(command: Command, env: Environment, out: TextIO, err: TextIO) -> int:
    """Run a builtin command and return its status.

    The exit builtin raises ShellExit; a non-builtin raises ValueError.
    """
    name = command.name
    if name == "echo":
        return echo(command, out)
    if name == "cd":
        return cd(command, env, err)
    if name == "pwd":
        return pwd(out, err)
    if name == "env":
        return _run_env(command, env, out, err)
    if name == "export":
        return export(command, env, out)
    if name == "unset":
        return unset(command, env)
    if name == "exit":
        return exit_builtin(command, out, err)
    raise ValueError(f"not a builtin: {name}")