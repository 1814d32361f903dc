import io
import os
import sys

import pytest

from minish.builtins import ShellExit
from minish.env import Environment
from minish.execution import (
    execute_external,
    find_executable,
    is_builtin,
    path_dirs,
    run_builtin,
    run_pipeline,
    status_from_returncode,
)
from minish.redirections import Command, Redirection, RedirType

PY = sys.executable


def _make_tool(directory, name="tool", executable=True):
    path = directory / name
    path.write_text("#!/bin/sh\nexit 0\n")
    path.chmod(0o755 if executable else 0o644)
    return path


def _py(code, *redirections):
    return Command([PY, "-c", code], list(redirections))


def test_path_dirs_drops_empty_entries():
    env = Environment.from_lines(["PATH=/usr/bin::/bin:"])
    assert path_dirs(env) == ["/usr/bin", "/bin"]


def test_path_dirs_without_path():
    assert path_dirs(Environment.from_lines(["HOME=/tmp"])) == []


def test_find_executable_searches_path(tmp_path):
    _make_tool(tmp_path)
    env = Environment.from_lines([f"PATH=/nonexistent:{tmp_path}"])
    assert find_executable("tool", env) == f"{tmp_path}/tool"


def test_find_executable_prefers_first_directory(tmp_path):
    first = tmp_path / "a"
    second = tmp_path / "b"
    first.mkdir()
    second.mkdir()
    _make_tool(first)
    _make_tool(second)
    env = Environment.from_lines([f"PATH={first}:{second}"])
    assert find_executable("tool", env) == f"{first}/tool"


def test_find_executable_skips_non_executable(tmp_path):
    _make_tool(tmp_path, executable=False)
    env = Environment.from_lines([f"PATH={tmp_path}"])
    assert find_executable("tool", env) is None


def test_find_executable_with_slash(tmp_path):
    tool = _make_tool(tmp_path)
    env = Environment()
    assert find_executable(str(tool), env) == str(tool)
    assert find_executable(str(tmp_path / "missing"), env) is None


def test_status_from_returncode():
    assert status_from_returncode(0) == 0
    assert status_from_returncode(3) == 3
    assert status_from_returncode(-2) == 130


def test_execute_external_status():
    env = Environment()
    assert execute_external(_py("import sys; sys.exit(3)"), env) == 3
    assert execute_external(_py("pass"), env) == 0


def test_execute_external_output_redirection(tmp_path):
    target = tmp_path / "out.txt"
    command = _py("print('hi')", Redirection(RedirType.OUT, str(target)))
    assert execute_external(command, Environment()) == 0
    assert target.read_text() == "hi\n"


def test_execute_external_append(tmp_path):
    target = tmp_path / "out.txt"
    target.write_text("first\n")
    command = _py("print('second')", Redirection(RedirType.APPEND, str(target)))
    execute_external(command, Environment())
    assert target.read_text() == "first\nsecond\n"


def test_execute_external_input_redirection(tmp_path):
    source = tmp_path / "in.txt"
    source.write_text("data")
    target = tmp_path / "out.txt"
    command = _py(
        "import sys; sys.stdout.write(sys.stdin.read() * 2)",
        Redirection(RedirType.IN, str(source)),
        Redirection(RedirType.OUT, str(target)),
    )
    execute_external(command, Environment())
    assert target.read_text() == "datadata"


def test_execute_external_passes_environment(tmp_path):
    target = tmp_path / "out.txt"
    env = Environment.from_lines(["FOO=bar"])
    env.set("BARE", None)
    command = _py(
        "import os; print(os.environ.get('FOO'), 'BARE' in os.environ)",
        Redirection(RedirType.OUT, str(target)),
    )
    execute_external(command, env)
    assert target.read_text() == "bar False\n"


def test_execute_external_not_found(tmp_path, capsys):
    env = Environment.from_lines([f"PATH={tmp_path}"])
    status = execute_external(Command(["no_such_command"]), env)
    assert status == 127
    assert "no_such_command command not found" in capsys.readouterr().err


def test_execute_external_missing_input_file(tmp_path):
    command = _py("pass", Redirection(RedirType.IN, str(tmp_path / "missing")))
    assert execute_external(command, Environment()) == 1


def test_run_pipeline_connects_stages(tmp_path):
    target = tmp_path / "out.txt"
    commands = [
        _py("print('abc')"),
        _py(
            "import sys; sys.stdout.write(sys.stdin.read().upper())",
            Redirection(RedirType.OUT, str(target)),
        ),
    ]
    assert run_pipeline(commands, Environment()) == 0
    assert target.read_text() == "ABC\n"


def test_run_pipeline_three_stages(tmp_path):
    target = tmp_path / "out.txt"
    commands = [
        _py("print('x')"),
        _py("import sys; sys.stdout.write(sys.stdin.read() * 2)"),
        _py(
            "import sys; sys.stdout.write(sys.stdin.read())",
            Redirection(RedirType.OUT, str(target)),
        ),
    ]
    run_pipeline(commands, Environment())
    assert target.read_text() == "x\nx\n"


def test_run_pipeline_status_of_last():
    commands = [_py("import sys; sys.exit(4)"), _py("import sys; sys.exit(5)")]
    assert run_pipeline(commands, Environment()) == 5


def test_run_pipeline_missing_last(tmp_path):
    env = Environment.from_lines([f"PATH={tmp_path}"])
    commands = [_py("print('a')"), Command(["no_such_command"])]
    assert run_pipeline(commands, env) == 127


def test_run_pipeline_missing_middle_gives_empty_input(tmp_path):
    target = tmp_path / "out.txt"
    env = Environment.from_lines([f"PATH={tmp_path}"])
    commands = [
        _py("print('a')"),
        Command(["no_such_command"]),
        _py(
            "import sys; sys.stdout.write(repr(sys.stdin.read()))",
            Redirection(RedirType.OUT, str(target)),
        ),
    ]
    assert run_pipeline(commands, env) == 0
    assert target.read_text() == "''"


def test_run_pipeline_empty():
    assert run_pipeline([], Environment()) == 0


@pytest.mark.parametrize(
    "name", ["echo", "cd", "pwd", "env", "exit", "export", "unset"]
)
def test_is_builtin_true(name):
    assert is_builtin(name) is True


@pytest.mark.parametrize("name", ["ls", "cat", "", None, "ECHO"])
def test_is_builtin_false(name):
    assert is_builtin(name) is False


def test_run_builtin_echo():
    out = io.StringIO()
    status = run_builtin(Command(["echo", "a", "b"]), Environment(), out, io.StringIO())
    assert status == 0
    assert out.getvalue() == "a b\n"


def test_run_builtin_export_and_env():
    env = Environment()
    out = io.StringIO()
    run_builtin(Command(["export", "NAME=val"]), env, out, io.StringIO())
    assert env.get("NAME") == "val"
    listing = io.StringIO()
    assert run_builtin(Command(["env"]), env, listing, io.StringIO()) == 0
    assert listing.getvalue() == 'NAME="val"\n'


def test_run_builtin_env_redirected(tmp_path):
    target = tmp_path / "env.txt"
    env = Environment.from_lines(["A=1"])
    out = io.StringIO()
    command = Command(["env"], [Redirection(RedirType.OUT, str(target))])
    assert run_builtin(command, env, out, io.StringIO()) == 0
    assert out.getvalue() == ""
    assert target.read_text() == 'A="1"\n'


def test_run_builtin_unset():
    env = Environment.from_lines(["A=1", "B=2"])
    run_builtin(Command(["unset", "A"]), env, io.StringIO(), io.StringIO())
    assert "A" not in env
    assert env.get("B") == "2"


def test_run_builtin_pwd():
    out = io.StringIO()
    assert run_builtin(Command(["pwd"]), Environment(), out, io.StringIO()) == 0
    assert out.getvalue() == os.getcwd() + "\n"


def test_run_builtin_exit_raises():
    with pytest.raises(ShellExit) as info:
        run_builtin(Command(["exit", "7"]), Environment(), io.StringIO(), io.StringIO())
    assert info.value.status == 7


def test_run_builtin_rejects_non_builtin():
    with pytest.raises(ValueError):
        run_builtin(Command(["ls"]), Environment(), io.StringIO(), io.StringIO())