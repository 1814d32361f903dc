# minish

`minish` holds the core of a small POSIX-style shell as a Python library.
It needs Python 3.10 or later and nothing outside the standard library.

## Modules

- `minish.env`: `Environment`, an ordered store of `EnvVar` entries
  (a key and an optional value), plus `split_line` for `KEY=value` strings.
- `minish.builtins`: the `echo`, `cd`, `pwd`, `env` (`display_env`) and
  `exit` (`exit_builtin`) commands. `exit_builtin` raises `ShellExit`,
  which carries the status to leave with.
- `minish.exports`: the `export` and `unset` commands, `is_valid_identifier`
  and `export_listing`.
- `minish.redirections`: `Command`, `Redirection`, `RedirType` (`<`, `>`,
  `>>`), `apply_redirections`, which attaches targets to file descriptors
  0 and 1 and raises `RedirectionError` when a target cannot be opened, and
  `SavedStdio`, a context manager that saves and restores stdin and stdout.
- `minish.execution`: `PATH` lookup (`path_dirs`, `find_executable`),
  running one external command (`execute_external`) or a pipeline
  (`run_pipeline`), and dispatching built-ins (`is_builtin`, `run_builtin`).
- `minish.textutil`: `atoi`, `split`, `itoa`, `strtrim`, `strcmp`,
  `is_numeric`.

## Working with the environment

```python
from minish.env import Environment

env = Environment.from_lines(["HOME=/home/user", "PATH=/usr/local/bin:/usr/bin"])

env.get("HOME")                  # "/home/user"
env.set("EDITOR", "vi")          # adds a new variable at the end
env.set_from_assignment("HOME=/tmp")
"EDITOR" in env                  # True
env.unset("EDITOR")              # True: it was present
env.lines()                      # ["HOME=/tmp", "PATH=/usr/local/bin:/usr/bin"]
```

Setting an existing key to `None` leaves its value unchanged; setting a new
key to `None` declares it without a value.

## Built-in commands

```python
import io
from minish.env import Environment
from minish.execution import run_builtin
from minish.redirections import Command

env = Environment.from_lines(["B=2", "A=1"])
out, err = io.StringIO(), io.StringIO()

run_builtin(Command(["echo", "-n", "hi"]), env, out, err)   # writes "hi", returns 0
run_builtin(Command(["export", "C=3"]), env, out, err)      # returns 0
run_builtin(Command(["unset", "B"]), env, out, err)         # returns 0
```

`export` without arguments prints `declare -x` lines sorted by name;
`export_listing(env)` returns the same lines as a list. Invalid names are
reported and give status 1. `run_builtin` raises `ValueError` for a name
that is not a built-in, and lets `ShellExit` from `exit` propagate.

## String helpers

```python
from minish.textutil import atoi, is_numeric, split

split("/usr/bin::/bin", ":")   # ["/usr/bin", "/bin"]
atoi("  -42abc")               # -42
is_numeric("+17")              # True
```

## Running programs

```python
from minish.env import Environment
from minish.execution import run_pipeline
from minish.redirections import Command, Redirection, RedirType

env = Environment.from_lines(["PATH=/usr/bin:/bin"])
status = run_pipeline(
    [
        Command(["printf", "b\\na\\n"]),
        Command(["sort"], [Redirection(RedirType.OUT, "sorted.txt")]),
    ],
    env,
)
```

A command's own redirections take the place of the pipe on that side. The
status is that of the last command: 127 when a command is not found on
`PATH` (or is not executable), 1 when a redirection target cannot be
opened, and 128 plus the signal number when a child is killed by a signal.
The `cd` built-in returns 127 for a missing directory and 126 for one
without search permission.

## What it does not do

There is no interactive prompt, no command-line reader, and no lexer or
parser: commands are built directly as `Command` objects. The package
installs no console command.

## Tests

The test suite uses pytest; install the `test` extra to get it.