"""The export and unset builtins."""

from __future__ import annotations

from typing import TextIO

from minish.env import Environment, split_line
from minish.redirections import Command


def _identifier_end(text: str) -> int:
    """Index of the first character that cannot be part of a name."""
    for index, char in enumerate(text):
        if not (char.isascii() and (char.isalnum() or char == "_")):
            return index
    return len(text)


def _is_append_form(text: str) -> bool:
    """Tell whether ``text`` has the ``NAME+=value`` form."""
    if not text or text[0].isdigit():
        return False
    end = _identifier_end(text)
    return end > 0 and text[end:end + 2] == "+="


def is_valid_identifier(text: str) -> bool:
    """Tell whether ``text`` is ``NAME`` or ``NAME=value`` with a valid name.

    A name is made of ASCII letters, digits and underscores and does not
    start with a digit.
    """
    if not text or text[0] == "=" or text[0].isdigit():
        return False
    end = _identifier_end(text)
    return end == len(text) or text[end] == "="


def export_listing(env: Environment) -> list[str]:
    """The ``declare -x`` lines for every variable, sorted by name."""
    listing = []
    for var in sorted(env, key=lambda var: var.key.encode()):
        if var.value is None:
            listing.append(f"declare -x {var.key}")
        else:
            listing.append(f'declare -x {var.key}="{var.value}"')
    return listing


def export(command: Command, env: Environment, out: TextIO) -> int:
    """Define or list exported variables.

    Without arguments the sorted listing is printed. Each argument is
    ``NAME`` (declared without a value unless it already has one) or
    ``NAME=value``. Invalid names are reported and make the status 1;
    the unsupported ``NAME+=value`` form is reported but keeps status 0.
    """
    args = command.args[1:]
    if not args:
        for line in export_listing(env):
            out.write(f"{line}\n")
        return 0
    status = 0
    for arg in args:
        if not is_valid_identifier(arg):
            out.write(f"export: `{arg}`: not a valid identifier\n")
            if not _is_append_form(arg):
                status = 1
            continue
        key, value = split_line(arg)
        env.set(key, value)
    return status


def unset(command: Command, env: Environment) -> int:
    """Remove every named variable; without names the status is 1."""
    names = command.args[1:]
    if not names:
        return 1
    for name in names:
        env.unset(name)
    return 0