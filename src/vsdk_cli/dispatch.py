from __future__ import annotations

import posixpath
from typing import Sequence

import click


ALIAS_PREFIX = "vsdk-"
EXEC_ALIAS = "vsdk-exec"
SUB_COMMAND_EXEC = "exec"
SUB_COMMAND_VERTICA = "vertica"

# Invocation alias -> sub-command. EXEC_ALIAS reads the sub-command from argv.
ALIASES: dict[str, str] = {
    EXEC_ALIAS: SUB_COMMAND_EXEC,
    "vsdk-bash": "bash",
    "vsdk-make": "make",
    "vsdk-g++": "g++",
    "vsdk-cp": "cp",
    "vsdk-vertica": SUB_COMMAND_VERTICA,
}


def sub_command_for_alias(invoked_name: str) -> str:
    name = posixpath.basename(str(invoked_name or "").strip())
    if name in ALIASES:
        return ALIASES[name]
    if name.startswith(ALIAS_PREFIX) and len(name) > len(ALIAS_PREFIX):
        return name[len(ALIAS_PREFIX) :]
    raise click.UsageError(
        f"Unrecognized invocation name {name!r}: expected {EXEC_ALIAS} or a {ALIAS_PREFIX}<command> alias"
    )


def dispatch(invoked_name: str, args: Sequence[str]) -> tuple[str, list[str]]:
    sub_command = sub_command_for_alias(invoked_name)
    passthrough = [str(arg) for arg in args]
    if sub_command != SUB_COMMAND_EXEC:
        return sub_command, passthrough
    if passthrough[:1] == ["--"]:
        passthrough = passthrough[1:]
    if not passthrough or not passthrough[0]:
        raise click.UsageError(f"{EXEC_ALIAS} requires a command to run, for example: {EXEC_ALIAS} bash")
    return passthrough[0], passthrough[1:]
