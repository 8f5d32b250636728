from __future__ import annotations

import shlex
import subprocess
from dataclasses import dataclass
from typing import Sequence

import click

from vsdk_cli.image import ImageRef
from vsdk_cli.profile import MOUNT_FLAG, InvocationProfile, Option, flatten_options, mount_option
from vsdk_cli.settings import LOGGER


CONTAINER_HOSTNAME = "vsdk"


@dataclass(frozen=True)
class BaseBindings:
    home: str
    cwd: str
    hostname: str = CONTAINER_HOSTNAME

    def options(self) -> list[Option]:
        return [
            ("--rm",),
            mount_option(self.home),
            mount_option(self.cwd),
            ("--hostname", self.hostname),
            ("-w", self.cwd),
        ]


@dataclass(frozen=True)
class InvocationDescriptor:
    runtime: str
    args: tuple[str, ...]

    @property
    def argv(self) -> list[str]:
        return [self.runtime, *self.args]

    def render(self) -> str:
        return shlex.join(self.argv)

    def execute(self) -> int:
        LOGGER.debug("Executing: %s", self.render())
        try:
            result = subprocess.run(self.argv, check=False)
        except OSError as exc:
            raise click.ClickException(f"Unable to run {self.runtime}: {exc}") from exc
        return result.returncode


def _drop_repeated_mounts(options: Sequence[Option]) -> list[Option]:
    # The runtime rejects a repeated mount point.
    result: list[Option] = []
    seen: set[Option] = set()
    for option in options:
        if option[:1] == (MOUNT_FLAG,):
            if option in seen:
                continue
            seen.add(option)
        result.append(option)
    return result


def build_invocation(
    image: ImageRef,
    profile: InvocationProfile,
    sub_command: str,
    passthrough_args: Sequence[str],
    bindings: BaseBindings,
    *,
    runtime: str,
) -> InvocationDescriptor:
    args = [
        "run",
        *flatten_options(_drop_repeated_mounts([*bindings.options(), *profile.options])),
        str(image),
        sub_command,
        *[str(arg) for arg in passthrough_args],
    ]
    return InvocationDescriptor(runtime=runtime, args=tuple(args))


def emit(descriptor: InvocationDescriptor, *, render: bool, execute: bool) -> int | None:
    if render:
        click.echo(descriptor.render(), err=True)
    if not execute:
        return None
    return descriptor.execute()
