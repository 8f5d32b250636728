from __future__ import annotations

import random
from dataclasses import dataclass

from vsdk_cli.dispatch import SUB_COMMAND_VERTICA
from vsdk_cli.settings import DEBUG_ENTRYPOINT_ENV, EnvironmentSettings


DEFAULT_CONTAINER_NAME = "verticasdk"
VERTICA_CLIENT_PORT = 5433
VERTICA_AGENT_PORT = 5444
PORT_OFFSET_RANGE = 10000
DBADMIN_USER = "dbadmin"
DBADMIN_UID = 1000
DBADMIN_GID = 1000
INTERACTIVE_FLAG = "-it"
MOUNT_FLAG = "-v"

# One runtime option with its value(s), e.g. ("-v", "/data:/data") or ("--privileged",).
Option = tuple[str, ...]


def flatten_options(options: tuple[Option, ...] | list[Option]) -> list[str]:
    return [token for option in options for token in option]


@dataclass(frozen=True)
class InvocationProfile:
    options: tuple[Option, ...] = ()
    messages: tuple[str, ...] = ()

    @property
    def flags(self) -> tuple[str, ...]:
        return tuple(flatten_options(self.options))


def mount_option(path: str) -> Option:
    return (MOUNT_FLAG, f"{path}:{path}")


def _vertica_options(
    settings: EnvironmentSettings,
    *,
    rng: random.Random,
    runtime: str,
) -> tuple[list[Option], list[str]]:
    container_name = settings.container_name or DEFAULT_CONTAINER_NAME
    if settings.port_offset is not None:
        port_offset = settings.port_offset
    else:
        port_offset = rng.randrange(PORT_OFFSET_RANGE)
    client_port = VERTICA_CLIENT_PORT + port_offset
    agent_port = VERTICA_AGENT_PORT + port_offset

    options: list[Option] = [
        ("--user", f"{DBADMIN_UID}:{DBADMIN_GID}"),
        ("--security-opt", "seccomp=unconfined"),
        ("--privileged",),
        ("--name", container_name),
        ("-p", f"{client_port}:{VERTICA_CLIENT_PORT}"),
        ("-p", f"{agent_port}:{VERTICA_AGENT_PORT}"),
    ]
    messages = [
        f"Starting Vertica in container '{container_name}'. Follow startup with: {runtime} logs -f {container_name}",
        f"Once it is up, connect with: vsql -h localhost -p {client_port} -U {DBADMIN_USER}",
        f"Stop it with: {runtime} stop {container_name}",
    ]
    return options, messages


def build_profile(
    sub_command: str,
    settings: EnvironmentSettings,
    *,
    interactive: bool,
    uid: int,
    gid: int,
    home: str,
    rng: random.Random | None = None,
) -> InvocationProfile:
    options: list[Option] = []
    messages: list[str] = []

    if interactive:
        options.append((INTERACTIVE_FLAG,))

    for mount in settings.mounts:
        options.append(mount_option(mount))

    if settings.env_file:
        options.append(("--env-file", settings.env_file))

    if sub_command == SUB_COMMAND_VERTICA:
        vertica_options, messages = _vertica_options(
            settings,
            rng=rng if rng is not None else random.Random(),
            runtime=settings.runtime,
        )
        options.extend(vertica_options)
    else:
        options.append(mount_option(home))
        options.append(("--user", f"{uid}:{gid}"))

    if settings.debug_entrypoint:
        options.append(("-e", f"{DEBUG_ENTRYPOINT_ENV}={settings.debug_entrypoint}"))

    return InvocationProfile(options=tuple(options), messages=tuple(messages))
