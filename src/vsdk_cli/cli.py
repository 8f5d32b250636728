from __future__ import annotations

import os
import shutil
import sys
from pathlib import Path

import click

from vsdk_cli import probes
from vsdk_cli.dispatch import dispatch
from vsdk_cli.image import IMAGE_REPOSITORY, resolve_image
from vsdk_cli.invocation import BaseBindings, build_invocation, emit
from vsdk_cli.profile import build_profile
from vsdk_cli.settings import LOGGER, EnvironmentSettings, configure_logging


@click.command(
    help="Run a command inside the Vertica SDK container.",
    context_settings={
        "ignore_unknown_options": True,
        "allow_interspersed_args": False,
        "help_option_names": [],
    },
)
@click.argument("args", nargs=-1, type=click.UNPROCESSED)
@click.pass_context
def main(ctx: click.Context, args: tuple[str, ...]) -> None:
    settings = EnvironmentSettings.from_environ()
    configure_logging(settings.log_level)

    sub_command, passthrough_args = dispatch(ctx.info_name or "", args)
    LOGGER.debug("Dispatching sub-command=%s args=%s", sub_command, passthrough_args)

    if not settings.dry_run and shutil.which(settings.runtime) is None:
        raise click.ClickException(f"{settings.runtime} command not found in PATH")

    image, warnings = resolve_image(
        settings,
        os_probe=probes.host_os_id,
        version_probe=probes.running_vertica_version,
        image_list_probe=lambda: probes.list_local_images(IMAGE_REPOSITORY, settings.runtime),
    )
    for warning in warnings:
        click.echo(f"Warning: {warning}", err=True)
    LOGGER.debug("Resolved image %s", image)

    home = str(Path.home())
    cwd = str(Path.cwd())
    profile = build_profile(
        sub_command,
        settings,
        interactive=sys.stdin.isatty(),
        uid=os.getuid(),
        gid=os.getgid(),
        home=home,
    )
    for message in profile.messages:
        click.echo(message, err=True)

    descriptor = build_invocation(
        image,
        profile,
        sub_command,
        passthrough_args,
        BaseBindings(home=home, cwd=cwd),
        runtime=settings.runtime,
    )
    returncode = emit(
        descriptor,
        render=settings.debug or settings.dry_run,
        execute=not settings.dry_run,
    )
    ctx.exit(_exit_code(returncode))


def _exit_code(returncode: int | None) -> int:
    if returncode is None:
        return 0
    if returncode < 0:
        # Killed by a signal: 128 + signal number.
        return 128 - returncode
    return returncode


def run() -> None:
    # click consumes the first "--"; any "--" the user typed must come after it.
    main(args=["--", *sys.argv[1:]])


if __name__ == "__main__":
    run()
