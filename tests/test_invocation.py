from __future__ import annotations

import shlex
import unittest
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import patch

import sys

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from vsdk_cli.image import ImageRef
from vsdk_cli.invocation import BaseBindings, build_invocation, emit
from vsdk_cli.profile import InvocationProfile


IMAGE = ImageRef(os_tag="centos", version="12.0.4")


class InvocationTests(unittest.TestCase):
    def test_argument_order(self) -> None:
        profile = InvocationProfile(options=(("-it",), ("--env-file", "/tmp/e")))
        descriptor = build_invocation(
            IMAGE,
            profile,
            "make",
            ["-j4", "install"],
            BaseBindings(home="/home/dev", cwd="/home/dev/udx"),
            runtime="docker",
        )
        self.assertEqual(
            descriptor.argv,
            [
                "docker",
                "run",
                "--rm",
                "-v",
                "/home/dev:/home/dev",
                "-v",
                "/home/dev/udx:/home/dev/udx",
                "--hostname",
                "vsdk",
                "-w",
                "/home/dev/udx",
                "-it",
                "--env-file",
                "/tmp/e",
                "vertica/verticasdk:centos-v12.0.4",
                "make",
                "-j4",
                "install",
            ],
        )

    def test_repeated_bindings_are_mounted_once(self) -> None:
        profile = InvocationProfile(options=(("-v", "/data:/data"), ("-v", "/home/dev:/home/dev"), ("--user", "1:1")))
        descriptor = build_invocation(
            IMAGE,
            profile,
            "bash",
            [],
            BaseBindings(home="/home/dev", cwd="/home/dev"),
            runtime="docker",
        )
        bindings = [descriptor.args[i + 1] for i, arg in enumerate(descriptor.args) if arg == "-v"]
        self.assertEqual(bindings, ["/home/dev:/home/dev", "/data:/data"])
        self.assertIn("--user", descriptor.args)

    def test_option_values_that_look_like_mount_flags_are_kept(self) -> None:
        profile = InvocationProfile(
            options=(
                ("--env-file", "-v"),
                ("-v", "/data:/data"),
                ("--name", "-v"),
                ("-v", "/data:/data"),
                ("-p", "5433:5433"),
            )
        )
        descriptor = build_invocation(IMAGE, profile, "bash", [], BaseBindings(home="/h", cwd="/w"), runtime="docker")
        workdir_index = descriptor.args.index("-w")
        self.assertEqual(
            list(descriptor.args[workdir_index + 2 : -2]),
            ["--env-file", "-v", "-v", "/data:/data", "--name", "-v", "-p", "5433:5433"],
        )

    def test_render_round_trips_paths_with_spaces(self) -> None:
        descriptor = build_invocation(
            ImageRef.opaque("my registry/sdk:1"),
            InvocationProfile(options=(("-v", "/mnt/my data:/mnt/my data"),)),
            "bash",
            ["-c", "echo 'hi there' && ls \"$HOME\""],
            BaseBindings(home="/home/dev user", cwd="/home/dev user/a b"),
            runtime="docker",
        )
        self.assertEqual(shlex.split(descriptor.render()), descriptor.argv)

    def test_render_only_never_executes(self) -> None:
        descriptor = build_invocation(IMAGE, InvocationProfile(), "bash", [], BaseBindings(home="/h", cwd="/w"), runtime="docker")
        with patch("vsdk_cli.invocation.subprocess.run") as run_mock, patch("vsdk_cli.invocation.click.echo") as echo_mock:
            result = emit(descriptor, render=True, execute=False)
        self.assertIsNone(result)
        run_mock.assert_not_called()
        echo_mock.assert_called_once_with(descriptor.render(), err=True)

    def test_execute_returns_runtime_exit_code(self) -> None:
        descriptor = build_invocation(IMAGE, InvocationProfile(), "bash", [], BaseBindings(home="/h", cwd="/w"), runtime="docker")
        calls: list[str] = []

        def fake_echo(message: str, err: bool = False) -> None:
            del err
            calls.append("render")

        def fake_run(cmd: list[str], check: bool = False) -> SimpleNamespace:
            del check
            calls.append("run")
            self.assertEqual(cmd, descriptor.argv)
            return SimpleNamespace(returncode=17)

        with patch("vsdk_cli.invocation.subprocess.run", side_effect=fake_run), patch(
            "vsdk_cli.invocation.click.echo", side_effect=fake_echo
        ):
            self.assertEqual(emit(descriptor, render=True, execute=True), 17)
        self.assertEqual(calls, ["render", "run"])

    def test_execute_without_render_prints_nothing(self) -> None:
        descriptor = build_invocation(IMAGE, InvocationProfile(), "bash", [], BaseBindings(home="/h", cwd="/w"), runtime="docker")
        with patch("vsdk_cli.invocation.subprocess.run", return_value=SimpleNamespace(returncode=0)), patch(
            "vsdk_cli.invocation.click.echo"
        ) as echo_mock:
            self.assertEqual(emit(descriptor, render=False, execute=True), 0)
        echo_mock.assert_not_called()


if __name__ == "__main__":
    unittest.main()
