from __future__ import annotations

import shutil
import subprocess
from pathlib import Path

import pytest

import sys

ROOT = Path(__file__).resolve().parents[2]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))


def _docker_daemon_available() -> bool:
    if shutil.which("docker") is None:
        return False
    result = subprocess.run(
        ["docker", "info", "--format", "{{.ServerVersion}}"],
        check=False,
        text=True,
        capture_output=True,
    )
    return result.returncode == 0 and bool(result.stdout.strip())


def _docker_image_exists(tag: str) -> bool:
    result = subprocess.run(
        ["docker", "image", "inspect", tag],
        check=False,
        stdout=subprocess.DEVNULL,
        stderr=subprocess.DEVNULL,
    )
    return result.returncode == 0


@pytest.fixture(scope="session")
def docker_daemon_available() -> bool:
    return _docker_daemon_available()


@pytest.fixture()
def require_docker(docker_daemon_available: bool) -> None:
    if not docker_daemon_available:
        pytest.skip("docker daemon is not available")


@pytest.fixture()
def local_image():
    def _require(tag: str) -> str:
        if not _docker_image_exists(tag):
            pytest.skip(f"image {tag} is not present locally")
        return tag

    return _require
