from __future__ import annotations

import re
import shutil
import subprocess
from pathlib import Path

from vsdk_cli.errors import ProbeFailure
from vsdk_cli.settings import LOGGER


OS_RELEASE_PATH = Path("/etc/os-release")
VSQL_COMMAND = ("vsql", "-X", "-A", "-t", "-c", "SELECT version()")
VERSION_PATTERN = re.compile(r"^Vertica Analytic Database v(\d+\.\d+\.\d+)-\d+$")


def _run_capture(cmd: list[str]) -> str:
    if shutil.which(cmd[0]) is None:
        raise ProbeFailure(f"{cmd[0]} command not found in PATH")
    LOGGER.debug("Probing: %s", " ".join(cmd))
    try:
        result = subprocess.run(cmd, check=False, text=True, capture_output=True)
    except OSError as exc:
        raise ProbeFailure(f"Unable to run {cmd[0]}: {exc}") from exc
    if result.returncode != 0:
        raise ProbeFailure(f"{cmd[0]} exited with code {result.returncode}: {result.stderr.strip()}")
    return result.stdout


def parse_os_release(text: str) -> str:
    for line in text.splitlines():
        key, sep, value = line.strip().partition("=")
        if sep and key == "ID":
            return value.strip().strip("\"'").lower()
    raise ProbeFailure("os-release has no ID field")


def host_os_id(path: Path = OS_RELEASE_PATH) -> str:
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeError) as exc:
        raise ProbeFailure(f"Unable to read {path}: {exc}") from exc
    return parse_os_release(text)


def parse_vertica_version(output: str) -> str:
    for line in output.splitlines():
        match = VERSION_PATTERN.match(line.strip())
        if match:
            return match.group(1)
    raise ProbeFailure(f"Unrecognized version output: {output.strip()!r}")


def running_vertica_version() -> str:
    return parse_vertica_version(_run_capture(list(VSQL_COMMAND)))


def list_local_images(repository: str, runtime: str = "docker") -> list[str]:
    output = _run_capture([runtime, "images", "--format", "{{.Repository}}:{{.Tag}}", repository])
    images: list[str] = []
    for line in output.splitlines():
        image = line.strip()
        if not image or image.endswith(":<none>"):
            continue
        if image not in images:
            images.append(image)
    return images
