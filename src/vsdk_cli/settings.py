from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass
from typing import Mapping

from vsdk_cli.errors import ConfigurationError


IMAGE_ENV = "VSDK_IMAGE"
OS_TAG_ENV = "OSTAG"
VERSION_ENV = "VERTICA_VERSION"
MOUNT_ENV = "VSDK_MOUNT"
ENV_FILE_ENV = "VSDK_ENV"
DEBUG_ENV = "VSDK_DEBUG"
CONTAINER_NAME_ENV = "VERTICA_CONTAINER_NAME"
PORT_OFFSET_ENV = "VERTICA_PORT_OFFSET"
DEBUG_ENTRYPOINT_ENV = "DEBUG_ENTRYPOINT"
DRY_RUN_ENV = "VSDK_DRY_RUN"
RUNTIME_ENV = "VSDK_RUNTIME"
LOG_LEVEL_ENV = "VSDK_LOG_LEVEL"

DEFAULT_RUNTIME = "docker"
DEFAULT_LOG_LEVEL = "warning"
LOG_LEVEL_CHOICES = ("critical", "error", "warning", "info", "debug")
FALSE_VALUES = {"0", "false", "no", "off"}

LOGGER = logging.getLogger("vsdk")
LOGGER.addHandler(logging.NullHandler())


def _clean(value: str | None) -> str:
    return str(value or "").strip()


def _flag(value: str | None) -> bool:
    normalized = _clean(value).lower()
    return bool(normalized) and normalized not in FALSE_VALUES


def _parse_port_offset(value: str | None) -> int | None:
    raw = _clean(value)
    if not raw:
        return None
    try:
        offset = int(raw, 10)
    except ValueError as exc:
        raise ConfigurationError(f"Invalid {PORT_OFFSET_ENV}: {raw!r} (expected an integer)") from exc
    if offset < 0:
        raise ConfigurationError(f"Invalid {PORT_OFFSET_ENV}: {raw!r} (must not be negative)")
    return offset


@dataclass(frozen=True)
class EnvironmentSettings:
    image: str = ""
    os_tag: str = ""
    version: str = ""
    mounts: tuple[str, ...] = ()
    env_file: str = ""
    debug: bool = False
    container_name: str = ""
    port_offset: int | None = None
    debug_entrypoint: str = ""
    dry_run: bool = False
    runtime: str = DEFAULT_RUNTIME
    log_level: str = DEFAULT_LOG_LEVEL

    @classmethod
    def from_environ(cls, environ: Mapping[str, str] | None = None) -> "EnvironmentSettings":
        source = os.environ if environ is None else environ
        return cls(
            image=_clean(source.get(IMAGE_ENV)),
            os_tag=_clean(source.get(OS_TAG_ENV)),
            version=_clean(source.get(VERSION_ENV)),
            mounts=tuple(_clean(source.get(MOUNT_ENV)).split()),
            env_file=_clean(source.get(ENV_FILE_ENV)),
            debug=_flag(source.get(DEBUG_ENV)),
            container_name=_clean(source.get(CONTAINER_NAME_ENV)),
            port_offset=_parse_port_offset(source.get(PORT_OFFSET_ENV)),
            # Forwarded untouched, so only an empty value counts as unset.
            debug_entrypoint=str(source.get(DEBUG_ENTRYPOINT_ENV) or ""),
            dry_run=_flag(source.get(DRY_RUN_ENV)),
            runtime=_clean(source.get(RUNTIME_ENV)) or DEFAULT_RUNTIME,
            log_level=normalize_log_level(source.get(LOG_LEVEL_ENV)),
        )


def normalize_log_level(value: object) -> str:
    normalized = str(value or "").strip().lower()
    if normalized in LOG_LEVEL_CHOICES:
        return normalized
    return DEFAULT_LOG_LEVEL


def configure_logging(level: str) -> None:
    normalized = normalize_log_level(level)
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
    LOGGER.handlers.clear()
    LOGGER.addHandler(handler)
    LOGGER.setLevel(getattr(logging, normalized.upper(), logging.WARNING))
    LOGGER.propagate = False
