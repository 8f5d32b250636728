from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable

from vsdk_cli.errors import ConfigurationError, ProbeFailure
from vsdk_cli.settings import IMAGE_ENV, LOGGER, OS_TAG_ENV, VERSION_ENV, EnvironmentSettings


IMAGE_REPOSITORY = "vertica/verticasdk"
OS_TAG_CENTOS = "centos"
OS_TAG_UBUNTU = "ubuntu"
DEFAULT_OS_TAG = OS_TAG_CENTOS
HOST_OS_TAGS = {
    "rhel": OS_TAG_CENTOS,
    "ubuntu": OS_TAG_UBUNTU,
}
CANDIDATE_IMAGE_PATTERN = re.compile(
    r"^" + re.escape(IMAGE_REPOSITORY) + r":(centos|ubuntu)-v\d+\.\d+\.\d+$"
)

OSProbe = Callable[[], str]
VersionProbe = Callable[[], str]
ImageListProbe = Callable[[], list[str]]


@dataclass(frozen=True)
class ImageRef:
    """A structured repository/tag/version triple, or an opaque reference."""

    repository: str = IMAGE_REPOSITORY
    os_tag: str = ""
    version: str = ""
    reference: str = ""

    @classmethod
    def opaque(cls, reference: str) -> "ImageRef":
        return cls(repository="", reference=reference)

    def __str__(self) -> str:
        if self.reference:
            return self.reference
        return f"{self.repository}:{self.os_tag}-v{self.version}"


def os_tag_for_host(os_id: str) -> str:
    return HOST_OS_TAGS.get(str(os_id or "").strip().lower(), DEFAULT_OS_TAG)


def resolve_os_tag(settings: EnvironmentSettings, os_probe: OSProbe | None) -> tuple[str, list[str]]:
    if settings.os_tag:
        return settings.os_tag, []
    os_id = ""
    if os_probe is not None:
        try:
            os_id = os_probe()
        except ProbeFailure as exc:
            LOGGER.debug("Host OS probe failed: %s", exc)
    tag = os_tag_for_host(os_id)
    return tag, [f"{OS_TAG_ENV} is not set; guessed {OS_TAG_ENV}={tag}"]


def resolve_version(settings: EnvironmentSettings, version_probe: VersionProbe | None) -> tuple[str, list[str]]:
    if settings.version:
        return settings.version, []
    if version_probe is None:
        return "", []
    try:
        version = str(version_probe() or "").strip()
    except ProbeFailure as exc:
        LOGGER.debug("Version probe failed: %s", exc)
        return "", []
    if not version:
        return "", []
    return version, [f"{VERSION_ENV} is not set; guessed {VERSION_ENV}={version} from the running database"]


def select_candidate_image(image_list_probe: ImageListProbe | None) -> tuple[ImageRef, list[str]]:
    candidates: list[str] = []
    if image_list_probe is not None:
        try:
            candidates = list(image_list_probe())
        except ProbeFailure as exc:
            LOGGER.debug("Image listing failed: %s", exc)

    if len(candidates) == 1 and CANDIDATE_IMAGE_PATTERN.match(candidates[0]):
        image = candidates[0]
        return ImageRef.opaque(image), [f"{IMAGE_ENV} is not set; using the only local image {image}"]

    if not candidates:
        detail = f"no local {IMAGE_REPOSITORY} images found"
    elif len(candidates) > 1:
        detail = f"found {len(candidates)} local {IMAGE_REPOSITORY} images: {', '.join(candidates)}"
    else:
        detail = f"local image {candidates[0]} does not look like a {IMAGE_REPOSITORY} image"
    raise ConfigurationError(
        f"Unable to determine which image to run ({detail}). "
        f"Set {IMAGE_ENV}, or set {VERSION_ENV} (and optionally {OS_TAG_ENV})."
    )


def resolve_image(
    settings: EnvironmentSettings,
    *,
    os_probe: OSProbe | None = None,
    version_probe: VersionProbe | None = None,
    image_list_probe: ImageListProbe | None = None,
) -> tuple[ImageRef, list[str]]:
    if settings.image:
        return ImageRef.opaque(settings.image), []

    os_tag, warnings = resolve_os_tag(settings, os_probe)
    version, version_warnings = resolve_version(settings, version_probe)
    warnings = warnings + version_warnings

    if os_tag and version:
        return ImageRef(os_tag=os_tag, version=version), warnings

    image, image_warnings = select_candidate_image(image_list_probe)
    return image, warnings + image_warnings
