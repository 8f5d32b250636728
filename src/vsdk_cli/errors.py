from __future__ import annotations

import click


class ConfigurationError(click.ClickException):
    """The image or another required setting cannot be resolved."""


class ProbeFailure(Exception):
    """An external probe produced nothing usable. Callers fall back."""
