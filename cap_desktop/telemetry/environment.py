"""Decide whether remote error reporting is enabled."""

import os
from collections.abc import Mapping

SENTRY_URL_ENV = "CAP_DESKTOP_SENTRY_URL"


def resolve_endpoint(
    environ: Mapping[str, str] | None = None, var: str = SENTRY_URL_ENV
) -> str | None:
    """Read the Sentry endpoint from the environment.

    Args:
        environ: Environment mapping (default: os.environ)
        var: Name of the variable holding the endpoint URL

    Returns:
        The endpoint URL, or None when the variable is absent or blank
        (reporting disabled)
    """
    env = os.environ if environ is None else environ
    value = env.get(var, "").strip()
    return value or None
