"""Diagnostic identity for the ambient reporting scope."""

import sentry_sdk

from cap_desktop.config import BuildMode
from cap_desktop.telemetry.schema import DEV_IDENTITY


def configure_scope(mode: BuildMode) -> None:
    """Tag development sessions with the placeholder identity.

    Release builds leave the scope untouched; the application may set a real
    user later. Safe to call whether or not a Sentry client is active.

    Args:
        mode: Resolved build mode
    """
    if mode is BuildMode.DEBUG:
        sentry_sdk.set_user(DEV_IDENTITY.to_sentry())
