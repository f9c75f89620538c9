"""Remote error reporting (Sentry) for the Cap desktop process.

Reporting is opt-in through the CAP_DESKTOP_SENTRY_URL environment variable.
"""

from cap_desktop.telemetry.client import ClientGuard, TelemetryConfig, init_telemetry
from cap_desktop.telemetry.environment import SENTRY_URL_ENV, resolve_endpoint
from cap_desktop.telemetry.events import filter_event
from cap_desktop.telemetry.schema import DEV_IDENTITY, EventSummary, Identity
from cap_desktop.telemetry.scope import configure_scope

__all__ = [
    "ClientGuard",
    "TelemetryConfig",
    "init_telemetry",
    "SENTRY_URL_ENV",
    "resolve_endpoint",
    "filter_event",
    "DEV_IDENTITY",
    "EventSummary",
    "Identity",
    "configure_scope",
]
