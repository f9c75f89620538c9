"""Fatal bootstrap errors.

Anything raised from here aborts startup. Missing telemetry configuration is
not an error and never shows up in this hierarchy.
"""


class BootstrapError(Exception):
    """Base class for errors that stop the process before the app runs."""

    def __init__(self, message: str, detail: str | None = None):
        super().__init__(message)
        self.detail = detail


class TelemetryInitError(BootstrapError):
    """The Sentry client could not be constructed for a configured endpoint."""


class RuntimeBuildError(BootstrapError):
    """The async runtime (event loop or worker pool) could not be created."""


class EntryPointError(BootstrapError):
    """The application entry task could not be loaded."""
