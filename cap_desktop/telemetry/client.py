"""Sentry client construction and the guard that owns it.

The guard returned by :func:`init_telemetry` has to stay open until the
application's entry task has finished. Closing it earlier drops every report
still sitting in the transport queue.
"""

import logging
from dataclasses import dataclass
from functools import partial
from types import TracebackType
from typing import Any, Callable

import sentry_sdk

from cap_desktop.config import BuildMode, TelemetrySettings
from cap_desktop.errors import TelemetryInitError
from cap_desktop.telemetry.events import Event, Hint, filter_event
from cap_desktop.version import release_name

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TelemetryConfig:
    """Options handed to ``sentry_sdk.init``. Built once, never mutated."""

    endpoint: str
    release: str
    debug: bool
    before_send: Callable[[Event, Hint], Event | None]
    environment: str
    shutdown_timeout: float

    @classmethod
    def create(
        cls, endpoint: str, mode: BuildMode, settings: TelemetrySettings
    ) -> "TelemetryConfig":
        """Derive client options from the endpoint, build mode and settings."""
        debug = mode is BuildMode.DEBUG
        return cls(
            endpoint=endpoint,
            release=release_name(),
            debug=debug,
            before_send=partial(filter_event, debug=debug),
            environment=settings.environment or ("development" if debug else "production"),
            shutdown_timeout=settings.shutdown_timeout,
        )

    def to_init_kwargs(self) -> dict[str, Any]:
        """Keyword arguments for ``sentry_sdk.init``."""
        return {
            "dsn": self.endpoint,
            "release": self.release,
            "debug": self.debug,
            "environment": self.environment,
            "before_send": self.before_send,
            "shutdown_timeout": self.shutdown_timeout,
        }


class ClientGuard:
    """Owns the active Sentry client for the lifetime of the process.

    Closing the guard flushes queued events (bounded by the shutdown timeout)
    and shuts the client down. ``close`` is idempotent; the guard is also a
    context manager that closes on exit, including when an exception escapes.
    """

    def __init__(self, client: Any, shutdown_timeout: float):
        self._client = client
        self._shutdown_timeout = shutdown_timeout
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def client(self) -> Any:
        return self._client

    def close(self) -> None:
        """Flush pending reports and shut the client down."""
        if self._closed:
            return
        self._closed = True
        logger.debug(f"Flushing Sentry client (timeout={self._shutdown_timeout}s)")
        self._client.close(timeout=self._shutdown_timeout)

    def __enter__(self) -> "ClientGuard":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


def init_telemetry(
    endpoint: str | None,
    mode: BuildMode,
    settings: TelemetrySettings | None = None,
) -> ClientGuard | None:
    """Start remote error reporting if an endpoint is configured.

    Args:
        endpoint: Sentry DSN from the environment, or None
        mode: Resolved build mode (controls Sentry debug output and console echo)
        settings: Telemetry settings (default: TelemetrySettings())

    Returns:
        A guard owning the client, or None when reporting is disabled

    Raises:
        TelemetryInitError: If the client cannot be built and the
            ``on_transport_error`` policy is "abort"
    """
    if not endpoint:
        logger.warning(
            "Sentry URL not found in environment variables, skipping Sentry initialization"
        )
        return None

    settings = settings or TelemetrySettings()
    config = TelemetryConfig.create(endpoint, mode, settings)

    try:
        sentry_sdk.init(**config.to_init_kwargs())
    except (ValueError, OSError) as e:
        # BadDsn is a ValueError
        if settings.on_transport_error == "degrade":
            logger.warning(
                "Sentry client could not be initialized, continuing without reporting",
                exc_info=True,
            )
            return None
        raise TelemetryInitError("Failed to initialize Sentry client", detail=str(e)) from e

    logger.debug(f"Sentry initialized (release={config.release}, environment={config.environment})")
    return ClientGuard(sentry_sdk.get_client(), config.shutdown_timeout)
