"""Tests for the telemetry module.

Tests cover:
- Endpoint resolution from the environment
- Client initialization, disabled path and transport failures
- Guard lifetime
- The before_send event filter
- Scope identity in debug and release modes
"""

import logging
from unittest.mock import MagicMock, patch

import pytest
import sentry_sdk

from cap_desktop.config import BuildMode, TelemetrySettings
from cap_desktop.errors import TelemetryInitError
from cap_desktop.telemetry import (
    DEV_IDENTITY,
    SENTRY_URL_ENV,
    ClientGuard,
    EventSummary,
    Identity,
    TelemetryConfig,
    configure_scope,
    filter_event,
    init_telemetry,
    resolve_endpoint,
)

ENDPOINT = "https://key@example.test/1"
CLIENT_LOGGER = "cap_desktop.telemetry.client"


@pytest.fixture
def mock_sentry():
    """Replace sentry_sdk in the client module."""
    with patch("cap_desktop.telemetry.client.sentry_sdk") as sentry:
        yield sentry


def client_warnings(caplog) -> list[logging.LogRecord]:
    return [
        r for r in caplog.records if r.name == CLIENT_LOGGER and r.levelno == logging.WARNING
    ]


class TestResolveEndpoint:
    """Tests for reading the Sentry endpoint."""

    def test_present(self):
        """Test a set variable is returned as the endpoint."""
        assert resolve_endpoint({SENTRY_URL_ENV: ENDPOINT}) == ENDPOINT

    @pytest.mark.parametrize("environ", [{}, {SENTRY_URL_ENV: ""}, {SENTRY_URL_ENV: "   "}])
    def test_absent_or_empty(self, environ):
        """Test absent, empty and blank values disable reporting."""
        assert resolve_endpoint(environ) is None

    def test_strips_whitespace(self):
        """Test surrounding whitespace is ignored."""
        assert resolve_endpoint({SENTRY_URL_ENV: f"  {ENDPOINT}\n"}) == ENDPOINT

    def test_custom_variable(self):
        """Test reading a different variable name."""
        assert resolve_endpoint({"OTHER_URL": ENDPOINT}, var="OTHER_URL") == ENDPOINT

    def test_defaults_to_process_environment(self, monkeypatch):
        """Test os.environ is used when no mapping is given."""
        monkeypatch.setenv(SENTRY_URL_ENV, ENDPOINT)
        assert resolve_endpoint() == ENDPOINT


class TestTelemetryConfig:
    """Tests for Sentry client options."""

    def test_debug_options(self):
        """Test options derived for a debug build."""
        config = TelemetryConfig.create(ENDPOINT, BuildMode.DEBUG, TelemetrySettings())

        assert config.endpoint == ENDPOINT
        assert config.release.startswith("cap-desktop@")
        assert config.debug is True
        assert config.environment == "development"
        assert config.before_send.keywords == {"debug": True}

    def test_release_options(self):
        """Test options derived for a release build."""
        settings = TelemetrySettings(shutdown_timeout=5.0)
        config = TelemetryConfig.create(ENDPOINT, BuildMode.RELEASE, settings)

        assert config.debug is False
        assert config.environment == "production"
        assert config.shutdown_timeout == 5.0
        assert config.before_send.keywords == {"debug": False}

    def test_explicit_environment(self):
        """Test configured environment tag wins over the mode default."""
        settings = TelemetrySettings(environment="staging")
        config = TelemetryConfig.create(ENDPOINT, BuildMode.DEBUG, settings)
        assert config.environment == "staging"

    def test_init_kwargs(self):
        """Test the mapping handed to sentry_sdk.init."""
        config = TelemetryConfig.create(ENDPOINT, BuildMode.RELEASE, TelemetrySettings())
        kwargs = config.to_init_kwargs()

        assert kwargs["dsn"] == ENDPOINT
        assert kwargs["release"] == config.release
        assert kwargs["debug"] is False
        assert kwargs["before_send"] is config.before_send

    def test_frozen(self):
        """Test the config cannot be mutated after construction."""
        config = TelemetryConfig.create(ENDPOINT, BuildMode.RELEASE, TelemetrySettings())
        with pytest.raises(AttributeError):
            config.endpoint = "https://other.test"


class TestInitTelemetry:
    """Tests for client initialization."""

    @pytest.mark.parametrize("endpoint", [None, ""])
    def test_disabled_without_endpoint(self, endpoint, mock_sentry, caplog):
        """Test no guard and exactly one warning when the endpoint is missing."""
        guard = init_telemetry(endpoint, BuildMode.RELEASE)

        assert guard is None
        assert len(client_warnings(caplog)) == 1
        assert "skipping Sentry initialization" in client_warnings(caplog)[0].getMessage()
        mock_sentry.init.assert_not_called()

    def test_enabled_with_endpoint(self, mock_sentry, caplog):
        """Test a guard is returned and nothing is logged at warning level."""
        guard = init_telemetry(ENDPOINT, BuildMode.RELEASE)

        assert isinstance(guard, ClientGuard)
        assert guard.client is mock_sentry.get_client.return_value
        assert not guard.closed
        assert client_warnings(caplog) == []

        kwargs = mock_sentry.init.call_args.kwargs
        assert kwargs["dsn"] == ENDPOINT
        assert kwargs["debug"] is False

    def test_debug_mode_passed_to_client(self, mock_sentry):
        """Test Sentry's own debug output follows the build mode."""
        init_telemetry(ENDPOINT, BuildMode.DEBUG)
        assert mock_sentry.init.call_args.kwargs["debug"] is True

    def test_transport_failure_aborts_by_default(self, mock_sentry):
        """Test a client construction failure is fatal."""
        mock_sentry.init.side_effect = ValueError("Unsupported scheme 'ftp'")

        with pytest.raises(TelemetryInitError) as exc_info:
            init_telemetry("ftp://bad", BuildMode.RELEASE)

        assert exc_info.value.detail == "Unsupported scheme 'ftp'"
        assert isinstance(exc_info.value.__cause__, ValueError)

    def test_transport_failure_degrades_when_configured(self, mock_sentry, caplog):
        """Test the degrade policy logs and continues without reporting."""
        mock_sentry.init.side_effect = OSError("no route")
        settings = TelemetrySettings(on_transport_error="degrade")

        guard = init_telemetry(ENDPOINT, BuildMode.RELEASE, settings)

        assert guard is None
        assert len(client_warnings(caplog)) == 1
        assert client_warnings(caplog)[0].exc_info is not None


class TestInitTelemetryRealClient:
    """Tests against sentry-sdk's own DSN validation (no mocks)."""

    def test_dsn_without_public_key_aborts(self):
        """Test a URL sentry-sdk cannot use as a DSN is fatal by default."""
        with pytest.raises(TelemetryInitError) as exc_info:
            init_telemetry("https://example.test/ingest", BuildMode.RELEASE, TelemetrySettings())

        assert "Missing public key" in exc_info.value.detail

    def test_non_url_aborts(self):
        """Test a value that is not a URL is fatal by default."""
        with pytest.raises(TelemetryInitError) as exc_info:
            init_telemetry("not a url", BuildMode.RELEASE, TelemetrySettings())

        assert "Unsupported scheme" in exc_info.value.detail

    def test_dsn_without_public_key_degrades(self, caplog):
        """Test the degrade policy turns an unusable DSN into no reporting."""
        settings = TelemetrySettings(on_transport_error="degrade")

        guard = init_telemetry("https://example.test/ingest", BuildMode.RELEASE, settings)

        assert guard is None
        assert len(client_warnings(caplog)) == 1


class TestClientGuard:
    """Tests for the guard that owns the Sentry client."""

    def test_close_flushes_with_timeout(self):
        """Test closing hands the shutdown timeout to the client."""
        client = MagicMock()
        guard = ClientGuard(client, shutdown_timeout=3.0)

        guard.close()

        client.close.assert_called_once_with(timeout=3.0)
        assert guard.closed

    def test_close_is_idempotent(self):
        """Test closing twice only shuts the client down once."""
        client = MagicMock()
        guard = ClientGuard(client, shutdown_timeout=1.0)

        guard.close()
        guard.close()

        client.close.assert_called_once()

    def test_context_manager_closes_on_exception(self):
        """Test the guard is closed when an exception escapes the block."""
        client = MagicMock()

        with pytest.raises(RuntimeError):
            with ClientGuard(client, shutdown_timeout=1.0) as guard:
                raise RuntimeError("boom")

        assert guard.closed
        client.close.assert_called_once()


class TestFilterEvent:
    """Tests for the before_send hook."""

    @pytest.mark.parametrize("debug", [True, False])
    @pytest.mark.parametrize(
        "event",
        [
            {"level": "error", "message": None},
            {"level": "warning", "message": "disk almost full"},
            {"level": "fatal", "message": "crash", "user": {"username": "_DEV_"}},
            {},
        ],
    )
    def test_returns_event_unchanged(self, event, debug):
        """Test the event passes through untouched in either mode."""
        before = dict(event)
        result = filter_event(event, {}, debug=debug)

        assert result is event
        assert result == before

    def test_release_is_silent(self, capsys):
        """Test nothing is printed in release mode."""
        filter_event({"level": "error", "message": "boom"}, {}, debug=False)
        assert capsys.readouterr().out == ""

    def test_debug_echoes_event(self, capsys):
        """Test level, message and user are printed in debug mode."""
        event = {"level": "error", "message": "boom", "user": {"username": "_DEV_"}}
        filter_event(event, {}, debug=True)

        out = capsys.readouterr().out
        assert "Sentry captured error: boom" in out
        assert "Sentry user: {'username': '_DEV_'}" in out

    def test_debug_missing_message_placeholder(self, capsys):
        """Test a missing message is echoed as 'No message'."""
        event = {"level": "error", "message": None}
        result = filter_event(event, {}, debug=True)

        assert result["message"] is None
        out = capsys.readouterr().out
        assert "Sentry captured error: No message" in out
        assert "Sentry user: None" in out

    def test_hint_is_optional(self):
        """Test the filter can be called without a hint."""
        event = {"level": "info"}
        assert filter_event(event) is event


class TestEventSummary:
    """Tests for the event summary view."""

    def test_from_message(self):
        """Test message is read from the top-level field."""
        summary = EventSummary.from_event({"level": "warning", "message": "hello"})
        assert summary.level == "warning"
        assert summary.message == "hello"
        assert summary.display_message == "hello"

    def test_from_logentry(self):
        """Test logging-integration events use the logentry message."""
        event = {"level": "error", "logentry": {"message": "failed %s", "params": ["x"]}}
        assert EventSummary.from_event(event).message == "failed %s"

    def test_defaults(self):
        """Test an empty event gets error level and the placeholder message."""
        summary = EventSummary.from_event({})
        assert summary.level == "error"
        assert summary.message is None
        assert summary.user is None
        assert summary.display_message == "No message"


class TestScope:
    """Tests for scope identity."""

    def test_dev_identity(self):
        """Test the placeholder identity only carries a username."""
        assert DEV_IDENTITY.to_sentry() == {"username": "_DEV_"}

    def test_identity_drops_unset_fields(self):
        """Test unset identity fields are not sent."""
        identity = Identity(id="42", email="dev@example.test")
        assert identity.to_sentry() == {"id": "42", "email": "dev@example.test"}

    def test_debug_sets_dev_user(self):
        """Test debug mode tags the scope with the placeholder identity."""
        with patch("cap_desktop.telemetry.scope.sentry_sdk") as sentry:
            configure_scope(BuildMode.DEBUG)
        sentry.set_user.assert_called_once_with({"username": "_DEV_"})

    def test_release_leaves_scope_untouched(self):
        """Test release mode does not touch the scope."""
        with patch("cap_desktop.telemetry.scope.sentry_sdk") as sentry:
            configure_scope(BuildMode.RELEASE)
        sentry.set_user.assert_not_called()

    def test_without_active_client(self):
        """Test configuring the scope never fails when Sentry is not initialized."""
        try:
            configure_scope(BuildMode.DEBUG)
        finally:
            sentry_sdk.set_user(None)
