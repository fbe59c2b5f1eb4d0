"""Tests for Logfire setup and configuration."""

from unittest.mock import Mock, patch

from pydantic import SecretStr

from clipforge.infrastructure.config import AppConfig, LogfireConfig, Settings
from clipforge.infrastructure.observability.logfire_setup import configure_logfire


class TestLogfireSetup:
    """Test Logfire configuration and setup."""

    @patch("clipforge.infrastructure.observability.logfire_setup.logfire")
    def test_configure_logfire_disabled(self, mock_logfire):
        """Test Logfire is left alone when disabled."""
        assert configure_logfire(Mock(), Settings(logfire=LogfireConfig(enabled=False))) is False
        mock_logfire.configure.assert_not_called()
        mock_logfire.instrument_fastapi.assert_not_called()

    @patch("clipforge.infrastructure.observability.logfire_setup.logfire")
    def test_configure_logfire_enabled(self, mock_logfire):
        """Test Logfire configuration when enabled."""
        settings = Settings(
            app=AppConfig(version="1.2.3", environment="test"),
            logfire=LogfireConfig(
                enabled=True, token=SecretStr("secret"), service_name="clipforge-test"
            ),
        )
        mock_app = Mock()

        assert configure_logfire(mock_app, settings) is True

        mock_logfire.configure.assert_called_once_with(
            service_name="clipforge-test",
            service_version="1.2.3",
            environment="test",
            console=False,
            send_to_logfire="if-token-present",
            token="secret",
        )
        mock_logfire.instrument_fastapi.assert_called_once_with(mock_app)

    @patch("clipforge.infrastructure.observability.logfire_setup.logfire")
    def test_configure_logfire_without_app(self, mock_logfire):
        """Test configuration without an application to instrument."""
        settings = Settings(logfire=LogfireConfig(enabled=True, console_enabled=True))

        configure_logfire(settings=settings)

        assert mock_logfire.configure.call_args.kwargs["console"] is None
        assert "token" not in mock_logfire.configure.call_args.kwargs
        mock_logfire.instrument_fastapi.assert_not_called()
