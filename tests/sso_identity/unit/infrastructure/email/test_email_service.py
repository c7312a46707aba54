"""Unit tests for the SMTP EmailService."""

from unittest.mock import MagicMock, patch

import pytest

from sso_config import Settings
from sso_identity.infrastructure.email import EmailService

SMTP_PATH = "sso_identity.infrastructure.email.email_service.smtplib"


def _settings(**overrides) -> Settings:
    values = {
        "jwt_secret_key": "email-test-secret-0123456789abcdef",
        "app_name": "TestSSO",
        "smtp_enabled": True,
        "smtp_host": "smtp.example.com",
        "smtp_port": 587,
        "smtp_user": "mailer",
        "smtp_password": "mail-secret",
        "smtp_from_email": "noreply@example.com",
        "smtp_from_name": "TestSSO",
        "smtp_use_tls": True,
        "smtp_starttls": True,
        "smtp_timeout_seconds": 3.0,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)  # type: ignore[call-arg]


class TestSendCode:
    """Tests for verification code emails."""

    def test_disabled_smtp_skips_send(self):
        service = EmailService(_settings(smtp_enabled=False))

        with patch(SMTP_PATH) as smtp:
            service.send_code("1234", "user@example.com")

        smtp.SMTP.assert_not_called()
        smtp.SMTP_SSL.assert_not_called()

    def test_starttls_send(self):
        service = EmailService(_settings())

        with patch(SMTP_PATH) as smtp:
            server = MagicMock()
            smtp.SMTP.return_value.__enter__.return_value = server

            service.send_code("1234", "user@example.com")

        smtp.SMTP.assert_called_once_with("smtp.example.com", 587, timeout=3.0)
        server.starttls.assert_called_once()
        server.login.assert_called_once_with("mailer", "mail-secret")
        server.send_message.assert_called_once()

        message = server.send_message.call_args.args[0]
        assert message["To"] == "user@example.com"
        assert message["From"] == "TestSSO <noreply@example.com>"
        assert "TestSSO" in message["Subject"]
        bodies = [part.get_payload(decode=True).decode() for part in message.get_payload()]
        assert all("1234" in body for body in bodies)

    def test_implicit_tls_send(self):
        service = EmailService(_settings(smtp_port=465, smtp_starttls=False))

        with patch(SMTP_PATH) as smtp:
            server = MagicMock()
            smtp.SMTP_SSL.return_value.__enter__.return_value = server

            service.send_code("1234", "user@example.com")

        smtp.SMTP.assert_not_called()
        assert smtp.SMTP_SSL.call_args.kwargs["timeout"] == 3.0
        server.send_message.assert_called_once()

    def test_no_login_without_user(self):
        service = EmailService(_settings(smtp_user=""))

        with patch(SMTP_PATH) as smtp:
            server = MagicMock()
            smtp.SMTP.return_value.__enter__.return_value = server

            service.send_code("1234", "user@example.com")

        server.login.assert_not_called()

    def test_send_failure_is_raised(self):
        service = EmailService(_settings())

        with patch(SMTP_PATH) as smtp:
            smtp.SMTP.side_effect = OSError("connection refused")

            with pytest.raises(OSError, match="connection refused"):
                service.send_code("1234", "user@example.com")

    def test_missing_host_is_raised(self):
        service = EmailService(_settings(smtp_host=""))

        with pytest.raises(RuntimeError, match="SMTP host not configured"):
            service.send_code("1234", "user@example.com")
