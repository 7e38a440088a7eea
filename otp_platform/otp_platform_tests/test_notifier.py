"""
Tests for the email sender and how the flows react to mail failures.
"""
import smtplib
from unittest.mock import MagicMock

import pytest

from otp_platform.otp_platform.auth_service import notifier as notifier_module
from otp_platform.otp_platform.auth_service.config import Settings
from otp_platform.otp_platform.auth_service.main import app
from otp_platform.otp_platform.auth_service.notifier import EmailSender, NotificationError, get_notifier


@pytest.fixture
def smtp_mock(monkeypatch):
    server = MagicMock()
    factory = MagicMock()
    factory.return_value.__enter__.return_value = server
    monkeypatch.setattr(notifier_module.smtplib, "SMTP_SSL", factory)
    return factory, server


def configured_settings(**overrides):
    values = {"EMAIL_USER": "sender@example.com", "EMAIL_PASS": "app-password", "SMTP_TIMEOUT_SECONDS": 3.0}
    values.update(overrides)
    return Settings(**values)


def test_unconfigured_sender_logs_instead_of_sending(smtp_mock, caplog):
    factory, _ = smtp_mock
    sender = EmailSender(Settings(EMAIL_USER="", EMAIL_PASS=""))

    with caplog.at_level("INFO"):
        sender.send("user@example.com", "Your Login OTP", "Your OTP is: 123456")

    factory.assert_not_called()
    assert "Email not configured" in caplog.text
    assert "Your OTP is: 123456" in caplog.text


def test_configured_sender_uses_smtp_with_timeout(smtp_mock):
    factory, server = smtp_mock
    sender = EmailSender(configured_settings())

    sender.send("user@example.com", "Your Login OTP", "Your OTP is: 123456")

    args, kwargs = factory.call_args
    assert args == ("smtp.gmail.com", 465)
    assert kwargs["timeout"] == 3.0
    server.login.assert_called_once_with("sender@example.com", "app-password")
    from_addr, to_addrs, raw = server.sendmail.call_args[0]
    assert from_addr == "sender@example.com"
    assert to_addrs == ["user@example.com"]
    assert "Subject: Your Login OTP" in raw
    assert "Your OTP is: 123456" in raw


@pytest.mark.parametrize("error", [
    smtplib.SMTPAuthenticationError(535, b"bad credentials"),
    TimeoutError("timed out"),
    ConnectionRefusedError("refused"),
])
def test_smtp_failures_raise_notification_error(smtp_mock, error):
    _, server = smtp_mock
    server.sendmail.side_effect = error

    with pytest.raises(NotificationError):
        EmailSender(configured_settings()).send("user@example.com", "s", "b")


class FailingSender:
    def send(self, to_email, subject, text_body):
        raise NotificationError("relay down")


def test_login_maps_mail_failure_to_upstream_error(client, ensure_user):
    user = ensure_user()
    app.dependency_overrides[get_notifier] = lambda: FailingSender()

    resp = client.post("/api/auth/login", json={"email": user["email"], "password": user["password"]})
    assert resp.status_code == 500
    assert resp.json() == {"error": "Failed to send OTP"}
    assert "relay down" not in resp.text


def test_signup_maps_mail_failure_to_upstream_error(client):
    app.dependency_overrides[get_notifier] = lambda: FailingSender()

    resp = client.post("/api/auth/signup", json={"email": "new@example.com", "password": "secret12", "name": "N"})
    assert resp.status_code == 500
