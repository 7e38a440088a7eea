"""
Email sender for one-time passcodes.

Delivers plain-text messages over SMTP with implicit TLS. Without
credentials (``EMAIL_USER``/``EMAIL_PASS``) the sender runs in
development mode and logs the message instead of delivering it.
"""
from email.mime.text import MIMEText
import logging
import smtplib
import ssl

from .config import Settings, settings

logger = logging.getLogger(__name__)


class NotificationError(Exception):
    """Raised when the mail relay rejects, fails or times out."""


class EmailSender:
    def __init__(self, config: Settings):
        self._settings = config

    @property
    def is_configured(self) -> bool:
        return bool(self._settings.EMAIL_USER and self._settings.EMAIL_PASS)

    def _create_message(self, to_email: str, subject: str, text_body: str) -> MIMEText:
        msg = MIMEText(text_body, "plain")
        msg["Subject"] = subject
        msg["From"] = self._settings.EMAIL_USER
        msg["To"] = to_email
        return msg

    def send(self, to_email: str, subject: str, text_body: str) -> None:
        if not self.is_configured:
            logger.warning("Email not configured - skipping send to %s", to_email)
            logger.info("[DEV] Email to %s: %s - %s", to_email, subject, text_body)
            return

        message = self._create_message(to_email, subject, text_body)
        try:
            context = ssl.create_default_context()
            with smtplib.SMTP_SSL(
                self._settings.SMTP_HOST,
                self._settings.SMTP_PORT,
                context=context,
                timeout=self._settings.SMTP_TIMEOUT_SECONDS,
            ) as server:
                server.login(self._settings.EMAIL_USER, self._settings.EMAIL_PASS)
                server.sendmail(self._settings.EMAIL_USER, [to_email], message.as_string())
        except (smtplib.SMTPException, OSError) as e:
            # socket timeouts are OSError subclasses
            logger.error("Failed to send email to %s: %s", to_email, e)
            raise NotificationError(str(e)) from e

        logger.info("Email sent to %s: %s", to_email, subject)


def get_notifier() -> EmailSender:
    return EmailSender(settings)
