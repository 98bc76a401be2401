"""Outgoing email.

Plain-text mail over SMTP when `SMTP_HOST` is configured; otherwise the
message is only logged. Sending is fire-and-forget: failures are logged and
reported as False, never raised.
"""

import smtplib
from email.mime.text import MIMEText

from core.config import EMAIL_FROM, SMTP_HOST, SMTP_PASSWORD, SMTP_PORT, SMTP_USER
from core.logger import get_logger

logger = get_logger("services.email_service")


class EmailSender:
    """Sends plain-text email through an SMTP relay."""

    def __init__(
        self,
        host: str = SMTP_HOST,
        port: int = SMTP_PORT,
        user: str = SMTP_USER,
        password: str = SMTP_PASSWORD,
        from_email: str = EMAIL_FROM,
    ):
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.from_email = from_email

    @property
    def enabled(self) -> bool:
        return bool(self.host)

    def send(self, to: str, subject: str, body: str) -> bool:
        """Deliver one message; returns whether it was handed to the relay."""
        if not self.enabled:
            logger.info("SMTP not configured; email to %s not sent: %s", to, subject)
            return False

        msg = MIMEText(body, "plain")
        msg["Subject"] = subject
        msg["From"] = self.from_email
        msg["To"] = to
        try:
            with smtplib.SMTP(self.host, self.port, timeout=10) as server:
                server.starttls()
                if self.user:
                    server.login(self.user, self.password)
                server.send_message(msg)
        except (smtplib.SMTPException, OSError):
            logger.exception("Failed to send email to %s", to)
            return False
        logger.info("Email sent to %s: %s", to, subject)
        return True


email_sender = EmailSender()
