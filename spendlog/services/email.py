"""Outgoing e-mail: plain-text transactional messages over SMTP."""

from __future__ import annotations

import logging
import smtplib
import ssl
from email.message import EmailMessage
from typing import TYPE_CHECKING

from spendlog.core.errors import DeliveryError
from spendlog.core.tokens import redact_token_links

if TYPE_CHECKING:
    from spendlog.core.config import Settings

logger = logging.getLogger(__name__)


def redact_email(email: str) -> str:
    """Redact an e-mail address for logging to avoid PII leakage."""
    if "@" not in email:
        return "redacted"
    local, domain = email.split("@", 1)
    return f"{local[:2]}***@{domain}"


def build_reset_email(reset_url: str, lifetime_minutes: int) -> tuple[str, str]:
    """Subject and body for a password reset link."""
    subject = f"Your password reset token (valid for {lifetime_minutes} min)"
    body = (
        "Forgot your password? Submit a request with your new password and "
        f"password confirmation to:\n\n{reset_url}\n\n"
        "If you didn't forget your password, please ignore this email."
    )
    return subject, body


def build_verification_email(verify_url: str, lifetime_minutes: int) -> tuple[str, str]:
    """Subject and body for an e-mail verification link."""
    subject = f"Verify your email address (valid for {lifetime_minutes} min)"
    body = (
        "Please confirm this email address for your SpendLog account by "
        f"submitting a request to:\n\n{verify_url}\n\n"
        "If you didn't ask for this, you can ignore this email."
    )
    return subject, body


class EmailSender:
    """Delivers messages through the configured SMTP server. Raises DeliveryError on any failure."""

    def __init__(self, settings: Settings) -> None:
        self.host = settings.SMTP_HOST
        self.port = settings.SMTP_PORT
        self.user = settings.SMTP_USER
        self.password = (
            settings.SMTP_PASSWORD.get_secret_value() if settings.SMTP_PASSWORD else None
        )
        self.use_tls = settings.SMTP_USE_TLS
        self.timeout = settings.SMTP_TIMEOUT_SEC
        self.from_email = settings.EMAIL_FROM
        self.app_env = settings.APP_ENV

    def send(self, to: str, subject: str, body_text: str) -> None:
        if not self.host:
            if self.app_env == "dev":
                # Dev mode: log the message instead of sending it, minus the raw token
                logger.info(
                    "SMTP_HOST not set; dev-mode email to=%s subject=%s body=%s",
                    redact_email(to),
                    subject,
                    redact_token_links(body_text),
                )
                return
            raise DeliveryError("Email delivery is not configured.")

        msg = EmailMessage()
        msg["Subject"] = subject
        msg["From"] = self.from_email
        msg["To"] = to
        msg.set_content(body_text)

        try:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
                if self.use_tls:
                    server.starttls(context=ssl.create_default_context())
                if self.user and self.password:
                    server.login(self.user, self.password)
                server.send_message(msg)
        except (smtplib.SMTPException, OSError) as e:
            logger.error(
                "Email delivery failed to=%s subject=%s error=%s",
                redact_email(to),
                subject,
                type(e).__name__,
            )
            raise DeliveryError(
                "There was an error sending the email. Try again later!"
            ) from e
        logger.info("Email sent to=%s subject=%s", redact_email(to), subject)
