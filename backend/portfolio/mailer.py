"""Outgoing email delivery for the contact form.

Two backends share the `EmailService` interface: plain SMTP and an HTTP
mail API (Brevo-style JSON). `build_email_service` picks one from the
settings. Every backend failure surfaces as `EmailServiceError`.
"""

from __future__ import annotations

import logging
import smtplib
from email.message import EmailMessage
from typing import Callable, Dict, Optional

import requests

from .exceptions import EmailServiceError
from .utils.text import is_configured

logger = logging.getLogger("portfolio.mail")

RequestBuilder = Callable[[str, str, str, str], dict]


class EmailService:
    """Interface for contact-form email delivery."""

    def send_contact_email(self, to_email: str, from_email: str, subject: str, body: str) -> None:
        raise NotImplementedError


class SmtpEmailService(EmailService):
    def __init__(
        self,
        host: Optional[str],
        port: int = 587,
        username: Optional[str] = None,
        password: Optional[str] = None,
        starttls: bool = True,
        timeout: float = 10.0,
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.starttls = starttls
        self.timeout = timeout

    def _build_message(self, to_email: str, from_email: str, subject: str, body: str) -> EmailMessage:
        message = EmailMessage()
        message["From"] = from_email
        message["To"] = to_email
        message["Subject"] = subject
        message.set_content("This message requires an HTML-capable email client.", charset="utf-8")
        message.add_alternative(body, subtype="html", charset="utf-8")
        return message

    def send_contact_email(self, to_email: str, from_email: str, subject: str, body: str) -> None:
        if not is_configured(self.host):
            raise EmailServiceError("SMTP host is not configured. SMTP email service cannot be used.")
        try:
            message = self._build_message(to_email, from_email, subject, body)
        except (ValueError, TypeError) as exc:
            logger.error("Failed to create email message: %s", exc)
            raise EmailServiceError("Failed to create email message") from exc
        try:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as smtp:
                if self.starttls:
                    smtp.starttls()
                if self.username and self.password:
                    smtp.login(self.username, self.password)
                smtp.send_message(message)
        except smtplib.SMTPAuthenticationError as exc:
            logger.error("SMTP email authentication failed: %s", exc)
            raise EmailServiceError(
                "Email authentication failed. Please check your email configuration."
            ) from exc
        except (smtplib.SMTPException, OSError) as exc:
            logger.error("Failed to send email via SMTP: %s", exc)
            raise EmailServiceError("Failed to send email via SMTP") from exc
        logger.info("Contact form email sent successfully via SMTP")


def build_brevo_request(to_email: str, from_email: str, subject: str, body: str) -> dict:
    return {
        "sender": {"email": from_email},
        "to": [{"email": to_email}],
        "subject": subject,
        "htmlContent": body,
    }


REQUEST_BUILDERS: Dict[str, RequestBuilder] = {
    "brevo": build_brevo_request,
}


def normalize_provider(provider: Optional[str]) -> str:
    return "" if provider is None else provider.strip().lower()


def get_request_builder(provider: Optional[str]) -> RequestBuilder:
    """Return the JSON body builder registered for `provider`."""
    builder = REQUEST_BUILDERS.get(normalize_provider(provider))
    if builder is None:
        raise ValueError(f"No HTTP email request builder registered for provider: {provider}")
    return builder


class HttpApiEmailService(EmailService):
    """Send mail through a transactional email HTTP API."""

    def __init__(
        self,
        api_url: Optional[str],
        api_key: Optional[str],
        provider: str = "brevo",
        timeout: float = 10.0,
    ):
        self.api_url = api_url
        self.api_key = api_key
        self.build_request = get_request_builder(provider)
        self.timeout = timeout

    def send_contact_email(self, to_email: str, from_email: str, subject: str, body: str) -> None:
        if not is_configured(self.api_key):
            raise EmailServiceError("HTTP API key is not configured")
        if not is_configured(self.api_url):
            raise EmailServiceError("HTTP API URL is not configured")
        headers = {"Content-Type": "application/json", "Accept": "application/json", "api-key": self.api_key}
        payload = self.build_request(to_email, from_email, subject, body)
        try:
            resp = requests.post(self.api_url, json=payload, headers=headers, timeout=self.timeout)
        except requests.RequestException as exc:
            logger.error("Failed to send email via HTTP API: %s", exc)
            raise EmailServiceError(f"Failed to send email via HTTP API: {exc}") from exc
        if not 200 <= resp.status_code < 300:
            logger.warning("HTTP API returned non-2xx status: %s", resp.status_code)
            raise EmailServiceError(f"Email sending failed with status: {resp.status_code}")
        logger.info("Contact form email sent successfully via HTTP API")


def build_email_service(settings) -> EmailService:
    """Choose the email backend named by `settings.EMAIL_PROVIDER`."""
    if normalize_provider(settings.EMAIL_PROVIDER) == "smtp":
        logger.info("Using SMTP email service")
        return SmtpEmailService(
            host=settings.SMTP_HOST,
            port=settings.SMTP_PORT,
            username=settings.SMTP_USERNAME,
            password=settings.SMTP_PASSWORD,
            starttls=settings.SMTP_STARTTLS,
            timeout=settings.SMTP_TIMEOUT_SECONDS,
        )
    logger.info("Using HTTP API email service")
    return HttpApiEmailService(
        api_url=settings.EMAIL_HTTP_API_URL,
        api_key=settings.EMAIL_HTTP_API_KEY,
        provider=settings.EMAIL_HTTP_PROVIDER,
        timeout=settings.EMAIL_HTTP_TIMEOUT_SECONDS,
    )
