"""
Email delivery for verification codes.

Three interchangeable backends share one method, send_verification_code():
- ResendEmailClient: Resend transactional email HTTP API
- SmtpEmailClient: any SMTP relay
- ConsoleEmailClient: logs the code when no provider is configured

Delivery failures raise EmailDeliveryError and are never swallowed; the
caller must not report "code sent" when it wasn't.
"""

import json
import logging
import smtplib
import ssl
from email.message import EmailMessage

import requests
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

RESEND_API_URL = "https://api.resend.com/emails"
DEFAULT_SENDER = "onboarding@resend.dev"
SUBJECT = "Your Verification Code"


class EmailDeliveryError(Exception):
    """Raised when a verification email could not be handed to the provider."""


class EmailConfig(BaseModel):
    """Delivery backend selection. Resend wins over SMTP; neither means console."""

    resend_api_key: str | None = None
    smtp_host: str | None = None
    smtp_port: int = Field(default=587, ge=1, le=65535)
    smtp_user: str | None = None
    smtp_password: str | None = None
    mail_from: str | None = Field(
        default=None,
        description="Sender address; defaults per backend when unset",
    )

    @property
    def smtp_configured(self) -> bool:
        return bool(self.smtp_host and self.smtp_user and self.smtp_password)


def render_verification_email(code: str, expiry_minutes: int) -> tuple[str, str]:
    """Return (plain text, html) bodies for a verification code email."""
    text = (
        f"Your verification code is: {code}\n\n"
        f"This code will expire in {expiry_minutes} minutes.\n"
        "If you didn't request this code, please ignore this email."
    )
    html = f"""
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
  <h1 style="color: #333;">Email Verification</h1>
  <p>Your verification code is:</p>
  <div style="background-color: #f4f4f4; padding: 20px; text-align: center; font-size: 32px; font-weight: bold; letter-spacing: 8px; margin: 20px 0;">
    {code}
  </div>
  <p style="color: #666;">This code will expire in {expiry_minutes} minutes.</p>
  <p style="color: #666;">If you didn't request this code, please ignore this email.</p>
</div>
"""
    return text, html


class ResendEmailClient:
    """Send emails through the Resend HTTP API."""

    def __init__(self, api_key: str, mail_from: str | None = None, api_url: str = RESEND_API_URL):
        """
        Args:
            api_key: Resend API key (Bearer token)
            mail_from: Verified sender address
            api_url: Override for tests or a regional endpoint

        Raises:
            ValueError: If api_key is empty
        """
        if not api_key:
            raise ValueError("api_key is required")

        self.api_key = api_key
        self.mail_from = mail_from or DEFAULT_SENDER
        self.api_url = api_url

    def send_verification_code(self, email: str, code: str, expiry_minutes: int) -> None:
        """
        Deliver the code to email.

        Raises:
            EmailDeliveryError: On transport failure, non-2xx status or bad response
        """
        text, html = render_verification_email(code, expiry_minutes)
        payload = {
            "from": self.mail_from,
            "to": [email],
            "subject": SUBJECT,
            "html": html,
            "text": text,
        }
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

        try:
            response = requests.post(self.api_url, json=payload, headers=headers, timeout=10)
        except requests.exceptions.RequestException as e:
            logger.error(f"Resend connection failed: {e}")
            raise EmailDeliveryError(f"Connection failed: {e}")

        try:
            response_data = response.json()
        except (json.JSONDecodeError, ValueError):
            logger.error(f"Resend returned invalid JSON: {response.text}")
            raise EmailDeliveryError("Invalid response from email provider")

        if not 200 <= response.status_code < 300:
            error_msg = response_data.get("message", "Unknown error")
            logger.error(f"Resend error ({response.status_code}): {error_msg}")
            raise EmailDeliveryError(f"Provider error: {error_msg}")

        logger.info(f"Verification email sent to {email} via Resend (id={response_data.get('id')})")


class SmtpEmailClient:
    """Send emails through an SMTP relay."""

    def __init__(
        self,
        host: str,
        port: int,
        user: str,
        password: str,
        mail_from: str | None = None,
        timeout: int = 10,
    ):
        if not host:
            raise ValueError("host is required")
        if not user or not password:
            raise ValueError("user and password are required")

        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.mail_from = mail_from or user
        self.timeout = timeout

    def send_verification_code(self, email: str, code: str, expiry_minutes: int) -> None:
        """
        Deliver the code to email.

        Port 465 uses implicit TLS, anything else upgrades with STARTTLS.

        Raises:
            EmailDeliveryError: On any SMTP or socket failure
        """
        text, html = render_verification_email(code, expiry_minutes)

        message = EmailMessage()
        message["Subject"] = SUBJECT
        message["From"] = self.mail_from
        message["To"] = email
        message.set_content(text)
        message.add_alternative(html, subtype="html")

        context = ssl.create_default_context()
        try:
            if self.port == 465:
                with smtplib.SMTP_SSL(self.host, self.port, context=context, timeout=self.timeout) as server:
                    server.login(self.user, self.password)
                    server.send_message(message)
            else:
                with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
                    server.starttls(context=context)
                    server.login(self.user, self.password)
                    server.send_message(message)
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"SMTP delivery to {email} failed: {e}")
            raise EmailDeliveryError(f"SMTP delivery failed: {e}")

        logger.info(f"Verification email sent to {email} via SMTP")


class ConsoleEmailClient:
    """Development fallback: log the code instead of sending it."""

    def send_verification_code(self, email: str, code: str, expiry_minutes: int) -> None:
        logger.info(f"Verification code for {email}: {code}")
        logger.warning("No email service configured. Verification code logged above.")


EmailClient = ResendEmailClient | SmtpEmailClient | ConsoleEmailClient


def create_email_client(config: EmailConfig) -> EmailClient:
    """Pick the delivery backend from config: Resend, then SMTP, then console."""
    if config.resend_api_key:
        logger.info("Email delivery: Resend")
        return ResendEmailClient(config.resend_api_key, config.mail_from)

    if config.smtp_configured:
        logger.info(f"Email delivery: SMTP ({config.smtp_host}:{config.smtp_port})")
        return SmtpEmailClient(
            host=config.smtp_host,
            port=config.smtp_port,
            user=config.smtp_user,
            password=config.smtp_password,
            mail_from=config.mail_from,
        )

    logger.warning("Email delivery: console (no Resend or SMTP settings)")
    return ConsoleEmailClient()
