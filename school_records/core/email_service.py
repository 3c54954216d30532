import logging
from abc import ABC, abstractmethod
from functools import lru_cache

import httpx

from school_records.core.config import settings
from school_records.core.exceptions import DeliveryFailed

logger = logging.getLogger(__name__)


class Mailer(ABC):
    @abstractmethod
    async def send(self, to_email: str, subject: str, text: str, html: str | None = None) -> None:
        """Deliver one message. Raises DeliveryFailed."""


class BrevoMailer(Mailer):
    """Transactional mail through the Brevo (Sendinblue) REST API."""

    def __init__(
        self,
        api_key: str,
        from_email: str,
        from_name: str,
        timeout: float,
        api_url: str = "https://api.brevo.com/v3/smtp/email",
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        if not api_key:
            raise RuntimeError("BREVO_API_KEY not configured")
        self.api_key = api_key
        self.from_email = from_email
        self.from_name = from_name
        self.timeout = timeout
        self.api_url = api_url
        self.transport = transport

    async def send(self, to_email: str, subject: str, text: str, html: str | None = None) -> None:
        payload = {
            "sender": {"name": self.from_name, "email": self.from_email},
            "to": [{"email": to_email}],
            "subject": subject,
            "textContent": text,
        }
        if html:
            payload["htmlContent"] = html

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                r = await client.post(
                    self.api_url,
                    headers={"api-key": self.api_key, "Content-Type": "application/json"},
                    json=payload,
                )
        except httpx.HTTPError as e:
            logger.error("Mail transport error for %s: %s", to_email, e)
            raise DeliveryFailed() from e

        if r.status_code >= 400:
            logger.error("Brevo error %s for %s: %s", r.status_code, to_email, r.text)
            raise DeliveryFailed()


class ConsoleMailer(Mailer):
    """Development transport: writes the message to the log instead of sending it."""

    async def send(self, to_email: str, subject: str, text: str, html: str | None = None) -> None:
        logger.info("\n========= MAIL =========\nTO     : %s\nSUBJECT: %s\n%s\n========================", to_email, subject, text)


@lru_cache()
def get_mailer() -> Mailer:
    backend = settings.MAIL_BACKEND.lower()
    if backend == "brevo":
        return BrevoMailer(
            api_key=settings.BREVO_API_KEY or "",
            from_email=settings.EMAIL_FROM,
            from_name=settings.EMAIL_FROM_NAME,
            timeout=settings.MAIL_TIMEOUT_SECONDS,
            api_url=settings.BREVO_API_URL,
        )
    if backend == "console":
        return ConsoleMailer()
    raise RuntimeError(f"Unknown MAIL_BACKEND: {settings.MAIL_BACKEND!r}")


async def send_otp_email(mailer: Mailer, to_email: str, otp: str, valid_minutes: int) -> None:
    subject = "Your verification code"
    text = (
        f"Your OTP code is: {otp}\n"
        f"It is valid for {valid_minutes} minutes. "
        "If you did not request this, you can ignore this email."
    )
    html = f"""
    <div style="font-family:Arial,sans-serif;max-width:560px;margin:auto;padding:24px">
      <h2 style="margin:0 0 12px 0;">Verify your email</h2>
      <p style="margin:0 0 16px 0;color:#444;line-height:1.5;">Your one-time code is</p>
      <p style="font-size:28px;font-weight:700;letter-spacing:6px;margin:0 0 16px 0;">{otp}</p>
      <p style="margin:18px 0 0 0;color:#666;font-size:12px;">
        Valid for {valid_minutes} minutes. If you did not request this, you can ignore this email.
      </p>
    </div>
    """
    await mailer.send(to_email, subject, text, html)
