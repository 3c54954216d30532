import logging
from datetime import timedelta

from school_records.core.config import settings
from school_records.core.email_service import Mailer, send_otp_email
from school_records.core.exceptions import DeliveryFailed, InvalidOrExpiredOTP
from school_records.core.otp_store import OneTimePasscode, OtpStore, generate_otp

logger = logging.getLogger(__name__)


def _normalize_email(email: str) -> str:
    return email.strip().lower()


async def request_code(
    store: OtpStore,
    mailer: Mailer,
    email: str,
    expire_minutes: int | None = None,
) -> OneTimePasscode:
    """
    Issue a fresh passcode for ``email`` and mail it.

    The passcode is stored before delivery. If delivery fails it is removed
    again (unless a newer request already replaced it) and DeliveryFailed
    propagates, so an undelivered code is never left usable.
    """
    email = _normalize_email(email)
    minutes = settings.OTP_EXPIRE_MINUTES if expire_minutes is None else expire_minutes

    passcode = store.put(email, generate_otp(), timedelta(minutes=minutes))

    try:
        await send_otp_email(mailer, email, passcode.code, minutes)
    except DeliveryFailed:
        store.discard(passcode)
        logger.warning("OTP delivery failed for %s", email)
        raise

    logger.info("OTP issued for %s (valid %d min)", email, minutes)
    return passcode


def validate_and_consume(store: OtpStore, email: str, code: str) -> None:
    """Single use: a matching, unexpired code is deleted as it is accepted."""
    if not store.consume(_normalize_email(email), code.strip()):
        raise InvalidOrExpiredOTP()
