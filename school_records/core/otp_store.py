import secrets
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable


OTP_LENGTH = 6
OTP_DIGITS = "0123456789"

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def generate_otp(length: int = OTP_LENGTH) -> str:
    # each digit is an independent draw from the CSPRNG
    return "".join(secrets.choice(OTP_DIGITS) for _ in range(length))


@dataclass(frozen=True)
class OneTimePasscode:
    email: str
    code: str
    expires_at: datetime


class OtpStore(ABC):
    """
    Pending passcodes keyed by email. At most one per email.

    Implementations must make ``consume`` an atomic check-then-delete so the
    same passcode can never be used twice.
    """

    @abstractmethod
    def put(self, email: str, code: str, ttl: timedelta) -> OneTimePasscode:
        """Store a passcode for ``email``, replacing any previous one."""

    @abstractmethod
    def consume(self, email: str, code: str) -> bool:
        """True and delete the entry when ``code`` matches and is unexpired."""

    @abstractmethod
    def discard(self, passcode: OneTimePasscode) -> None:
        """Drop ``passcode`` if it is still the one stored for its email."""


class InMemoryOtpStore(OtpStore):
    """Process-local store. Every method holds the lock for one dict operation."""

    def __init__(self, clock: Clock = utcnow):
        self._entries: dict[str, OneTimePasscode] = {}
        self._lock = threading.Lock()
        self._clock = clock

    def put(self, email: str, code: str, ttl: timedelta) -> OneTimePasscode:
        passcode = OneTimePasscode(email=email, code=code, expires_at=self._clock() + ttl)
        with self._lock:
            self._entries[email] = passcode
        return passcode

    def consume(self, email: str, code: str) -> bool:
        now = self._clock()
        with self._lock:
            entry = self._entries.get(email)
            if entry is None:
                return False
            # expired entries stay until overwritten, they just never match
            if now >= entry.expires_at:
                return False
            if not secrets.compare_digest(entry.code.encode(), code.encode()):
                return False
            del self._entries[email]
            return True

    def discard(self, passcode: OneTimePasscode) -> None:
        with self._lock:
            if self._entries.get(passcode.email) is passcode:
                del self._entries[passcode.email]

    def get(self, email: str) -> OneTimePasscode | None:
        with self._lock:
            return self._entries.get(email)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
