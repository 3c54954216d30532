from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import anyio
from jose import JWTError, jwt
from passlib.context import CryptContext

from school_records.core.config import settings
from school_records.core.exceptions import InvalidToken

# ── Bcrypt Password Hashing ───────────────────────────────────────────
# "deprecated=auto" → old hashes are silently re-hashed on next login
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(plain: str) -> str:
    """
    Hash a plaintext password with bcrypt via passlib.
    bcrypt generates a unique salt per call, so the same password gives
    a different hash each time.
    """
    return pwd_context.hash(plain)


def verify_password(plain: str, hashed: str | None) -> bool:
    """
    Constant-time bcrypt comparison via passlib.
    A missing or malformed hash never matches.
    """
    if not hashed:
        return False
    try:
        return pwd_context.verify(plain, hashed)
    except ValueError:
        return False


# bcrypt is CPU bound; keep it off the event loop
async def hash_password_async(plain: str) -> str:
    return await anyio.to_thread.run_sync(hash_password, plain)


async def verify_password_async(plain: str, hashed: str | None) -> bool:
    return await anyio.to_thread.run_sync(verify_password, plain, hashed)


# ── JWT Token ─────────────────────────────────────────────────────────
@dataclass(frozen=True)
class TokenClaims:
    subject: str
    principal_id: str | None
    role: str | None
    email: str | None
    expires_at: datetime


def create_access_token(
    subject: str,
    *,
    role: str,
    principal_id: str | None = None,
    email: str | None = None,
    expires_minutes: int,
    now: datetime | None = None,
) -> str:
    """
    Creates a signed JWT. Change SECRET_KEY in .env to invalidate all tokens.

    Payload contains:
      sub  : login identifier (email for faculty, id for students)
      role : "faculty" | "student"
      pid  : principal id, the only claim used to find the account
      email: for frontend display
      type : guards against using other token types
      iat  : issued at
      exp  : expiry
    """
    now = now or datetime.now(timezone.utc)
    payload = {
        "sub":   str(subject),
        "role":  role,
        "pid":   principal_id,
        "email": email,
        "type":  "access",
        "iat":   now,
        "exp":   now + timedelta(minutes=expires_minutes),
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> dict:
    """
    Decodes and verifies JWT signature + expiry.
    Only the configured algorithm is accepted.
    Raises jose.JWTError on any failure.
    """
    return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])


def verify_access_token(token: str) -> TokenClaims:
    try:
        payload = decode_access_token(token)
    except JWTError:
        raise InvalidToken()

    if payload.get("type") != "access":
        raise InvalidToken()

    sub = str(payload.get("sub") or "").strip()
    if not sub:
        raise InvalidToken()

    try:
        expires_at = datetime.fromtimestamp(int(payload["exp"]), tz=timezone.utc)
    except (KeyError, TypeError, ValueError):
        raise InvalidToken()

    # jose still accepts a token in its exact expiry second
    if expires_at <= datetime.now(timezone.utc):
        raise InvalidToken()

    return TokenClaims(
        subject=sub,
        principal_id=payload.get("pid"),
        role=payload.get("role"),
        email=payload.get("email"),
        expires_at=expires_at,
    )
