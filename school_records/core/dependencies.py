from functools import lru_cache

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from school_records.core.database import get_db
from school_records.core.exceptions import InvalidToken
from school_records.core.otp_store import InMemoryOtpStore, OtpStore
from school_records.core.security import TokenClaims, verify_access_token
from school_records.models.principal import Principal

bearer = HTTPBearer(auto_error=False)


@lru_cache()
def get_otp_store() -> OtpStore:
    # one store per process, shared by every request
    return InMemoryOtpStore()


def get_token_claims(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer),
) -> TokenClaims:
    """Bearer guard: signature, algorithm, expiry and token type."""
    if not credentials:
        raise InvalidToken("authorization header missing")
    return verify_access_token(credentials.credentials)


async def get_current_principal(
    claims: TokenClaims = Depends(get_token_claims),
    db: AsyncSession = Depends(get_db),
) -> Principal:
    """
    Resolves the token to its stored principal.

    The subject is an email for some tokens and an id for others, so it is
    never used for the lookup; only the ``pid`` claim is.
    """
    if not claims.principal_id:
        raise InvalidToken()

    principal = await db.get(Principal, claims.principal_id)
    if principal is None:
        raise InvalidToken()

    if claims.role and principal.role != claims.role:
        raise InvalidToken()

    return principal
