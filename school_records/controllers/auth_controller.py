import logging
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from school_records.controllers.otp_controller import validate_and_consume
from school_records.core.config import settings
from school_records.core.exceptions import (
    BadRequestError,
    ConflictError,
    DuplicateEmail,
    DuplicateID,
    IncorrectPassword,
    NotFoundError,
)
from school_records.core.otp_store import OtpStore
from school_records.core.security import (
    create_access_token,
    hash_password_async,
    verify_password_async,
)
from school_records.models.principal import Principal, PrincipalRole
from school_records.schemas.auth import RegisterBase, TokenResponse

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RoleConfig:
    """What differs between the faculty and the student flow."""
    role: PrincipalRole
    label: str
    login_field: str          # "email" | "id"
    token_ttl_setting: str

    @property
    def token_ttl_minutes(self) -> int:
        return getattr(settings, self.token_ttl_setting)


FACULTY = RoleConfig(
    role=PrincipalRole.FACULTY,
    label="Faculty",
    login_field="email",
    token_ttl_setting="FACULTY_TOKEN_EXPIRE_MINUTES",
)

STUDENT = RoleConfig(
    role=PrincipalRole.STUDENT,
    label="Student",
    login_field="id",
    token_ttl_setting="STUDENT_TOKEN_EXPIRE_MINUTES",
)


def issue_token(cfg: RoleConfig, principal: Principal, subject: str, message: str) -> TokenResponse:
    ttl = cfg.token_ttl_minutes
    token = create_access_token(
        subject,
        role=cfg.role.value,
        principal_id=principal.id,
        email=principal.email,
        expires_minutes=ttl,
    )
    return TokenResponse(message=message, token=token, expires_in=ttl * 60)


async def register(
    cfg: RoleConfig,
    payload: RegisterBase,
    db: AsyncSession,
    otp_store: OtpStore,
    designation: str | None = None,
) -> TokenResponse:
    """
    OTP-verified registration, shared by faculty and students.

    Order matters: the OTP is consumed first, then id and email are checked.
    The checks only choose the error message; the primary key and the unique
    email index are what actually keep two concurrent registrations from
    both being stored.
    """
    if payload.type and payload.type.strip().lower() != cfg.role.value:
        raise BadRequestError(f"type must be '{cfg.role.value}'")

    email = payload.email.strip().lower()

    # Step 1: one-time passcode
    validate_and_consume(otp_store, email, payload.otp)

    # Step 2/3: uniqueness
    if await db.get(Principal, payload.id) is not None:
        raise DuplicateID()
    existing = await db.execute(select(Principal.id).where(Principal.email == email))
    if existing.first() is not None:
        raise DuplicateEmail()

    # Step 4: hash
    password_hash = await hash_password_async(payload.password)

    # Step 5: persist
    principal = Principal(
        id=payload.id,
        role=cfg.role.value,
        name=payload.name,
        email=email,
        designation=designation if cfg.role is PrincipalRole.FACULTY else None,
        password_hash=password_hash,
    )
    db.add(principal)
    try:
        await db.flush()
    except IntegrityError as e:
        logger.warning("Concurrent registration rejected for id=%s", payload.id)
        raise ConflictError("ID or email already exists") from e

    logger.info("%s registered: id=%s", cfg.label, principal.id)

    # Step 6: session token
    return issue_token(cfg, principal, email, f"{cfg.label} registered successfully")


async def login(cfg: RoleConfig, identifier: str, password: str, db: AsyncSession) -> TokenResponse:
    if cfg.login_field == "email":
        identifier = identifier.strip().lower()
        result = await db.execute(
            select(Principal).where(Principal.email == identifier, Principal.role == cfg.role.value)
        )
    else:
        identifier = identifier.strip()
        result = await db.execute(
            select(Principal).where(Principal.id == identifier, Principal.role == cfg.role.value)
        )
    principal = result.scalar_one_or_none()

    if principal is None:
        raise NotFoundError("email not found" if cfg.login_field == "email" else "ID not found")

    if not await verify_password_async(password, principal.password_hash):
        logger.warning("Failed %s login for %s", cfg.role.value, identifier)
        raise IncorrectPassword()

    logger.info("%s logged in: id=%s", cfg.label, principal.id)
    return issue_token(cfg, principal, identifier, "Login successful")
