from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse
from sqlalchemy.ext.asyncio import AsyncSession

from school_records.controllers import auth_controller
from school_records.controllers.auth_controller import FACULTY, STUDENT
from school_records.controllers.otp_controller import request_code
from school_records.core.database import get_db
from school_records.core.dependencies import get_current_principal, get_otp_store
from school_records.core.email_service import Mailer, get_mailer
from school_records.core.otp_store import OtpStore
from school_records.models.principal import Principal
from school_records.schemas.auth import (
    FacultyLoginRequest,
    FacultyRegisterRequest,
    OtpRequest,
    PrincipalInfo,
    StudentLoginRequest,
    StudentRegisterRequest,
    TokenResponse,
)

router = APIRouter(tags=["Auth"])


@router.post(
    "/request-otp",
    response_class=PlainTextResponse,
    summary="Request an email OTP",
    description="Sends a 6-digit one-time code to the email. A new request replaces the previous code.",
)
async def request_otp(
    payload: OtpRequest,
    otp_store: OtpStore = Depends(get_otp_store),
    mailer: Mailer = Depends(get_mailer),
) -> str:
    await request_code(otp_store, mailer, str(payload.email))
    return "otp send successful"


@router.post("/register-faculty", response_model=TokenResponse, summary="Register Faculty")
async def register_faculty(
    payload: FacultyRegisterRequest,
    db: AsyncSession = Depends(get_db),
    otp_store: OtpStore = Depends(get_otp_store),
) -> TokenResponse:
    return await auth_controller.register(FACULTY, payload, db, otp_store, designation=payload.designation)


@router.post("/register-student", response_model=TokenResponse, summary="Register Student")
async def register_student(
    payload: StudentRegisterRequest,
    db: AsyncSession = Depends(get_db),
    otp_store: OtpStore = Depends(get_otp_store),
) -> TokenResponse:
    return await auth_controller.register(STUDENT, payload, db, otp_store)


@router.post("/faculty-login", response_model=TokenResponse, summary="Faculty Login")
async def faculty_login(
    payload: FacultyLoginRequest,
    db: AsyncSession = Depends(get_db),
) -> TokenResponse:
    return await auth_controller.login(FACULTY, str(payload.email), payload.password, db)


@router.post("/student-login", response_model=TokenResponse, summary="Student Login")
async def student_login(
    payload: StudentLoginRequest,
    db: AsyncSession = Depends(get_db),
) -> TokenResponse:
    return await auth_controller.login(STUDENT, payload.id, payload.password, db)


@router.get(
    "/me",
    response_model=PrincipalInfo,
    summary="Current principal",
    description="Returns the authenticated profile. Requires `Authorization: Bearer <token>`.",
)
async def me(current: Principal = Depends(get_current_principal)) -> Principal:
    return current


@router.post(
    "/logout",
    summary="Logout",
    description="""
JWT tokens are stateless; the server has no session to destroy.
To logout: delete the token on the client. Tokens stop working at their expiry.
    """,
)
async def logout() -> dict:
    return {"detail": "Logged out. Delete your token on the client side."}
