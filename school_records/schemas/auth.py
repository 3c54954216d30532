from datetime import datetime
from typing import Annotated

from pydantic import BaseModel, EmailStr, Field, StringConstraints


IdStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=64)]
# ids and emails must never be mistaken for each other
PrincipalIdStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=64, pattern=r"^[^@]+$")]
NameStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=150)]
OtpStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=16)]


# ── Request Bodies ────────────────────────────────────────────────────
class OtpRequest(BaseModel):
    email: EmailStr


class RegisterBase(BaseModel):
    id: PrincipalIdStr
    type: str | None = None   # must match the endpoint's role when sent
    name: NameStr
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=72)
    otp: OtpStr


class FacultyRegisterRequest(RegisterBase):
    designation: Annotated[str, StringConstraints(strip_whitespace=True, max_length=120)] = ""

    model_config = {
        "json_schema_extra": {
            "example": {
                "id": "FAC-001",
                "type": "faculty",
                "name": "Asha Rao",
                "email": "asha.rao@school.edu",
                "designation": "Senior Lecturer",
                "password": "YourPassword123",
                "otp": "042917",
            }
        }
    }


class StudentRegisterRequest(RegisterBase):
    model_config = {
        "json_schema_extra": {
            "example": {
                "id": "STU-2024-118",
                "type": "student",
                "name": "Ravi Kumar",
                "email": "ravi.kumar@school.edu",
                "password": "YourPassword123",
                "otp": "042917",
            }
        }
    }


class FacultyLoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class StudentLoginRequest(BaseModel):
    id: IdStr
    password: str = Field(..., min_length=1)


# ── Response Bodies ───────────────────────────────────────────────────
class TokenResponse(BaseModel):
    message: str
    token: str
    token_type: str = "bearer"
    expires_in: int  # seconds


class PrincipalInfo(BaseModel):
    """Safe profile; password_hash is never included here."""
    id: str
    role: str
    name: str
    email: str
    designation: str | None
    created_at: datetime

    model_config = {"from_attributes": True}
