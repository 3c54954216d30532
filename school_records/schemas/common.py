from datetime import date
from typing import Annotated

from pydantic import BaseModel, StringConstraints


RecordIdStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=64)]


class RecordBase(BaseModel):
    """
    Fields shared by every record kind.

    Unknown keys are kept so older clients that send extra fields do not lose
    data on round trips through the document store.
    """
    id: RecordIdStr
    full_name: str
    date_of_birth: date | None = None
    gender: str | None = None
    address: str | None = None
    contact_number: str | None = None
    email_address: str | None = None
    emergency_contact: str | None = None

    model_config = {"extra": "allow"}


class RecordUpdateMixin(BaseModel):
    # current revision, for optimistic concurrency; the stored one is used when omitted
    rev: str | None = None


class AttendanceRecord(BaseModel):
    date: date
    status: str


class LeaveRecord(BaseModel):
    start_date: date
    end_date: date
    reason: str
    status: str | None = None


class MessageResponse(BaseModel):
    message: str
    id: str | None = None
    rev: str | None = None


class QrCodeResponse(BaseModel):
    message: str
    qr_code: str  # base64 PNG
