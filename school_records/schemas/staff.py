from datetime import date

from pydantic import BaseModel, Field

from school_records.schemas.common import RecordBase, RecordUpdateMixin


class TimeOff(BaseModel):
    type: str
    hours: int = Field(..., ge=0)
    date: date


class PayrollInfo(BaseModel):
    direct_deposit: str | None = None
    tax_withholdings: dict[str, float] = {}


class StaffRecord(RecordBase):
    job_title: str | None = None
    department: str | None = None
    start_date: date | None = None
    salary: float | None = Field(None, ge=0)
    benefits: list[str] = []
    education_level: str | None = None
    certifications: list[str] = []
    experience: int = Field(0, ge=0)
    professional_development: list[str] = []
    ceus: int = Field(0, ge=0)
    employee_id: str | None = None
    employment_status: str | None = None
    work_hours: str | None = None
    time_off: list[TimeOff] = []
    payroll_info: PayrollInfo | None = None


class StaffRecordUpdate(StaffRecord, RecordUpdateMixin):
    pass
